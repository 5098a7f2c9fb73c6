import numpy as np
import pytest

from watersort import Move, Solution, decode_solution, encode_solution
from watersort.solver.encoding import CELL_TYPE


def test_encode_layout():
    cells = encode_solution(Solution(((0, 2), (1, 0), (1, 2))))
    assert cells.dtype == CELL_TYPE
    assert cells.tolist() == [3, 0, 2, 1, 0, 1, 2]


def test_encode_empty_solution():
    assert encode_solution(Solution()).tolist() == [0]
    assert len(decode_solution([0])) == 0


def test_decode_reads_exactly_the_announced_cells():
    solution = decode_solution(np.array([2, 4, 1, 3, 0, 9, 9, 9], dtype=np.uint32))
    assert solution.moves == (Move(4, 1), Move(3, 0))


def test_encode_accepts_plain_pairs():
    assert encode_solution([(5, 6)]).tolist() == [1, 5, 6]


@pytest.mark.parametrize("cells", [[], [2, 0, 1, 1], [[1, 0, 1]]])
def test_decode_rejects_bad_buffers(cells):
    with pytest.raises(ValueError):
        decode_solution(np.asarray(cells, dtype=np.uint32))
