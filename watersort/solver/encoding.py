"""
Flat integer encoding of a solution for consumers that read raw memory.

Layout (``uint32`` cells): ``[C, from_1, to_1, from_2, to_2, ..., from_C, to_C]``.
A consumer reads cell 0, then exactly ``2 * C`` more cells; there is no terminator.
"""

from __future__ import annotations

from collections.abc import Iterable

import numpy as np

from watersort.solver.result import Move, Solution

CELL_TYPE = np.uint32


def encode_solution(solution: Solution | Iterable[tuple[int, int]]) -> np.ndarray:
    moves = list(solution)
    cells = np.zeros(1 + 2 * len(moves), dtype=CELL_TYPE)
    cells[0] = len(moves)
    for index, (source, target) in enumerate(moves):
        cells[1 + 2 * index] = source
        cells[2 + 2 * index] = target
    return cells


def decode_solution(cells) -> Solution:
    """Decode the leading ``1 + 2C`` cells of ``cells``; anything after is ignored.

    Raises:
        ValueError: If ``cells`` is empty or shorter than its count cell announces.
    """
    cells = np.asarray(cells)
    if cells.ndim != 1 or len(cells) == 0:
        raise ValueError("Solution buffer must be a non-empty flat sequence of cells")
    count = int(cells[0])
    needed = 1 + 2 * count
    if len(cells) < needed:
        raise ValueError(
            f"Solution buffer announces {count} moves ({needed} cells) but holds {len(cells)}"
        )
    pairs = cells[1:needed].reshape(count, 2)
    return Solution(tuple(Move(int(s), int(t)) for s, t in pairs))
