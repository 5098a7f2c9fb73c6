"""Tests for the breadth-first solver and its background task."""

import threading

import numpy as np
import pytest

from watersort import (
    Color,
    Move,
    Solution,
    SolverConfig,
    SolveStatus,
    WaterSolver,
    replay,
    solve,
)
from watersort.solver.bfs import canonical_key, gather_children

R, B = Color.RED, Color.BLUE


class CancelAfter(threading.Event):
    """Event that sets itself on the n-th check."""

    def __init__(self, checks: int):
        super().__init__()
        self._remaining = checks

    def is_set(self) -> bool:
        self._remaining -= 1
        if self._remaining <= 0:
            self.set()
        return super().is_set()


class TestSolve:
    """Searches on small hand-checked puzzles."""

    def test_minimal_solution_is_found(self, two_color_game):
        result = solve(two_color_game, max_moves=3)
        assert result.status is SolveStatus.SOLVED
        assert result.solved and bool(result)
        assert len(result.solution) == 3
        assert result.max_moves == 3

        assert replay(two_color_game, result.solution) == 3
        assert two_color_game.win()

    def test_budget_below_optimum_is_unsolvable(self, two_color_game):
        result = solve(two_color_game, max_moves=2)
        assert result.status is SolveStatus.UNSOLVABLE
        assert result.solution is None
        assert not result.truncated
        assert not result

    def test_solution_never_exceeds_budget(self, striped_game):
        result = solve(striped_game, max_moves=20)
        assert result.solved
        assert 0 < len(result.solution) <= 20
        replay(striped_game, result.solution)
        assert striped_game.win()

    def test_small_batches_give_same_length(self, striped_game):
        wide = solve(striped_game, max_moves=20)
        narrow = solve(striped_game, max_moves=20, batch_size=3)
        assert narrow.solved
        assert len(narrow.solution) == len(wide.solution)

    def test_no_legal_move_is_unsolvable(self, make_game):
        game = make_game([R, B, R, B], [B, R, B, R])
        result = solve(game, max_moves=10)
        assert result.status is SolveStatus.UNSOLVABLE
        assert result.depth == 1

    def test_unwinnable_colors_stop_early(self, make_game):
        # One blue unit can never fill a bottle; every pour leads back to a known state.
        game = make_game([R, R, R, R], [B], [])
        result = solve(game, max_moves=20)
        assert result.status is SolveStatus.UNSOLVABLE
        assert result.depth < 20

    def test_already_solved_returns_empty_solution(self, make_game):
        game = make_game([R, R, R, R], [B, B, B, B], [])
        result = solve(game, max_moves=0)
        assert result.solved
        assert len(result.solution) == 0

    def test_zero_budget_on_unsolved_puzzle(self, two_color_game):
        result = solve(two_color_game, max_moves=0)
        assert result.status is SolveStatus.UNSOLVABLE
        assert result.depth == 0

    def test_no_bottles_is_solved(self):
        result = solve(np.zeros((0, 4), dtype=np.uint8))
        assert result.solved
        assert len(result.solution) == 0

    def test_array_input(self):
        bottles = np.array([[R, R, B, B], [B, B, R, R], [0, 0, 0, 0]], dtype=np.uint8)
        result = solve(bottles, max_moves=5)
        assert result.solved
        assert len(result.solution) == 3

    @pytest.mark.parametrize("shape", [(4,), (3, 5), (2, 3, 4)])
    def test_bad_array_shape(self, shape):
        with pytest.raises(ValueError):
            WaterSolver(np.zeros(shape, dtype=np.uint8))

    def test_negative_budget_is_rejected(self, two_color_game):
        with pytest.raises(ValueError):
            solve(two_color_game, max_moves=-1)

    def test_state_limit_truncates(self, striped_game):
        result = solve(striped_game, max_moves=20, max_states=2)
        assert result.status is SolveStatus.UNSOLVABLE
        assert result.truncated
        assert result.explored == 2

    def test_cancelled_mid_search(self, striped_game):
        # One state per batch: the flag trips on the first batch of depth 3.
        cancel = CancelAfter(4)
        result = WaterSolver(striped_game, batch_size=1).solution(20, cancel=cancel)
        assert result.status is SolveStatus.CANCELLED
        assert result.solution is None
        assert result.depth == 2
        assert result.depth < result.max_moves
        assert result.explored > 1

    def test_cancelled_before_start(self, two_color_game):
        cancel = threading.Event()
        cancel.set()
        result = WaterSolver(two_color_game).solution(5, cancel=cancel)
        assert result.status is SolveStatus.CANCELLED
        assert result.solution is None


class TestSnapshot:
    """The solver works on a private copy of the game."""

    def test_snapshot_survives_game_changes(self, two_color_game):
        original = two_color_game.bottles()
        solver = WaterSolver(two_color_game)

        assert two_color_game.pour(0, 2)
        two_color_game.reset()

        assert np.array_equal(solver.snapshot, original)
        assert not solver.snapshot.flags.writeable
        result = solver.solution(3)
        assert result.solved
        assert len(result.solution) == 3

    def test_replay_on_diverged_game_does_not_raise(self, two_color_game):
        result = solve(two_color_game, max_moves=3)
        assert two_color_game.pour(1, 2)

        applied = replay(two_color_game, result.solution)
        assert 0 <= applied < len(result.solution)

    def test_config_overrides(self, two_color_game):
        config = SolverConfig(max_moves=3, batch_size=8)
        solver = WaterSolver(two_color_game, config, max_states=50)
        assert solver.config.max_moves == 3
        assert solver.config.batch_size == 8
        assert solver.config.max_states == 50
        assert solver.solution().solved

    @pytest.mark.parametrize(
        "kwargs", [{"max_moves": -1}, {"batch_size": 0}, {"max_states": 0}]
    )
    def test_invalid_config(self, kwargs):
        with pytest.raises(ValueError):
            SolverConfig(**kwargs)


class TestSolveTask:
    """Background searches."""

    def test_background_result(self, two_color_game):
        task = WaterSolver(two_color_game).start(max_moves=3)
        result = task.result(timeout=120)
        assert task.done()
        assert not task.cancelled()
        assert result.solved
        assert len(result.solution) == 3

    def test_cancel_marks_task(self, striped_game):
        task = WaterSolver(striped_game).start(max_moves=20)
        task.cancel()
        result = task.result(timeout=120)
        assert task.cancelled()
        # The search may finish before it sees the flag.
        assert result.status in (SolveStatus.CANCELLED, SolveStatus.SOLVED)
        if result.status is SolveStatus.CANCELLED:
            assert result.solution is None


class TestResultTypes:
    """Small value types."""

    def test_solution_normalises_pairs(self):
        solution = Solution(((np.uint32(1), np.uint32(2)), (0, 3)))
        assert solution.moves == (Move(1, 2), Move(0, 3))
        assert list(solution) == [(1, 2), (0, 3)]
        assert solution[1].target == 3
        assert str(solution[0]) == "1->2"

    def test_canonical_key_ignores_bottle_order(self):
        bottles = np.array([[R, B, 0, 0], [B, 0, 0, 0], [0, 0, 0, 0]], dtype=np.uint8)
        assert canonical_key(bottles) == canonical_key(bottles[::-1])
        assert canonical_key(bottles) != canonical_key(bottles[:, ::-1])

    def test_gathered_children_own_their_memory(self):
        children = np.arange(9 * 2 * 3 * 4, dtype=np.uint8).reshape(9, 2, 3, 4)
        rows = gather_children(children, [4, 0], [1, 0])
        assert rows.shape == (2, 3, 4)
        assert np.array_equal(rows[0], children[4, 1])
        assert np.array_equal(rows[1], children[0, 0])
        assert not np.shares_memory(rows, children)
        assert rows.base is None
