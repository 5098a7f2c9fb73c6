from __future__ import annotations

import dataclasses
import logging
import threading
from typing import Optional

import numpy as np
from tqdm import tqdm

from watersort.game.session import WaterSorting
from watersort.puzzles.watersort import CAPACITY, WaterSort, get_puzzle
from watersort.solver.config import SolverConfig
from watersort.solver.result import Move, Solution, SolveResult, SolveStatus

logger = logging.getLogger(__name__)


def canonical_key(bottles: np.ndarray) -> bytes:
    """Hashable key that ignores bottle order.

    The pour rules treat every bottle alike, so states that differ only by a
    permutation of bottles are equally far from a win and are searched once.
    """
    return b"".join(sorted(row.tobytes() for row in bottles))


def gather_children(children: np.ndarray, moves, columns) -> np.ndarray:
    """Copy the selected ``(move, column)`` rows out of a batch of neighbours.

    The result owns its memory, so the full ``(action_size, batch, n, 4)`` batch can
    be released once the layer moves on.
    """
    return np.array(children[np.asarray(moves), np.asarray(columns)], copy=True)


def _as_snapshot(source) -> np.ndarray:
    if isinstance(source, WaterSorting):
        bottles = source.snapshot()
    else:
        bottles = np.asarray(source)
        if bottles.ndim != 2 or bottles.shape[-1] != CAPACITY:
            raise ValueError(
                f"Expected bottles of shape (n, {CAPACITY}), got {bottles.shape}"
            )
    snapshot = np.array(bottles, dtype=np.uint8, copy=True)
    snapshot.setflags(write=False)
    return snapshot


class WaterSolver:
    """Breadth-first solver over a private snapshot of a water sort puzzle.

    The snapshot is copied once in the constructor; afterwards the solver never
    looks at the live game again, so the game can keep being played (or reset)
    while a search runs.

    Each search layer is expanded in fixed-size batches through the environment's
    vmapped ``batched_get_neighbours``. New states are deduplicated on the host
    with :func:`canonical_key`, which also rules out undoing the previous pour
    (its result is the already-visited parent).

    Args:
        source: A :class:`WaterSorting` game or an ``(n, 4)`` array of color tags.
        config: Search limits; keyword overrides are applied on top of it.
    """

    def __init__(self, source, config: Optional[SolverConfig] = None, **overrides):
        self._snapshot = _as_snapshot(source)
        config = config or SolverConfig()
        if overrides:
            config = dataclasses.replace(config, **overrides)
        self.config = config

    @property
    def snapshot(self) -> np.ndarray:
        return self._snapshot

    def solution(
        self,
        max_moves: Optional[int] = None,
        cancel: Optional[threading.Event] = None,
        progress: bool = False,
    ) -> SolveResult:
        """Search for a solution of at most ``max_moves`` pours.

        Args:
            max_moves: Move budget, defaults to ``config.max_moves``.
            cancel: Checked between batches; once set the search returns
                ``SolveStatus.CANCELLED``.
            progress: Show a ``tqdm`` bar over search depth.

        Returns:
            A :class:`SolveResult`. Running out of budget or of ``max_states`` is
            reported as ``SolveStatus.UNSOLVABLE``, never raised.
        """
        if max_moves is None:
            max_moves = self.config.max_moves
        if max_moves < 0:
            raise ValueError(f"max_moves must be >= 0, got {max_moves}")

        root = self._snapshot
        if len(root) == 0:
            return SolveResult(SolveStatus.SOLVED, max_moves, solution=Solution(), explored=1)

        puzzle = get_puzzle(len(root))
        if bool(puzzle.is_solved(puzzle.from_bottles(root))):
            return SolveResult(SolveStatus.SOLVED, max_moves, solution=Solution(), explored=1)

        with tqdm(total=max_moves, desc="Solving", unit="move", disable=not progress) as bar:
            result = self._search(puzzle, root, max_moves, cancel, bar)

        if result.solved:
            logger.info(
                "Solved in %d moves after exploring %d states",
                len(result.solution),
                result.explored,
            )
        else:
            logger.info(
                "No solution within %d moves (%s, %d states explored%s)",
                max_moves,
                result.status.value,
                result.explored,
                ", state limit reached" if result.truncated else "",
            )
        return result

    def start(self, max_moves: Optional[int] = None) -> "SolveTask":
        """Run :meth:`solution` on a background thread."""
        task = SolveTask(self, max_moves)
        task.start()
        return task

    def _search(
        self,
        puzzle: WaterSort,
        root: np.ndarray,
        max_moves: int,
        cancel: Optional[threading.Event],
        bar: tqdm,
    ) -> SolveResult:
        batch_size = self.config.batch_size
        max_states = self.config.max_states

        # Node tables: node 0 is the root; every other node remembers how it was reached.
        parents = [-1]
        actions = [-1]
        visited = {canonical_key(root)}

        frontier = root[np.newaxis]
        frontier_ids = np.zeros(1, dtype=np.int64)

        def finish(status, depth, node=None, truncated=False):
            solution = None
            if node is not None:
                solution = self._trace(puzzle, parents, actions, node)
            return SolveResult(
                status,
                max_moves,
                solution=solution,
                explored=len(visited),
                depth=depth,
                truncated=truncated,
            )

        for depth in range(1, max_moves + 1):
            next_batches = []
            next_ids = []
            for start in range(0, len(frontier), batch_size):
                if cancel is not None and cancel.is_set():
                    logger.info("Search cancelled at depth %d", depth)
                    return finish(SolveStatus.CANCELLED, depth - 1)

                chunk = frontier[start : start + batch_size]
                chunk_ids = frontier_ids[start : start + batch_size]
                real = len(chunk)
                if real < batch_size:
                    chunk = np.pad(chunk, ((0, batch_size - real), (0, 0), (0, 0)), mode="edge")

                neighbours, costs = puzzle.batched_get_neighbours(puzzle.from_bottles(chunk))
                solved = puzzle.batched_is_solved(
                    puzzle.from_bottles(neighbours.bottles.reshape((-1,) + root.shape))
                )
                children = neighbours.host_fields()["bottles"]
                costs = np.asarray(costs)[:, :real]
                solved = np.asarray(solved).reshape(puzzle.action_size, batch_size)[:, :real]

                columns, moves = np.nonzero(np.isfinite(costs).T)
                kept_moves = []
                kept_columns = []
                for column, action in zip(columns, moves):
                    child = children[action, column]
                    key = canonical_key(child)
                    if key in visited:
                        continue
                    visited.add(key)
                    parents.append(int(chunk_ids[column]))
                    actions.append(int(action))
                    node = len(parents) - 1
                    if solved[action, column]:
                        return finish(SolveStatus.SOLVED, depth, node=node)
                    if len(visited) >= max_states:
                        logger.warning(
                            "State limit of %d reached at depth %d", max_states, depth
                        )
                        return finish(SolveStatus.UNSOLVABLE, depth, truncated=True)
                    kept_moves.append(action)
                    kept_columns.append(column)
                    next_ids.append(node)

                if kept_moves:
                    next_batches.append(gather_children(children, kept_moves, kept_columns))

            bar.update(1)
            bar.set_postfix(states=len(visited), frontier=len(next_ids))
            logger.debug(
                "Depth %d: %d new states, %d explored", depth, len(next_ids), len(visited)
            )
            if not next_ids:
                # Every reachable state has been seen; more moves cannot help.
                return finish(SolveStatus.UNSOLVABLE, depth)
            frontier = np.concatenate(next_batches)
            frontier_ids = np.asarray(next_ids, dtype=np.int64)

        return finish(SolveStatus.UNSOLVABLE, max_moves)

    @staticmethod
    def _trace(puzzle: WaterSort, parents: list[int], actions: list[int], node: int) -> Solution:
        moves = []
        while parents[node] != -1:
            moves.append(Move(*puzzle.decode_action(actions[node])))
            node = parents[node]
        return Solution(tuple(reversed(moves)))


class SolveTask:
    """A solver run on a background thread.

    The consumer polls :meth:`done`, waits with :meth:`result`, or stops the search
    early with :meth:`cancel`; a cancelled run still returns a consistent
    :class:`SolveResult` with status ``CANCELLED``.
    """

    def __init__(self, solver: WaterSolver, max_moves: Optional[int] = None):
        self._solver = solver
        self._max_moves = max_moves
        self._cancel = threading.Event()
        self._result: Optional[SolveResult] = None
        self._error: Optional[BaseException] = None
        self._thread = threading.Thread(target=self._run, name="watersort-solver", daemon=True)

    def start(self) -> None:
        self._thread.start()

    def _run(self) -> None:
        try:
            self._result = self._solver.solution(self._max_moves, cancel=self._cancel)
        except Exception as exc:
            logger.exception("Background solve failed")
            self._error = exc

    def cancel(self) -> None:
        self._cancel.set()

    def cancelled(self) -> bool:
        return self._cancel.is_set()

    def done(self) -> bool:
        return self._thread.ident is not None and not self._thread.is_alive()

    def result(self, timeout: Optional[float] = None) -> SolveResult:
        """Wait for the search and return its result.

        Raises:
            TimeoutError: If the search is still running after ``timeout`` seconds.
        """
        self._thread.join(timeout)
        if self._thread.is_alive():
            raise TimeoutError(f"Solver still running after {timeout} seconds")
        if self._error is not None:
            raise self._error
        return self._result


def solve(puzzle, max_moves: Optional[int] = None, **kwargs) -> SolveResult:
    """Solve ``puzzle`` (a :class:`WaterSorting` or bottle array) within ``max_moves`` pours.

    Extra keyword arguments override :class:`SolverConfig` fields.
    """
    return WaterSolver(puzzle, **kwargs).solution(max_moves)
