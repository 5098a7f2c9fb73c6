"""
Solver configuration.

All values are plain defaults; the command line and callers override them per
run through keyword arguments.
"""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_MAX_MOVES = 20


@dataclass(frozen=True)
class SolverConfig:
    """
    Search limits for :class:`~watersort.solver.WaterSolver`.

    Attributes:
        max_moves: Move budget; solutions never exceed it.
        batch_size: States expanded per vectorised neighbour call. The last batch
            of each layer is padded to this size so kernels compile once.
        max_states: Upper bound on distinct states kept in memory. Reaching it
            ends the search as unsolvable with ``truncated=True``.
    """

    max_moves: int = DEFAULT_MAX_MOVES
    batch_size: int = 256
    max_states: int = 200_000

    def __post_init__(self):
        if self.max_moves < 0:
            raise ValueError(f"max_moves must be >= 0, got {self.max_moves}")
        if self.batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {self.batch_size}")
        if self.max_states < 1:
            raise ValueError(f"max_states must be >= 1, got {self.max_states}")
