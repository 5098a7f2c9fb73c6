from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, NamedTuple, Optional

__all__ = ["Move", "Solution", "SolveStatus", "SolveResult"]


class Move(NamedTuple):
    """A pour from bottle ``source`` into bottle ``target`` (0-based ids)."""

    source: int
    target: int

    def __str__(self) -> str:
        return f"{self.source}->{self.target}"


@dataclass(frozen=True)
class Solution:
    """Ordered pours that take the solved snapshot to a winning state."""

    moves: tuple[Move, ...] = ()

    def __post_init__(self):
        object.__setattr__(
            self, "moves", tuple(Move(int(s), int(t)) for s, t in self.moves)
        )

    def __len__(self) -> int:
        return len(self.moves)

    def __iter__(self) -> Iterator[Move]:
        return iter(self.moves)

    def __getitem__(self, index: int) -> Move:
        return self.moves[index]


class SolveStatus(Enum):
    SOLVED = "solved"
    # No solution within the move budget (or within the state limit, see `truncated`).
    UNSOLVABLE = "unsolvable"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class SolveResult:
    """Outcome of one solver run.

    Attributes:
        status: How the search ended.
        solution: The moves found, only set when ``status`` is ``SOLVED``.
        max_moves: The move budget the search ran with.
        explored: Number of distinct (canonical) states discovered.
        depth: Deepest search layer fully or partially expanded.
        truncated: The state limit stopped the search before the budget was exhausted.
    """

    status: SolveStatus
    max_moves: int
    solution: Optional[Solution] = None
    explored: int = 0
    depth: int = 0
    truncated: bool = field(default=False)

    @property
    def solved(self) -> bool:
        return self.status is SolveStatus.SOLVED

    def __bool__(self) -> bool:
        return self.solved
