from __future__ import annotations

import logging
from typing import NamedTuple

import numpy as np

from watersort.errors import ConfigurationError
from watersort.puzzles.watersort import CAPACITY, WaterSort, get_puzzle
from watersort.utils.palette import EMPTY, parse_color

logger = logging.getLogger(__name__)


class PourRecord(NamedTuple):
    """One history entry: enough to put ``amount`` units back from ``target`` to ``source``."""

    source: int
    target: int
    amount: int


class WaterSorting:
    """Interactive water sort game.

    Holds the live bottle contents and the pour history. Pour legality and the
    win condition are delegated to the :class:`~watersort.puzzles.WaterSort`
    environment for the current bottle count, so the interactive game and the
    solver share one set of rules.

    Typical use::

        game = WaterSorting()
        game.init_bottle(Color.RED, Color.BLUE)
        game.init_bottle(Color.BLUE)
        game.init_empty_bottle()
        game.pour(0, 1)

    Illegal pours are not errors: :meth:`pour` returns ``False`` and leaves the
    game untouched, so callers fed by free-form input need no exception handling.
    """

    def __init__(self):
        self._bottles = np.zeros((0, CAPACITY), dtype=np.uint8)
        self._history: list[PourRecord] = []

    def init_bottle(self, *colors) -> None:
        """Append a bottle holding ``colors`` from bottom to top.

        The colors may also be passed as a single list, tuple or 1-d array.

        Raises:
            ConfigurationError: If more than four colors are given or a color is
                not a valid liquid tag.
        """
        if len(colors) == 1 and (
            isinstance(colors[0], (list, tuple))
            or (isinstance(colors[0], np.ndarray) and colors[0].ndim == 1)
        ):
            colors = tuple(colors[0])
        if len(colors) > CAPACITY:
            raise ConfigurationError(
                f"A bottle holds at most {CAPACITY} units, got {len(colors)}"
            )
        row = np.full((1, CAPACITY), EMPTY, dtype=np.uint8)
        for slot, color in enumerate(colors):
            try:
                row[0, slot] = parse_color(color)
            except ValueError as exc:
                raise ConfigurationError(
                    f"Bottle {len(self._bottles)}, slot {slot}: {exc}"
                ) from exc
        self._bottles = np.concatenate([self._bottles, row], axis=0)

    def init_empty_bottle(self) -> None:
        self.init_bottle()

    def bottle_count(self) -> int:
        return len(self._bottles)

    def bottles(self) -> np.ndarray:
        """Read-only copy of all bottles, shape ``(bottle_count, 4)``, bottom to top.

        Empty slots hold ``0``.
        """
        view = self._bottles.copy()
        view.setflags(write=False)
        return view

    def snapshot(self) -> np.ndarray:
        """Immutable copy of the bottle contents for a solver."""
        return self.bottles()

    @property
    def history(self) -> tuple[PourRecord, ...]:
        return tuple(self._history)

    def _puzzle(self) -> WaterSort:
        return get_puzzle(self.bottle_count())

    def pour(self, source: int, target: int) -> bool:
        """Pour from bottle ``source`` into bottle ``target``.

        Returns:
            ``True`` if liquid moved, ``False`` if the pour was illegal and
            nothing changed.
        """
        count = self.bottle_count()
        if not (0 <= source < count and 0 <= target < count) or source == target:
            logger.debug("Rejected pour %s -> %s with %d bottles", source, target, count)
            return False

        puzzle = self._puzzle()
        state = puzzle.from_bottles(self._bottles)
        next_state, cost = puzzle.get_actions(state, puzzle.encode_action(source, target))
        if not np.isfinite(cost):
            logger.debug("Rejected pour %s -> %s", source, target)
            return False

        next_bottles = next_state.host_fields()["bottles"].astype(np.uint8)
        amount = int(
            np.count_nonzero(next_bottles[target]) - np.count_nonzero(self._bottles[target])
        )
        self._bottles = next_bottles
        self._history.append(PourRecord(int(source), int(target), amount))
        return True

    def undo_available(self) -> bool:
        return bool(self._history)

    def undo(self) -> bool:
        """Revert the most recent pour. Returns ``False`` when there is nothing to undo."""
        if not self._history:
            return False
        record = self._history.pop()
        source_row = self._bottles[record.source]
        target_row = self._bottles[record.target]
        target_fill = int(np.count_nonzero(target_row))
        source_fill = int(np.count_nonzero(source_row))
        color = target_row[target_fill - 1]
        target_row[target_fill - record.amount : target_fill] = EMPTY
        source_row[source_fill : source_fill + record.amount] = color
        return True

    def reset(self) -> None:
        """Remove every bottle and forget the history.

        The caller re-initialises the bottles afterwards, e.g. by applying the
        same level again.
        """
        self._bottles = np.zeros((0, CAPACITY), dtype=np.uint8)
        self._history.clear()

    def win(self) -> bool:
        if self.bottle_count() == 0:
            return True
        puzzle = self._puzzle()
        return bool(puzzle.is_solved(puzzle.from_bottles(self._bottles)))

    def __str__(self):
        if self.bottle_count() == 0:
            return "(no bottles)"
        puzzle = self._puzzle()
        return str(puzzle.from_bottles(self._bottles))

    def __repr__(self):
        return (
            f"WaterSorting(bottles={self.bottle_count()}, "
            f"history={len(self._history)})"
        )
