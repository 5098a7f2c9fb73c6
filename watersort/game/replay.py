from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable

from watersort.game.session import WaterSorting

logger = logging.getLogger(__name__)


def replay(
    game: WaterSorting,
    moves: Iterable[tuple[int, int]],
    delay: float = 0.0,
    on_step: Callable[[int, int, int, bool], None] | None = None,
) -> int:
    """Replay ``moves`` on ``game`` one ordinary pour at a time.

    Every step goes through :meth:`WaterSorting.pour`, so a solution computed for
    an older snapshot simply stops having an effect once the live game diverges.

    Args:
        game: The live game.
        moves: ``(source, target)`` pairs, e.g. a :class:`~watersort.solver.Solution`.
        delay: Seconds to sleep after each step (animation pacing).
        on_step: Called as ``on_step(index, source, target, applied)`` after each step.

    Returns:
        Number of pours that were applied.
    """
    applied_count = 0
    for index, (source, target) in enumerate(moves):
        applied = game.pour(source, target)
        if applied:
            applied_count += 1
        else:
            logger.info("Replay step %d (%d -> %d) no longer applies", index, source, target)
        if on_step is not None:
            on_step(index, source, target, applied)
        if delay > 0:
            time.sleep(delay)
    return applied_count
