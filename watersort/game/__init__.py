"""
Interactive game state.

``WaterSorting`` is the caller-owned puzzle a front end mutates through pours,
undo and reset; ``replay`` feeds a solver's moves back through ordinary pours.
"""

from watersort.game.replay import replay
from watersort.game.session import PourRecord, WaterSorting

__all__ = [
    "PourRecord",
    "WaterSorting",
    "replay",
]
