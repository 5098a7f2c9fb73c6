"""
Puzzle implementations for watersort.

``WaterSort`` is the environment for one bottle count; ``get_puzzle`` returns the
shared, jit-compiled instance for a given count.
"""

from watersort.puzzles.watersort import (
    CAPACITY,
    WaterSort,
    bottle_fill,
    bottles_solved,
    get_puzzle,
    pour_bottles,
)

__all__ = [
    "CAPACITY",
    "WaterSort",
    "bottle_fill",
    "bottles_solved",
    "get_puzzle",
    "pour_bottles",
]
