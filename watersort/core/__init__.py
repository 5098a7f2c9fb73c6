"""
Core puzzle framework components.

This module provides the base class and the immutable state container used by
the watersort environments.
"""

from watersort.core.puzzle_base import Puzzle
from watersort.core.puzzle_state import FieldDescriptor, PuzzleState, state_dataclass

__all__ = [
    "Puzzle",
    "PuzzleState",
    "FieldDescriptor",
    "state_dataclass",
]
