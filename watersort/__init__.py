"""
watersort: a water sort puzzle engine and solver built on JAX.

Liquid of several colors is spread over four-slot bottles; pours move the top
run of one color onto an empty bottle or onto the same color, and the puzzle is
won when every bottle is empty or holds four units of one color.
"""

# Core framework
from watersort.core import FieldDescriptor, Puzzle, PuzzleState, state_dataclass
from watersort.errors import ConfigurationError
from watersort.game import PourRecord, WaterSorting, replay
from watersort.levels import Level, available_levels, load_level
from watersort.puzzles import CAPACITY, WaterSort, get_puzzle
from watersort.solver import (
    Move,
    Solution,
    SolveResult,
    SolverConfig,
    SolveStatus,
    SolveTask,
    WaterSolver,
    decode_solution,
    encode_solution,
    solve,
)
from watersort.utils import EMPTY, Color

__version__ = "0.1.0"

__all__ = [
    # Core framework
    "Puzzle",
    "PuzzleState",
    "FieldDescriptor",
    "state_dataclass",
    # Environment
    "CAPACITY",
    "WaterSort",
    "get_puzzle",
    # Game
    "Color",
    "EMPTY",
    "ConfigurationError",
    "PourRecord",
    "WaterSorting",
    "replay",
    # Levels
    "Level",
    "available_levels",
    "load_level",
    # Solver
    "Move",
    "Solution",
    "SolveResult",
    "SolveStatus",
    "SolveTask",
    "SolverConfig",
    "WaterSolver",
    "decode_solution",
    "encode_solution",
    "solve",
]
