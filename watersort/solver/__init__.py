"""
Bounded solver for water sort puzzles.

``WaterSolver`` runs a breadth-first search over a private snapshot and returns
a ``SolveResult``; ``encode_solution`` / ``decode_solution`` convert solutions to
and from the flat cell layout used by raw-memory consumers.
"""

from watersort.solver.bfs import SolveTask, WaterSolver, canonical_key, solve
from watersort.solver.config import DEFAULT_MAX_MOVES, SolverConfig
from watersort.solver.encoding import decode_solution, encode_solution
from watersort.solver.result import Move, Solution, SolveResult, SolveStatus

__all__ = [
    "DEFAULT_MAX_MOVES",
    "Move",
    "Solution",
    "SolveResult",
    "SolveStatus",
    "SolveTask",
    "SolverConfig",
    "WaterSolver",
    "canonical_key",
    "decode_solution",
    "encode_solution",
    "solve",
]
