"""knucklebones package.

Board model, rule engine, expectiminimax search, self-play, and a simple CLI.

Convenience imports are exposed for common workflows.
"""

from .board import format_board, parse_board, score
from .errors import ColumnFullError, IllegalMoveError, InvalidPositionError
from .rules import Position, apply_move
from .solver import SearchConfig, best_move, evaluate, explore, solve

__all__ = [
    "Position",
    "SearchConfig",
    "apply_move",
    "best_move",
    "evaluate",
    "explore",
    "solve",
    "parse_board",
    "format_board",
    "score",
    "ColumnFullError",
    "IllegalMoveError",
    "InvalidPositionError",
]
