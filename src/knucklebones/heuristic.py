"""
Leaf evaluation. Positive values favour player 1.

The heuristic credits every empty cell with the mean of a fair die (3.5).
It understates final totals (optimal play doubles up more often than chance)
and overstates tempo: a lead in filled cells is treated as permanent even though
elimination can erase it. Even search depths balance who gets the last
doubling opportunity.

Each player's raw empty-cell count is used, uncapped by the number of turns
the other player has left.
"""
from __future__ import annotations

from .board import Board, empty_cells, score

EXPECTED_DIE = 3.5
FORCED_WIN_BONUS = 3.0


def modified_score(board: Board, fill_value: float = EXPECTED_DIE) -> float:
    return score(board) + empty_cells(board) * fill_value


def heuristic_value(player1: Board, player2: Board, fill_value: float = EXPECTED_DIE) -> float:
    return modified_score(player1, fill_value) - modified_score(player2, fill_value)


def terminal_value(player1: Board, player2: Board) -> float:
    return float(score(player1) - score(player2))


def forced_win_bonus(player: int, bonus: float = FORCED_WIN_BONUS) -> float:
    """Signed bonus for a proven win of ``player``."""
    return bonus if player == 1 else -bonus
