"""
Positions and the rule engine: placement with elimination, turn order, ingestion checks.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional, Tuple

from .board import (
    Board,
    check_die,
    empty_board,
    is_full,
    legal_columns,
    make_board,
    place,
    remove_value,
    score,
)
from .errors import IllegalMoveError, InvalidPositionError

PLAYERS = (1, 2)


def other(player: int) -> int:
    return 2 if player == 1 else 1


@dataclass(frozen=True)
class Position:
    player1: Board
    player2: Board
    to_move: int = 1
    die: Optional[int] = None

    def board_of(self, player: int) -> Board:
        return self.player1 if player == 1 else self.player2

    @property
    def mover_board(self) -> Board:
        return self.board_of(self.to_move)

    @property
    def opponent_board(self) -> Board:
        return self.board_of(other(self.to_move))


def initial_position(die: Optional[int] = None, to_move: int = 1) -> Position:
    return Position(empty_board(), empty_board(), to_move, die)


def apply_move(mover_board: Board, opponent_board: Board, column: int, value: int) -> Tuple[Board, Board]:
    """Place ``value`` in the mover's ``column`` and knock out matching opponent dice there."""
    if isinstance(column, bool) or not isinstance(column, int) or column not in legal_columns(mover_board):
        raise IllegalMoveError(f"Column {column!r} is not a legal move")
    new_mover = place(mover_board, column, value)
    new_opponent = remove_value(opponent_board, column, value)
    return new_mover, new_opponent


def play(position: Position, column: int) -> Position:
    """Resolve the die in hand for the mover and hand the turn over (no die rolled yet)."""
    if position.die is None:
        raise InvalidPositionError("No die in hand to place")
    mover, opp = apply_move(position.mover_board, position.opponent_board, column, position.die)
    if position.to_move == 1:
        return Position(mover, opp, 2, None)
    return Position(opp, mover, 1, None)


def roll(position: Position, die: int) -> Position:
    return replace(position, die=check_die(die))


def is_terminal(position: Position) -> bool:
    return is_full(position.player1) or is_full(position.player2)


def score_difference(position: Position) -> int:
    return score(position.player1) - score(position.player2)


def winner(position: Position) -> Optional[int]:
    """1 or 2 for a finished game with a winner, None while in progress or drawn."""
    if not is_terminal(position):
        return None
    diff = score_difference(position)
    if diff > 0:
        return 1
    if diff < 0:
        return 2
    return None


def validate_position(position: Position) -> Position:
    """Reject externally supplied positions the engine cannot search."""
    if isinstance(position.to_move, bool) or position.to_move not in PLAYERS:
        raise InvalidPositionError(f"Player to move must be 1 or 2, got {position.to_move!r}")
    if position.die is not None:
        check_die(position.die)
    # boards built by hand skip make_board, so normalise them here
    p1 = make_board(position.player1)
    p2 = make_board(position.player2)
    if is_full(p1) and is_full(p2):
        raise InvalidPositionError("Both boards are full")
    return Position(p1, p2, position.to_move, position.die)
