"""
Move enumeration and symmetry handling.
Notes:
- Rows inside a column are interchangeable, so a move is just a column index.
  This keeps the branching factor of a decision node at 3 instead of 9.
- Permuting column indices on both boards at once preserves scores and
  elimination pairing, so the sorted list of column pairs is a canonical key.
"""
from __future__ import annotations

from typing import Dict, List, Tuple

from .board import Board, Column, legal_columns

CanonicalKey = Tuple[Tuple[Column, Column], ...]


def legal_moves(board: Board) -> List[int]:
    return legal_columns(board)


def column_pairs(player1: Board, player2: Board) -> List[Tuple[Column, Column]]:
    return list(zip(player1, player2))


def canonical_key(player1: Board, player2: Board) -> CanonicalKey:
    return tuple(sorted(column_pairs(player1, player2)))


def column_orbits(player1: Board, player2: Board) -> List[List[int]]:
    """Group column indices whose contents match on both boards, in first-seen order."""
    groups: Dict[Tuple[Column, Column], List[int]] = {}
    for i, pair in enumerate(column_pairs(player1, player2)):
        groups.setdefault(pair, []).append(i)
    return list(groups.values())
