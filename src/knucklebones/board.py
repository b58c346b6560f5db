"""
Board model: one player's 3x3 grid, scoring, and the text codec.
Notes:
- A board is a tuple of 3 columns; each column is a sorted tuple of die values.
- Row placement never affects the outcome, so a column only records a multiset.
- Text form is 3 rows of 3 chars ("_" empty, "1".."6" a die), rows split by
  newlines or "/". Columns map left to right.
"""
from __future__ import annotations

from collections import Counter
from functools import lru_cache
from typing import List, Optional, Sequence, Tuple

from .errors import ColumnFullError, IllegalMoveError, InvalidPositionError

Column = Tuple[int, ...]
Board = Tuple[Column, Column, Column]

N_COLUMNS = 3
COLUMN_HEIGHT = 3
N_CELLS = N_COLUMNS * COLUMN_HEIGHT
DIE_FACES = (1, 2, 3, 4, 5, 6)
EMPTY_CHAR = '_'


def check_die(value: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value not in DIE_FACES:
        raise InvalidPositionError(f"Invalid die value: {value!r}")
    return value


def empty_board() -> Board:
    return ((), (), ())


def make_board(columns: Sequence[Sequence[int]]) -> Board:
    """Build a board from per-column die values, validating every column."""
    if len(columns) != N_COLUMNS:
        raise InvalidPositionError(f"A board needs exactly {N_COLUMNS} columns, got {len(columns)}")
    cols = []
    for i, col in enumerate(columns):
        if len(col) > COLUMN_HEIGHT:
            raise InvalidPositionError(f"Column {i} holds {len(col)} dice (max {COLUMN_HEIGHT})")
        cols.append(tuple(sorted(check_die(v) for v in col)))
    return tuple(cols)  # type: ignore[return-value]


@lru_cache(maxsize=None)
def column_score(column: Column) -> int:
    return sum(v * n * n for v, n in Counter(column).items())


def score(board: Board) -> int:
    return sum(column_score(col) for col in board)


def dice_count(board: Board) -> int:
    return sum(len(col) for col in board)


def empty_cells(board: Board) -> int:
    return N_CELLS - dice_count(board)


def is_full(board: Board) -> bool:
    return dice_count(board) == N_CELLS


def legal_columns(board: Board) -> List[int]:
    return [i for i, col in enumerate(board) if len(col) < COLUMN_HEIGHT]


def _check_column_index(column: int) -> None:
    if isinstance(column, bool) or not isinstance(column, int) or not 0 <= column < N_COLUMNS:
        raise IllegalMoveError(f"Column index must be 0-{N_COLUMNS - 1}, got {column!r}")


def place(board: Board, column: int, value: int) -> Board:
    _check_column_index(column)
    check_die(value)
    if len(board[column]) >= COLUMN_HEIGHT:
        raise ColumnFullError(f"Column {column} is full")
    cols = list(board)
    cols[column] = tuple(sorted(board[column] + (value,)))
    return tuple(cols)  # type: ignore[return-value]


def remove_value(board: Board, column: int, value: int) -> Board:
    """Drop every die equal to ``value`` from one column."""
    _check_column_index(column)
    if value not in board[column]:
        return board
    cols = list(board)
    cols[column] = tuple(v for v in board[column] if v != value)
    return tuple(cols)  # type: ignore[return-value]


def board_to_grid(board: Board) -> List[List[Optional[int]]]:
    """Row-major cell grid; each column's dice are stacked from the top row down."""
    grid: List[List[Optional[int]]] = [[None] * N_COLUMNS for _ in range(COLUMN_HEIGHT)]
    for c, col in enumerate(board):
        for r, v in enumerate(col):
            grid[r][c] = v
    return grid


def board_from_grid(rows: Sequence[Sequence[Optional[int]]]) -> Board:
    if len(rows) != COLUMN_HEIGHT or any(len(r) != N_COLUMNS for r in rows):
        raise InvalidPositionError("Grid must be 3 rows of 3 cells")
    columns = [[r[c] for r in rows if r[c] is not None] for c in range(N_COLUMNS)]
    return make_board(columns)


def parse_board(text: str) -> Board:
    stripped = ''.join(ch for ch in text.strip() if ch not in ' \t')
    rows = stripped.replace('/', '\n').split('\n')
    if len(rows) != COLUMN_HEIGHT or any(len(r) != N_COLUMNS for r in rows):
        raise InvalidPositionError(f"Board must be 3 rows of 3 characters: {text!r}")
    grid: List[List[Optional[int]]] = []
    for row in rows:
        cells: List[Optional[int]] = []
        for ch in row:
            if ch == EMPTY_CHAR:
                cells.append(None)
            elif ch.isdigit() and int(ch) in DIE_FACES:
                cells.append(int(ch))
            else:
                raise InvalidPositionError(f"Invalid board character {ch!r} in {text!r}")
        grid.append(cells)
    return board_from_grid(grid)


def format_board(board: Board, sep: str = '\n') -> str:
    return sep.join(
        ''.join(EMPTY_CHAR if v is None else str(v) for v in row)
        for row in board_to_grid(board)
    )
