import pytest

from knucklebones.board import (
    board_from_grid,
    board_to_grid,
    column_score,
    dice_count,
    empty_board,
    format_board,
    is_full,
    legal_columns,
    make_board,
    parse_board,
    place,
    remove_value,
    score,
)
from knucklebones.errors import ColumnFullError, IllegalMoveError, InvalidPositionError


def test_empty_board_text_and_score():
    b = empty_board()
    assert format_board(b) == "___\n___\n___"
    assert score(b) == 0
    assert legal_columns(b) == [0, 1, 2]
    assert not is_full(b)


@pytest.mark.parametrize("text,expected", [
    ("5__\n__2\n___", 7),
    ("5__\n5_2\n1__", 21 + 2),      # 5*2^2 + 1, plus the lone 2
    ("4_2\n5_2\n1_2", 10 + 18),     # triple 2s score 2*3^2
    ("412\n542\n162", 10 + 11 + 18),
    ("6__/6__/6__", 54),
    ("666/___/___", 18),
])
def test_board_scores(text, expected):
    assert score(parse_board(text)) == expected


def test_column_score_counts_squared():
    assert column_score(()) == 0
    assert column_score((4,)) == 4
    assert column_score((4, 4)) == 16
    assert column_score((4, 4, 4)) == 36
    assert column_score((1, 4, 4)) == 17
    assert column_score((2, 3, 6)) == 11


def test_parse_accepts_slashes_and_whitespace():
    a = parse_board("5__\n__2\n___")
    b = parse_board(" 5 _ _ / _ _ 2 / _ _ _ ")
    assert a == b
    assert a == ((5,), (), (2,))


def test_format_stacks_dice_from_the_top():
    b = parse_board("___\n__2\n5_6")
    assert format_board(b) == "5_2\n__6\n___"
    assert format_board(b, sep='/') == "5_2/__6/___"


def test_full_board():
    b = parse_board("412\n542\n162")
    assert is_full(b)
    assert dice_count(b) == 9
    assert legal_columns(b) == []


@pytest.mark.parametrize("bad", ["", "___", "____/___/___", "5__/___/__7", "x__/___/___", "___/___/___/___"])
def test_parse_rejects_malformed_text(bad):
    with pytest.raises(InvalidPositionError):
        parse_board(bad)


def test_make_board_validates():
    with pytest.raises(InvalidPositionError):
        make_board([(1, 2, 3, 4), (), ()])
    with pytest.raises(InvalidPositionError):
        make_board([(0,), (), ()])
    with pytest.raises(InvalidPositionError):
        make_board([(), ()])
    assert make_board([[3, 1], [], [6]]) == ((1, 3), (), (6,))


@pytest.mark.parametrize("value", [1, 2, 3, 4, 5, 6])
def test_full_column_rejects_every_value(value):
    b = parse_board("1__/2__/3__")
    with pytest.raises(ColumnFullError):
        place(b, 0, value)


def test_column_full_error_is_an_illegal_move():
    b = parse_board("1__/2__/3__")
    with pytest.raises(IllegalMoveError):
        place(b, 0, 4)


def test_place_rejects_bad_column_and_die():
    b = empty_board()
    with pytest.raises(IllegalMoveError):
        place(b, 3, 1)
    with pytest.raises(InvalidPositionError):
        place(b, 0, 7)


def test_booleans_are_not_dice_or_columns():
    b = empty_board()
    with pytest.raises(InvalidPositionError):
        place(b, 0, True)
    with pytest.raises(IllegalMoveError):
        place(b, True, 1)
    with pytest.raises(InvalidPositionError):
        make_board([(True,), (), ()])
    with pytest.raises(InvalidPositionError):
        place(b, 0, 2.0)


def test_place_returns_new_board():
    b = parse_board("5__/___/___")
    b2 = place(b, 0, 5)
    assert b == ((5,), (), ())
    assert b2 == ((5, 5), (), ())
    assert score(b2) == 20


def test_remove_value_only_touches_one_column():
    b = parse_board("343/3__/___")
    assert remove_value(b, 0, 3) == ((), (4,), (3,))
    assert remove_value(b, 1, 6) is b


def test_grid_round_trip_keeps_columns():
    b = parse_board("_6_/1_6/3__")
    grid = board_to_grid(b)
    assert grid == [[1, 6, 6], [3, None, None], [None, None, None]]
    assert board_from_grid(grid) == b
