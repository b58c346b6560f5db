import pytest

from knucklebones.board import empty_board, parse_board
from knucklebones.heuristic import (
    EXPECTED_DIE,
    forced_win_bonus,
    heuristic_value,
    modified_score,
    terminal_value,
)


def test_empty_boards_are_even():
    assert heuristic_value(empty_board(), empty_board()) == 0.0


def test_leading_by_five_with_one_die_down():
    p1 = parse_board("5__/___/___")
    p2 = empty_board()
    assert modified_score(p1) == 5 + 8 * EXPECTED_DIE
    assert modified_score(p2) == 9 * EXPECTED_DIE
    # the 5-point lead is mostly cancelled by the opponent's extra empty cell
    assert heuristic_value(p1, p2) == pytest.approx(1.5)


def test_fill_value_zero_is_the_raw_score_difference():
    p1 = parse_board("111\n111\n11_")
    p2 = parse_board("222\n222\n22_")
    assert heuristic_value(p1, p2, fill_value=0.0) == 22 - 44
    # both have one empty cell, so the bonuses cancel
    assert heuristic_value(p1, p2) == 22 - 44


def test_empty_cells_are_not_capped_for_the_trailing_player():
    p1 = parse_board("123/456/12_")
    p2 = empty_board()
    assert heuristic_value(p1, p2) == pytest.approx(modified_score(p1) - 9 * 3.5)


def test_terminal_value_is_exact():
    assert terminal_value(parse_board("412\n542\n162"), parse_board("5__/___/___")) == 34.0


def test_forced_win_bonus_sign():
    assert forced_win_bonus(1) == 3.0
    assert forced_win_bonus(2) == -3.0
    assert forced_win_bonus(2, 10.0) == -10.0
