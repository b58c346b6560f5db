import numpy as np
import pytest

from knucklebones.board import parse_board
from knucklebones.rules import Position
from knucklebones.selfplay import choose_action, generate_games, play_game, summarize
from knucklebones.solver import SearchConfig

FAST = SearchConfig(depth=1)


def test_games_are_reproducible_with_a_seed():
    g1 = generate_games('engine', 'random', 2, seed=7, config=FAST)
    g2 = generate_games('engine', 'random', 2, seed=7, config=FAST)
    assert g1 == g2


@pytest.mark.parametrize("policies", [('random', 'random'), ('engine', 'epsilon')])
def test_games_end_with_a_full_board_and_consistent_result(policies):
    game = play_game(np.random.default_rng(0), policies, FAST)
    assert 9 <= len(game) <= 500
    assert [e['ply'] for e in game] == list(range(len(game)))
    last = game[-1]
    margin = last['final_margin']
    expected = 1 if margin > 0 else 2 if margin < 0 else 0
    assert all(e['winner'] == expected for e in game)
    assert all(e['policy'] == policies[e['player_to_move'] - 1] for e in game)
    assert all(1 <= e['die'] <= 6 for e in game)


def test_random_policy_carries_no_evaluation():
    game = play_game(np.random.default_rng(1), ('random', 'engine'), FAST)
    for e in game:
        if e['player_to_move'] == 1:
            assert e['evaluation'] is None
        else:
            assert e['evaluation'] is not None


def test_choose_action_takes_the_elimination():
    pos = Position(parse_board("5__/___/___"), parse_board("___/___/___"), 2, 5)
    col, value = choose_action(pos, 'engine', np.random.default_rng(0), FAST)
    assert col == 0
    assert value == pytest.approx(-1.5)
    with pytest.raises(ValueError):
        choose_action(pos, 'greedy', np.random.default_rng(0), FAST)


def test_summarize_counts_outcomes():
    games = generate_games('random', 'random', 4, seed=11, config=FAST)
    s = summarize(games)
    assert s['games'] == 4
    assert s['p1_wins'] + s['p2_wins'] + s['draws'] == 4
    assert 0.0 <= s['p1_win_rate'] <= 1.0
    assert s['mean_plies'] >= 9
    assert summarize([]) == {'games': 0}
