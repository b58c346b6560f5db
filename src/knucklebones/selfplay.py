"""
Self-play games between simple policies.

Policies:
- ``engine``: the expectiminimax search at a fixed depth.
- ``random``: uniform over legal columns.
- ``epsilon``: engine move, replaced by a random column with probability epsilon.
"""
from __future__ import annotations

from typing import Dict, List, Optional, Tuple

import numpy as np

from .board import format_board, score
from .rules import Position, initial_position, is_terminal, play, roll, score_difference, winner
from .solver import SearchConfig, solve
from .symmetry import legal_moves

POLICIES = ('engine', 'random', 'epsilon')


def roll_die(rng: np.random.Generator) -> int:
    return int(rng.integers(1, 7))


def choose_action(position: Position, policy: str, rng: np.random.Generator,
                  config: SearchConfig, epsilon: float = 0.1) -> Tuple[int, Optional[float]]:
    """Pick a column for the mover; returns ``(column, engine evaluation or None)``."""
    if policy not in POLICIES:
        raise ValueError(f"Unknown policy: {policy}")
    moves = legal_moves(position.mover_board)
    if policy == 'random' or (policy == 'epsilon' and rng.random() < epsilon):
        return int(rng.choice(moves)), None
    sol = solve(position, max(config.depth, 1), config)
    return sol['best_move'], sol['value']


def play_game(rng: np.random.Generator, policies: Tuple[str, str] = ('engine', 'random'),
              config: Optional[SearchConfig] = None, epsilon: float = 0.1,
              max_plies: int = 500) -> List[Dict]:
    cfg = config or SearchConfig(depth=2)
    pos = initial_position()
    game: List[Dict] = []
    while not is_terminal(pos):
        if len(game) >= max_plies:
            raise RuntimeError(f"Game did not finish within {max_plies} plies")
        pos = roll(pos, roll_die(rng))
        action, value = choose_action(pos, policies[pos.to_move - 1], rng, cfg, epsilon)
        game.append({
            'ply': len(game),
            'player_to_move': pos.to_move,
            'policy': policies[pos.to_move - 1],
            'die': pos.die,
            'board_p1': format_board(pos.player1, sep='/'),
            'board_p2': format_board(pos.player2, sep='/'),
            'score_p1': score(pos.player1),
            'score_p2': score(pos.player2),
            'action': action,
            'evaluation': value,
        })
        pos = play(pos, action)
    result = winner(pos)
    margin = score_difference(pos)
    for entry in game:
        entry['winner'] = 0 if result is None else result
        entry['final_margin'] = margin
    return game


def generate_games(policy_1: str = 'engine', policy_2: str = 'random', max_games: int = 10,
                   seed: int = 42, config: Optional[SearchConfig] = None,
                   epsilon: float = 0.1) -> List[List[Dict]]:
    rng = np.random.default_rng(seed)
    games: List[List[Dict]] = []
    for _ in range(max_games):
        games.append(play_game(rng, (policy_1, policy_2), config, epsilon))
    return games


def summarize(games: List[List[Dict]]) -> Dict[str, float]:
    if not games:
        return {'games': 0}
    winners = np.array([g[0]['winner'] for g in games])
    margins = np.array([g[0]['final_margin'] for g in games], dtype=float)
    plies = np.array([len(g) for g in games], dtype=float)
    return {
        'games': len(games),
        'p1_wins': int(np.sum(winners == 1)),
        'p2_wins': int(np.sum(winners == 2)),
        'draws': int(np.sum(winners == 0)),
        'p1_win_rate': float(np.mean(winners == 1)),
        'mean_margin': float(np.mean(margins)),
        'std_margin': float(np.std(margins)),
        'mean_plies': float(np.mean(plies)),
    }
