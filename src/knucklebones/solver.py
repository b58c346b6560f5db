"""
Depth-limited expectiminimax search, from player 1's perspective.

Decision nodes (die in hand) branch over legal columns: player 1 takes the
maximum, player 2 the minimum. Chance nodes (die not yet rolled) average the
six equally likely rolls. A node at the depth limit is scored by the heuristic
unless the game is within the endgame horizon, in which case it is expanded
for at most ``endgame_plies`` further plies (and never past ``max_depth``).
Finished games always score the exact difference.

Tie-break policy:
- Among equal decision values, the lowest column index wins.
- A branch that is exhaustively solved and proven won for the mover gets a
  flat bonus when some sibling is only heuristically evaluated.

The traversal runs on an explicit stack of frames, so search depth never turns
into Python recursion depth.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Tuple

from .board import DIE_FACES, empty_cells
from .errors import InvalidPositionError
from .heuristic import EXPECTED_DIE, FORCED_WIN_BONUS, forced_win_bonus, heuristic_value, terminal_value
from .rules import Position, is_terminal, other, play, roll, validate_position, winner
from .symmetry import canonical_key, column_orbits, legal_moves
from .tree import CHANCE, DECISION, HEURISTIC, TERMINAL, SearchNode, best_column, q_values


@dataclass
class SearchConfig:
    depth: int = 4
    # hard cap on plies from the root, endgame extension included
    max_depth: int = 32
    endgame_plies: int = 2
    fill_value: float = EXPECTED_DIE
    forced_win_bonus: float = FORCED_WIN_BONUS
    transposition_table: bool = False

    def __post_init__(self) -> None:
        if self.depth < 0:
            raise ValueError(f"depth must be >= 0, got {self.depth}")
        if self.max_depth < self.depth:
            raise ValueError(f"max_depth ({self.max_depth}) must be >= depth ({self.depth})")
        if self.endgame_plies < 0:
            raise ValueError(f"endgame_plies must be >= 0, got {self.endgame_plies}")
        if self.forced_win_bonus < 0:
            raise ValueError(f"forced_win_bonus must be >= 0, got {self.forced_win_bonus}")


@dataclass
class _Frame:
    kind: str
    position: Position
    remaining: int
    ply: int
    label: Optional[int]
    labels: List[int]
    # column -> lowest column with identical contents on both boards
    orbit_rep: Dict[int, int] = field(default_factory=dict)
    results: List[Tuple[int, SearchNode]] = field(default_factory=list)
    cursor: int = 0


_Spec = Tuple[str, Position, int, int]


def plies_to_finish(position: Position) -> int:
    """Fewest plies until some board fills, assuming no further elimination."""
    mover = empty_cells(position.mover_board)
    opponent = empty_cells(position.opponent_board)
    return min(2 * mover - 1, 2 * opponent)


class Searcher:
    def __init__(self, config: Optional[SearchConfig] = None):
        self.config = config or SearchConfig()
        self.table: Dict[tuple, Tuple[float, bool, Optional[int]]] = {}
        self.nodes = 0
        self.table_hits = 0

    def run(self, position: Position, depth: int, keep_tree: bool = False) -> SearchNode:
        if depth < 0:
            raise ValueError(f"depth must be >= 0, got {depth}")
        if depth > self.config.max_depth:
            raise ValueError(f"depth {depth} exceeds max_depth {self.config.max_depth}")
        position = validate_position(position)
        kind = DECISION if position.die is not None else CHANCE
        root = self._leaf(kind, position, depth, 0)
        if root is not None:
            return root
        use_table = self.config.transposition_table and not keep_tree
        stack = [self._frame(kind, position, depth, 0, None)]
        while True:
            frame = stack[-1]
            if frame.cursor < len(frame.labels):
                label = frame.labels[frame.cursor]
                frame.cursor += 1
                spec = self._child_spec(frame, label)
                node = self._alias(frame, label, spec) if not keep_tree else None
                if node is None:
                    node = self._leaf(*spec)
                if node is None and use_table:
                    node = self._lookup(spec)
                if node is None:
                    stack.append(self._frame(*spec, label))
                else:
                    frame.results.append((label, node))
                continue
            stack.pop()
            node = self._combine(frame, keep_children=keep_tree or not stack)
            if use_table:
                self.table[self._key(frame.kind, frame.position, frame.remaining, frame.ply)] = (
                    node.value, node.exact, node.winner)
            if not stack:
                logging.debug(
                    "search depth=%d nodes=%d table_hits=%d", depth, self.nodes, self.table_hits
                )
                return node
            stack[-1].results.append((frame.label, node))  # type: ignore[arg-type]

    def _extend(self, position: Position, remaining: int) -> bool:
        # extension plies are counted below the depth limit
        if remaining <= -self.config.endgame_plies:
            return False
        return plies_to_finish(position) <= self.config.endgame_plies

    def _leaf(self, kind: str, position: Position, remaining: int, ply: int) -> Optional[SearchNode]:
        if is_terminal(position):
            self.nodes += 1
            return SearchNode(
                TERMINAL, position.player1, position.player2, position.to_move,
                terminal_value(position.player1, position.player2),
                die=position.die, exact=True, winner=winner(position),
            )
        if ply >= self.config.max_depth or (remaining <= 0 and not self._extend(position, remaining)):
            self.nodes += 1
            return SearchNode(
                HEURISTIC, position.player1, position.player2, position.to_move,
                heuristic_value(position.player1, position.player2, self.config.fill_value),
                die=position.die,
            )
        return None

    def _frame(self, kind: str, position: Position, remaining: int, ply: int,
               label: Optional[int]) -> _Frame:
        if kind == CHANCE:
            return _Frame(kind, position, remaining, ply, label, list(DIE_FACES))
        moves = legal_moves(position.mover_board)
        orbit_rep: Dict[int, int] = {}
        for group in column_orbits(position.player1, position.player2):
            for col in group:
                orbit_rep[col] = group[0]
        return _Frame(kind, position, remaining, ply, label, moves, orbit_rep)

    def _child_spec(self, frame: _Frame, label: int) -> _Spec:
        if frame.kind == DECISION:
            return (CHANCE, play(frame.position, label), frame.remaining - 1, frame.ply + 1)
        return (DECISION, roll(frame.position, label), frame.remaining, frame.ply)

    def _alias(self, frame: _Frame, label: int, spec: _Spec) -> Optional[SearchNode]:
        """Reuse the result of an interchangeable column searched earlier."""
        if frame.kind != DECISION:
            return None
        rep = frame.orbit_rep.get(label, label)
        if rep == label:
            return None
        for lab, node in frame.results:
            if lab == rep:
                child = spec[1]
                return replace(node, player1=child.player1, player2=child.player2,
                               bonus=0.0, children=[])
        return None

    def _key(self, kind: str, position: Position, remaining: int, ply: int) -> tuple:
        return (
            kind,
            canonical_key(position.player1, position.player2),
            position.to_move,
            position.die,
            remaining,
            self.config.max_depth - ply,
        )

    def _lookup(self, spec: _Spec) -> Optional[SearchNode]:
        kind, position, remaining, ply = spec
        hit = self.table.get(self._key(kind, position, remaining, ply))
        if hit is None:
            return None
        self.table_hits += 1
        value, exact, proven = hit
        return SearchNode(kind, position.player1, position.player2, position.to_move, value,
                          die=position.die, exact=exact, winner=proven)

    def _combine(self, frame: _Frame, keep_children: bool) -> SearchNode:
        self.nodes += 1
        children = frame.results
        position = frame.position
        exact = all(c.exact for _, c in children)
        best: Optional[int] = None
        if frame.kind == CHANCE:
            value = sum(c.value for _, c in children) / len(children)
            winners = {c.winner for _, c in children}
            proven = winners.pop() if exact and len(winners) == 1 else None
        else:
            mover = position.to_move
            if not exact:
                for _, c in children:
                    if c.exact and c.winner == mover:
                        c.bonus = forced_win_bonus(mover, self.config.forced_win_bonus)
            best_value: Optional[float] = None
            best_node: Optional[SearchNode] = None
            for col, c in children:
                v = c.adjusted_value
                if best_value is None or (v > best_value if mover == 1 else v < best_value):
                    best, best_value, best_node = col, v, c
            value = best_value  # type: ignore[assignment]
            proven = None
            if exact:
                # only the column actually chosen can prove a win for the mover
                if best_node is not None and best_node.winner == mover:
                    proven = mover
                elif all(c.winner == other(mover) for _, c in children):
                    proven = other(mover)
        return SearchNode(
            frame.kind, position.player1, position.player2, position.to_move, value,
            die=position.die, exact=exact, winner=proven, best=best,
            children=list(children) if keep_children else [],
        )


def _depth(depth: Optional[int], config: SearchConfig) -> int:
    return config.depth if depth is None else depth


def solve(position: Position, depth: Optional[int] = None,
          config: Optional[SearchConfig] = None) -> Dict[str, Any]:
    """Search a position and summarise the root.

    Returns a dict with ``value``, ``best_move`` (None unless the root is an
    expanded decision node), per-column ``q_values``, ``exact`` and the
    number of ``nodes`` created.
    """
    cfg = config or SearchConfig()
    searcher = Searcher(cfg)
    root = searcher.run(position, _depth(depth, cfg))
    return {
        'value': root.value,
        'best_move': best_column(root),
        'q_values': q_values(root),
        'exact': root.exact,
        'nodes': searcher.nodes,
    }


def evaluate(position: Position, depth: Optional[int] = None,
             config: Optional[SearchConfig] = None) -> float:
    cfg = config or SearchConfig()
    return Searcher(cfg).run(position, _depth(depth, cfg)).value


def explore(position: Position, depth: Optional[int] = None,
            config: Optional[SearchConfig] = None) -> SearchNode:
    """Search and keep every expanded node for inspection."""
    cfg = config or SearchConfig()
    return Searcher(cfg).run(position, _depth(depth, cfg), keep_tree=True)


def best_move(position: Position, depth: Optional[int] = None,
              config: Optional[SearchConfig] = None) -> int:
    """Column the mover should pick. Depth below 1 is searched at depth 1."""
    cfg = config or SearchConfig()
    position = validate_position(position)
    if position.die is None:
        raise InvalidPositionError("best_move needs a die in hand")
    if is_terminal(position):
        raise InvalidPositionError("The game is already over")
    root = Searcher(cfg).run(position, max(_depth(depth, cfg), 1))
    return root.best  # type: ignore[return-value]
