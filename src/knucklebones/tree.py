"""
Search results: the explored node tree and projections of it.

A node is one of four kinds. ``decision`` and ``chance`` nodes were expanded;
``terminal`` and ``heuristic`` nodes are leaves. Children are ``(label, node)``
pairs where the label is a column for decision nodes and a die value for
chance nodes.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from .board import Board, format_board

DECISION = 'decision'
CHANCE = 'chance'
TERMINAL = 'terminal'
HEURISTIC = 'heuristic'


@dataclass
class SearchNode:
    kind: str
    player1: Board
    player2: Board
    to_move: int
    value: float
    die: Optional[int] = None
    exact: bool = False
    # proven winner of an exhaustively solved subtree, else None
    winner: Optional[int] = None
    # forced-win bonus credited to this branch by the parent decision node
    bonus: float = 0.0
    best: Optional[int] = None
    children: List[Tuple[int, "SearchNode"]] = field(default_factory=list)

    @property
    def adjusted_value(self) -> float:
        return self.value + self.bonus

    def child(self, label: int) -> "SearchNode":
        for lab, node in self.children:
            if lab == label:
                return node
        raise KeyError(label)


def best_column(node: SearchNode) -> Optional[int]:
    return node.best if node.kind == DECISION else None


def q_values(node: SearchNode) -> Tuple[Optional[float], ...]:
    """Bonus-adjusted value of each column at a decision node, None where illegal."""
    q: List[Optional[float]] = [None, None, None]
    if node.kind == DECISION:
        for col, child in node.children:
            q[col] = child.adjusted_value
    return tuple(q)


def principal_variation(node: SearchNode) -> List[Tuple[str, int]]:
    """Follow best moves down the materialised tree, taking the first roll at chance nodes."""
    line: List[Tuple[str, int]] = []
    cur = node
    while cur.children:
        if cur.kind == DECISION:
            line.append(('move', cur.best))  # type: ignore[arg-type]
            cur = cur.child(cur.best)  # type: ignore[arg-type]
        else:
            label, cur = cur.children[0]
            line.append(('roll', label))
    return line


def count_nodes(node: SearchNode) -> int:
    total = 0
    stack = [node]
    while stack:
        n = stack.pop()
        total += 1
        stack.extend(c for _, c in n.children)
    return total


def node_to_dict(node: SearchNode) -> Dict[str, Any]:
    def one(n: SearchNode) -> Dict[str, Any]:
        return {
            'kind': n.kind,
            'to_move': n.to_move,
            'die': n.die,
            'player1': format_board(n.player1, sep='/'),
            'player2': format_board(n.player2, sep='/'),
            'value': n.value,
            'exact': n.exact,
            'winner': n.winner,
            'bonus': n.bonus,
            'best': n.best,
            'children': [],
        }

    root = one(node)
    stack = [(node, root)]
    while stack:
        n, d = stack.pop()
        for label, child in n.children:
            cd = one(child)
            d['children'].append({'label': label, 'node': cd})
            stack.append((child, cd))
    return root


def render_tree(node: SearchNode, max_depth: Optional[int] = None) -> str:
    lines: List[str] = []
    stack: List[Tuple[SearchNode, int, str]] = [(node, 0, 'root')]
    while stack:
        n, depth, label = stack.pop()
        marks = ''
        if n.kind == DECISION and n.best is not None:
            marks += f" best={n.best}"
        if n.bonus:
            marks += f" bonus={n.bonus:+g}"
        if n.exact:
            marks += " exact"
        die = f" die={n.die}" if n.die is not None else ''
        lines.append(f"{'  ' * depth}{label}: {n.kind} p{n.to_move}{die} value={n.value:.4f}{marks}")
        if max_depth is not None and depth >= max_depth:
            continue
        prefix = 'col' if n.kind == DECISION else 'roll'
        for lab, child in reversed(n.children):
            stack.append((child, depth + 1, f"{prefix} {lab}"))
    return '\n'.join(lines)
