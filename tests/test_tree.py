import json

from knucklebones.board import parse_board
from knucklebones.rules import Position
from knucklebones.solver import explore
from knucklebones.tree import (
    CHANCE,
    DECISION,
    best_column,
    count_nodes,
    node_to_dict,
    principal_variation,
    q_values,
    render_tree,
)

POS = Position(parse_board("3__/1__/___"), parse_board("_2_/___/__5"), 1, 2)


def test_node_to_dict_is_json_serialisable():
    root = explore(POS, 2)
    d = json.loads(json.dumps(node_to_dict(root)))
    assert d['kind'] == DECISION
    assert d['player1'] == "3__/1__/___"
    assert d['best'] == root.best
    assert [c['label'] for c in d['children']] == [col for col, _ in root.children]
    first = d['children'][0]['node']
    assert first['kind'] == CHANCE
    assert len(first['children']) == 6


def test_count_nodes_matches_dict():
    root = explore(POS, 2)

    def walk(d):
        return 1 + sum(walk(c['node']) for c in d['children'])

    assert count_nodes(root) == walk(node_to_dict(root))


def test_render_tree_marks_best_move_and_limits_depth():
    root = explore(POS, 2)
    full = render_tree(root)
    lines = full.splitlines()
    assert lines[0].startswith("root: decision p1 die=2")
    assert f"best={root.best}" in lines[0]
    assert len(lines) == count_nodes(root)
    top = render_tree(root, max_depth=1).splitlines()
    assert len(top) == 1 + len(root.children)
    assert all(line.startswith("  col ") for line in top[1:])


def test_principal_variation_follows_best_moves():
    root = explore(POS, 2)
    pv = principal_variation(root)
    assert pv[0] == ('move', root.best)
    assert pv[1] == ('roll', 1)
    assert best_column(root) == root.best
    assert best_column(root.child(root.best)) is None


def test_q_values_are_none_for_full_columns():
    pos = Position(parse_board("1__/2__/3__"), parse_board("___/___/___"), 1, 4)
    q = q_values(explore(pos, 1))
    assert q[0] is None
    assert q[1] is not None and q[2] is not None
