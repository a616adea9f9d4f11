"""Tests for view layout modes."""

from beadgraph import config
from beadgraph.graph import build_graph_model
from beadgraph.graph_view import build_graph_view_model
from beadgraph.layout import apply_layout, focus_column_layout, grid_layout, layered_layout
from beadgraph.models import GraphViewOptions

FOCUS_STEP_X = config.NODE_WIDTH + config.FOCUS_GUTTER_X
FOCUS_STEP_Y = config.NODE_HEIGHT + config.FOCUS_GUTTER_Y
RANK_STEP = config.NODE_WIDTH + config.RANK_SEPARATION


def _positions(positioned):
    return {item.id: (item.position.x, item.position.y) for item in positioned}


def test_focus_layout_places_blockers_left_and_dependents_right(chain):
    model = build_graph_model(chain("bb-1", "bb-2", "bb-3"))

    positions = _positions(focus_column_layout(model.nodes, model.edges, "bb-2"))

    assert positions["bb-1"] == (2 * FOCUS_STEP_X, 0)
    assert positions["bb-2"] == (3 * FOCUS_STEP_X, 0)
    assert positions["bb-3"] == (4 * FOCUS_STEP_X, 0)


def test_focus_layout_stacks_a_column_by_id(issue):
    model = build_graph_model([
        issue("focus", blocked_by=["b-2", "b-1"]),
        issue("b-1"),
        issue("b-2"),
    ])

    positions = _positions(focus_column_layout(model.nodes, model.edges, "focus"))

    assert positions["b-1"] == (2 * FOCUS_STEP_X, 0)
    assert positions["b-2"] == (2 * FOCUS_STEP_X, FOCUS_STEP_Y)


def test_focus_layout_prefers_nearer_side(issue):
    """Reachable both ways: the shorter hop count wins, upstream on a tie."""
    model = build_graph_model([
        issue("focus", blocked_by=["loop"]),
        issue("mid", blocked_by=["focus"]),
        issue("loop", blocked_by=["mid"]),
    ])

    positions = _positions(focus_column_layout(model.nodes, model.edges, "focus"))

    # loop: upstream 1 hop, downstream 2 hops; mid: upstream 2, downstream 1
    assert positions["loop"][0] == 2 * FOCUS_STEP_X
    assert positions["mid"][0] == 4 * FOCUS_STEP_X


def test_focus_layout_lists_focus_first(chain):
    model = build_graph_model(chain("bb-1", "bb-2", "bb-3"))

    ordered = focus_column_layout(model.nodes, model.edges, "bb-3")

    assert [item.id for item in ordered] == ["bb-3", "bb-1", "bb-2"]


def test_grid_layout_is_square_ish(issue):
    model = build_graph_model([issue(f"bb-{n}") for n in range(1, 6)])

    positions = _positions(grid_layout(model.nodes))

    step_x = config.NODE_WIDTH + config.GRID_GUTTER_X
    step_y = config.NODE_HEIGHT + config.GRID_GUTTER_Y
    assert positions["bb-1"] == (0, 0)
    assert positions["bb-3"] == (2 * step_x, 0)
    assert positions["bb-5"] == (step_x, step_y)


def test_layered_layout_ranks_left_to_right(chain):
    model = build_graph_model(chain("bb-1", "bb-2", "bb-3"))

    positions = _positions(layered_layout(model.nodes, model.edges))

    assert [positions[node_id][0] for node_id in ("bb-1", "bb-2", "bb-3")] == [0, RANK_STEP, 2 * RANK_STEP]
    assert {positions[node_id][1] for node_id in positions} == {0}


def test_layered_layout_uses_longest_path_ranks(issue):
    model = build_graph_model([
        issue("a"),
        issue("b", blocked_by=["a"]),
        issue("c", blocked_by=["a"]),
        issue("d", blocked_by=["b", "c"]),
        issue("e", blocked_by=["a", "d"]),
    ])

    positions = _positions(layered_layout(model.nodes, model.edges))

    assert positions["a"][0] == 0
    assert positions["b"][0] == positions["c"][0] == RANK_STEP
    assert positions["d"][0] == 2 * RANK_STEP
    assert positions["e"][0] == 3 * RANK_STEP
    assert positions["b"][1] != positions["c"][1]


def test_layered_layout_tolerates_cycles(issue):
    model = build_graph_model([
        issue("a", blocked_by=["b"]),
        issue("b", blocked_by=["a"]),
        issue("c", blocked_by=["b"]),
    ])

    positions = _positions(layered_layout(model.nodes, model.edges))

    assert len({positions[node_id][0] for node_id in ("a", "b", "c")}) == 3


def test_layered_layout_is_reproducible(issue):
    issues = [
        issue("n1"),
        issue("n2", blocked_by=["n1"]),
        issue("n3", blocked_by=["n1"], deps=[("relates_to", "n2")]),
        issue("n4", blocked_by=["n3", "n2"]),
        issue("n5"),
    ]

    first = build_graph_view_model(build_graph_model(issues), GraphViewOptions())
    second = build_graph_view_model(build_graph_model(list(reversed(issues))), GraphViewOptions())

    assert first.to_dict() == second.to_dict()


def test_apply_layout_selects_mode(chain, issue):
    connected = build_graph_model(chain("bb-1", "bb-2"))
    isolated = build_graph_model([issue("bb-1"), issue("bb-2")])

    assert _positions(apply_layout(isolated.nodes, isolated.edges, None)) == _positions(grid_layout(isolated.nodes))
    assert _positions(apply_layout(connected.nodes, connected.edges, None)) == _positions(
        layered_layout(connected.nodes, connected.edges)
    )
    assert _positions(apply_layout(connected.nodes, connected.edges, "bb-1")) == _positions(
        focus_column_layout(connected.nodes, connected.edges, "bb-1")
    )
