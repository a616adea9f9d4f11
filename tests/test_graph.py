"""Tests for graph model construction."""

from beadgraph.graph import build_graph_model
from beadgraph.models import GraphEdge


def _edge_keys(model):
    return [f"{e.source}|{e.type}|{e.target}" for e in model.edges]


def test_supported_types_with_deterministic_ordering(issue):
    """Nodes sort by id and edges by (source, type, target)."""
    issues = [
        issue("bb-2", deps=[("parent", "bb-1"), ("blocks", "bb-3")]),
        issue("bb-1", deps=[("supersedes", "bb-3")]),
        issue("bb-3", deps=[("duplicates", "bb-1"), ("relates_to", "bb-2")]),
    ]

    model = build_graph_model(issues, project_key="demo")

    assert [n.id for n in model.nodes] == ["bb-1", "bb-2", "bb-3"]
    assert _edge_keys(model) == [
        "bb-1|supersedes|bb-3",
        "bb-2|parent|bb-1",
        "bb-3|blocks|bb-2",
        "bb-3|duplicates|bb-1",
        "bb-3|relates_to|bb-2",
    ]
    assert model.project_key == "demo"


def test_blocks_dependency_is_inverted_to_blocker_first(issue):
    """bb-1 depends on bb-2, so the stored edge is bb-2 -> bb-1."""
    model = build_graph_model([issue("bb-1", blocked_by=["bb-2"]), issue("bb-2")])

    assert model.edges == [GraphEdge(source="bb-2", target="bb-1", type="blocks")]


def test_non_blocking_edges_keep_declared_direction(issue):
    model = build_graph_model([issue("bb-1", deps=[("parent", "bb-2")]), issue("bb-2")])

    assert model.edges == [GraphEdge(source="bb-1", target="bb-2", type="parent")]


def test_deduplicates_edges_and_tracks_diagnostics(issue):
    issues = [issue("bb-1", blocked_by=["bb-2", "bb-2", "bb-2"]), issue("bb-2")]

    model = build_graph_model(issues)

    assert len(model.edges) == 1
    assert model.diagnostics.dropped_duplicates == 2
    assert model.diagnostics.missing_targets == 0
    assert model.diagnostics.unsupported_types == 0


def test_missing_targets_and_unsupported_types_are_dropped(issue):
    issues = [
        issue("bb-1", deps=[("blocks", "bb-missing"), ("replies_to", "bb-2"), ("mentions", "bb-2")]),
        issue("bb-2"),
    ]

    model = build_graph_model(issues)

    assert model.edges == []
    assert model.diagnostics.missing_targets == 1
    assert model.diagnostics.unsupported_types == 2


def test_unsupported_type_counted_before_missing_target(issue):
    """A record that is both unsupported and dangling counts once, as unsupported."""
    model = build_graph_model([issue("bb-1", deps=[("replies_to", "bb-nowhere")])])

    assert model.diagnostics.unsupported_types == 1
    assert model.diagnostics.missing_targets == 0


def test_builds_incoming_and_outgoing_adjacency(issue):
    issues = [
        issue("bb-1", blocked_by=["bb-2"]),
        issue("bb-2", deps=[("parent", "bb-3")]),
        issue("bb-3"),
    ]

    model = build_graph_model(issues)

    assert [e.target for e in model.adjacency["bb-1"].outgoing] == []
    assert [e.source for e in model.adjacency["bb-1"].incoming] == ["bb-2"]
    assert [e.source for e in model.adjacency["bb-2"].incoming] == []
    assert [e.target for e in model.adjacency["bb-2"].outgoing] == ["bb-1", "bb-3"]
    assert [e.source for e in model.adjacency["bb-3"].incoming] == ["bb-2"]


def test_adjacency_reconstructs_every_edge_once(issue):
    issues = [
        issue("a", blocked_by=["b", "c"], deps=[("relates_to", "d")]),
        issue("b", blocked_by=["c"]),
        issue("c", deps=[("parent", "d"), ("supersedes", "a")]),
        issue("d"),
    ]

    model = build_graph_model(issues)

    outgoing = [e for entry in model.adjacency.values() for e in entry.outgoing]
    incoming = [e for entry in model.adjacency.values() for e in entry.incoming]
    assert sorted(outgoing, key=lambda e: e.key) == sorted(model.edges, key=lambda e: e.key)
    assert sorted(incoming, key=lambda e: e.key) == sorted(model.edges, key=lambda e: e.key)
    assert set(model.adjacency) == {"a", "b", "c", "d"}


def test_node_count_matches_issue_count(issue):
    issues = [issue(node_id) for node_id in ["bb-9", "bb-10", "bb-1", "bb-5"]]

    model = build_graph_model(issues)

    assert len(model.nodes) == len(issues)
    assert [n.id for n in model.nodes] == ["bb-1", "bb-10", "bb-5", "bb-9"]
    assert model.project_key is None


def test_node_projection_fields(issue):
    model = build_graph_model([issue("bb-1", status="in_progress", priority=0, issue_type="bug", assignee="kim")])

    node = model.nodes[0]
    assert node.status == "in_progress"
    assert node.priority == 0
    assert node.issue_type == "bug"
    assert node.assignee == "kim"
    assert node.updated_at == "2026-02-12T00:00:00Z"


def test_self_referential_blocks_edge_is_kept(issue):
    model = build_graph_model([issue("bb-1", blocked_by=["bb-1"])])

    assert model.edges == [GraphEdge(source="bb-1", target="bb-1", type="blocks")]
    assert model.adjacency["bb-1"].incoming == model.adjacency["bb-1"].outgoing


def test_to_dict_uses_camel_case_contract(issue):
    model = build_graph_model([issue("bb-1", blocked_by=["bb-2"]), issue("bb-2")], project_key="p")

    payload = model.to_dict()

    assert payload["nodes"][0]["issueType"] == "task"
    assert payload["nodes"][0]["updatedAt"] == "2026-02-12T00:00:00Z"
    assert payload["edges"] == [{"source": "bb-2", "target": "bb-1", "type": "blocks"}]
    assert payload["diagnostics"] == {"missingTargets": 0, "droppedDuplicates": 0, "unsupportedTypes": 0}
    assert payload["adjacency"]["bb-2"]["outgoing"] == payload["edges"]
    assert payload["projectKey"] == "p"
