"""Build the canonical dependency graph from an issue snapshot."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Set, Tuple

from .models import AdjacencyEntry, GraphDiagnostics, GraphEdge, GraphModel, GraphNode, Issue

logger = logging.getLogger(__name__)

SUPPORTED_EDGE_TYPES = frozenset({"blocks", "parent", "relates_to", "duplicates", "supersedes"})


def edge_sort_key(edge: GraphEdge) -> Tuple[str, str, str]:
    return (edge.source, edge.type, edge.target)


def node_sort_key(node: GraphNode) -> str:
    return node.id


def _project_node(issue: Issue) -> GraphNode:
    return GraphNode(
        id=issue.id,
        title=issue.title,
        status=issue.status,
        priority=issue.priority,
        issue_type=issue.issue_type,
        assignee=issue.assignee,
        updated_at=issue.updated_at,
    )


def build_graph_model(issues: Iterable[Issue], project_key: Optional[str] = None) -> GraphModel:
    """Turn a flat issue list into a sorted, deduplicated, direction-normalized graph.

    Issue data records ``blocks`` on the blocked issue ("X is blocked by Y").
    The stored edge is inverted so every ``blocks`` edge runs blocker -> blocked
    (``source=Y, target=X``). Other kinds keep ``source`` as the owning issue.

    Anomalies never raise; they are counted in ``diagnostics``:

    * unsupported dependency kinds (``replies_to`` and anything unknown)
    * targets that are not issues in this snapshot
    * repeated ``source::type::target`` edges
    """
    issues = list(issues)
    nodes = sorted((_project_node(issue) for issue in issues), key=node_sort_key)
    node_ids: Set[str] = {node.id for node in nodes}

    diagnostics = GraphDiagnostics()
    edge_keys: Set[str] = set()
    edges: List[GraphEdge] = []

    for issue in issues:
        for dependency in issue.dependencies:
            if dependency.type not in SUPPORTED_EDGE_TYPES:
                diagnostics.unsupported_types += 1
                continue

            if dependency.target not in node_ids:
                diagnostics.missing_targets += 1
                continue

            if dependency.type == "blocks":
                source, target = dependency.target, issue.id
            else:
                source, target = issue.id, dependency.target

            edge_key = f"{source}::{dependency.type}::{target}"
            if edge_key in edge_keys:
                diagnostics.dropped_duplicates += 1
                continue

            edge_keys.add(edge_key)
            edges.append(GraphEdge(source=source, target=target, type=dependency.type))

    edges.sort(key=edge_sort_key)

    adjacency: Dict[str, AdjacencyEntry] = {node.id: AdjacencyEntry() for node in nodes}
    for edge in edges:
        adjacency[edge.source].outgoing.append(edge)
        adjacency[edge.target].incoming.append(edge)

    logger.debug(
        "Built graph model: %d nodes, %d edges (missing=%d duplicates=%d unsupported=%d)",
        len(nodes),
        len(edges),
        diagnostics.missing_targets,
        diagnostics.dropped_duplicates,
        diagnostics.unsupported_types,
    )

    return GraphModel(
        nodes=nodes,
        edges=edges,
        adjacency=adjacency,
        diagnostics=diagnostics,
        project_key=project_key,
    )
