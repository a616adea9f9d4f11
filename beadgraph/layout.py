"""Node placement for graph views.

Three modes, chosen by :func:`apply_layout`:

* focus-relative columns: blockers to the left of the focus, dependents to
  the right, one column per hop
* square-ish grid when nothing is connected
* layered (Sugiyama-style) left-to-right layout for the full graph

Every mode is deterministic: identical input gives identical coordinates.
"""

from __future__ import annotations

import logging
import math
from collections import defaultdict
from typing import Dict, List, Optional, Sequence

import networkx as nx

from . import config
from .models import GraphEdge, GraphNode, Position, PositionedGraphNode

logger = logging.getLogger(__name__)


def _focus_first(positioned: List[PositionedGraphNode], focus_id: Optional[str]) -> List[PositionedGraphNode]:
    return sorted(positioned, key=lambda item: (item.id != focus_id, item.id))


def _hop_depths(start: str, neighbors: Dict[str, List[str]]) -> Dict[str, int]:
    depths = {start: 0}
    frontier = [start]
    step = 0
    while frontier:
        step += 1
        next_frontier: List[str] = []
        for node_id in frontier:
            for neighbor in neighbors.get(node_id, []):
                if neighbor not in depths:
                    depths[neighbor] = step
                    next_frontier.append(neighbor)
        frontier = next_frontier
    return depths


def _focus_column(node_id: str, focus_id: str, in_depths: Dict[str, int], out_depths: Dict[str, int]) -> int:
    if node_id == focus_id:
        return 0
    in_depth = in_depths.get(node_id)
    out_depth = out_depths.get(node_id)
    if in_depth and out_depth:
        return -in_depth if in_depth <= out_depth else out_depth
    if in_depth:
        return -in_depth
    if out_depth:
        return out_depth
    return 0


def focus_column_layout(
    nodes: Sequence[GraphNode],
    edges: Sequence[GraphEdge],
    focus_id: str,
) -> List[PositionedGraphNode]:
    """Place nodes in columns by signed hop distance from ``focus_id``.

    Upstream (incoming-only) distance gives negative columns, downstream
    positive ones. A node reachable both ways goes to the nearer side,
    upstream on a tie. Unreachable nodes share column 0 with the focus.
    """
    upstream: Dict[str, List[str]] = defaultdict(list)
    downstream: Dict[str, List[str]] = defaultdict(list)
    for edge in edges:
        upstream[edge.target].append(edge.source)
        downstream[edge.source].append(edge.target)

    in_depths = _hop_depths(focus_id, upstream)
    out_depths = _hop_depths(focus_id, downstream)

    columns: Dict[int, List[GraphNode]] = defaultdict(list)
    for node in nodes:
        columns[_focus_column(node.id, focus_id, in_depths, out_depths)].append(node)

    step_x = config.NODE_WIDTH + config.FOCUS_GUTTER_X
    step_y = config.NODE_HEIGHT + config.FOCUS_GUTTER_Y

    positioned: List[PositionedGraphNode] = []
    for column in sorted(columns):
        for row, node in enumerate(sorted(columns[column], key=lambda item: item.id)):
            positioned.append(
                PositionedGraphNode(
                    node=node,
                    position=Position(
                        x=(column + config.FOCUS_COLUMN_OFFSET) * step_x,
                        y=row * step_y,
                    ),
                )
            )

    return _focus_first(positioned, focus_id)


def grid_layout(nodes: Sequence[GraphNode]) -> List[PositionedGraphNode]:
    """Lay unconnected nodes out on a square-ish grid in the given order."""
    width = max(1, math.ceil(math.sqrt(len(nodes))))
    positioned = []
    for index, node in enumerate(nodes):
        col = index % width
        row = index // width
        positioned.append(
            PositionedGraphNode(
                node=node,
                position=Position(
                    x=col * (config.NODE_WIDTH + config.GRID_GUTTER_X),
                    y=row * (config.NODE_HEIGHT + config.GRID_GUTTER_Y),
                ),
            )
        )
    return positioned


def _assign_ranks(graph: nx.DiGraph) -> Dict[str, int]:
    """Longest-path ranks; each strongly connected group is unrolled by BFS depth."""
    condensed = nx.condensation(graph)
    mapping = condensed.graph["mapping"]

    offsets: Dict[str, int] = {}
    spans: Dict[int, int] = {}
    for component in condensed.nodes:
        members = condensed.nodes[component]["members"]
        root = min(members)
        depths = nx.single_source_shortest_path_length(graph.subgraph(members), root)
        offsets.update(depths)
        spans[component] = max(depths.values()) + 1

    starts: Dict[int, int] = {}
    for component in nx.topological_sort(condensed):
        starts[component] = max(
            (starts[pred] + spans[pred] for pred in condensed.predecessors(component)),
            default=0,
        )

    return {node_id: starts[mapping[node_id]] + offsets[node_id] for node_id in graph.nodes}


def _order_layers(graph: nx.DiGraph, ranks: Dict[str, int]) -> Dict[int, List[str]]:
    """Reduce crossings with alternating barycenter sweeps."""
    layers: Dict[int, List[str]] = defaultdict(list)
    for node_id in graph.nodes:
        layers[ranks[node_id]].append(node_id)

    rank_keys = sorted(layers)
    order = {node_id: index for layer in layers.values() for index, node_id in enumerate(layer)}

    for sweep in range(config.ORDERING_SWEEPS):
        downward = sweep % 2 == 0
        sequence = rank_keys[1:] if downward else list(reversed(rank_keys[:-1]))
        for rank in sequence:
            def barycenter(node_id: str) -> float:
                if downward:
                    refs = [order[n] for n in graph.predecessors(node_id) if ranks[n] < rank]
                else:
                    refs = [order[n] for n in graph.successors(node_id) if ranks[n] > rank]
                if not refs:
                    return float(order[node_id])
                return sum(refs) / len(refs)

            layers[rank] = sorted(layers[rank], key=lambda n: (barycenter(n), order[n]))
            order.update({node_id: index for index, node_id in enumerate(layers[rank])})

    return layers


def layered_layout(nodes: Sequence[GraphNode], edges: Sequence[GraphEdge]) -> List[PositionedGraphNode]:
    """Left-to-right layered layout.

    Nodes and edges are inserted in the order given (already sorted by the
    model), which keeps ranks, orderings and coordinates reproducible.
    Coordinates are the top-left corner of each node box.
    """
    graph = nx.DiGraph()
    for node in nodes:
        graph.add_node(node.id)
    for edge in edges:
        if edge.source != edge.target and edge.source in graph and edge.target in graph:
            graph.add_edge(edge.source, edge.target)

    ranks = _assign_ranks(graph)
    layers = _order_layers(graph, ranks)

    step_x = config.NODE_WIDTH + config.RANK_SEPARATION
    step_y = config.NODE_HEIGHT + config.NODE_SEPARATION
    tallest = max((len(layer) for layer in layers.values()), default=0)

    positions: Dict[str, Position] = {}
    for rank, layer in layers.items():
        shift = (tallest - len(layer)) * step_y / 2
        for index, node_id in enumerate(layer):
            positions[node_id] = Position(x=rank * step_x, y=round(shift + index * step_y))

    positioned = [PositionedGraphNode(node=node, position=positions[node.id]) for node in nodes]
    return sorted(positioned, key=lambda item: item.id)


def apply_layout(
    nodes: Sequence[GraphNode],
    edges: Sequence[GraphEdge],
    focus_id: Optional[str],
) -> List[PositionedGraphNode]:
    if focus_id:
        logger.debug("Focus column layout around %s (%d nodes)", focus_id, len(nodes))
        return focus_column_layout(nodes, edges, focus_id)
    if not edges:
        logger.debug("Grid layout (%d nodes, no edges)", len(nodes))
        return grid_layout(nodes)
    logger.debug("Layered layout (%d nodes, %d edges)", len(nodes), len(edges))
    return layered_layout(nodes, edges)
