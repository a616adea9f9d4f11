"""Structural queries over a :class:`~beadgraph.models.GraphModel`.

All functions are pure: they read the model, never mutate it, and return
fresh value objects. Any id or edge list they return is explicitly sorted,
so repeated calls on the same model produce identical output.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Dict, Iterator, List, Optional, Set, Tuple, Union

from .graph import edge_sort_key, node_sort_key
from .layout import apply_layout
from .models import (
    BlockedChainAnalysis,
    CycleAnomaly,
    GraphHopDepth,
    GraphModel,
    GraphNode,
    GraphViewModel,
    GraphViewOptions,
    PathWorkspace,
)

logger = logging.getLogger(__name__)

HOP_DEPTHS = (1, 2, "full")


def parse_hop_depth(value: Union[int, str]) -> GraphHopDepth:
    """Coerce ``1``, ``2``, ``"1"``, ``"2"`` or ``"full"`` into a hop depth."""
    if isinstance(value, str):
        text = value.strip().lower()
        if text == "full":
            return "full"
        if text.isdigit():
            value = int(text)
    if value in (1, 2) and not isinstance(value, bool):
        return value  # type: ignore[return-value]
    raise ValueError(f"Hop depth must be one of 1, 2, 'full' (got {value!r})")


def _collect_ids_with_depth(model: GraphModel, focus_id: str, depth: int) -> Set[str]:
    """Undirected BFS: incoming and outgoing edges both count as one hop."""
    visited = {focus_id}
    frontier = [focus_id]

    for _ in range(depth):
        next_frontier: List[str] = []
        for node_id in frontier:
            adjacency = model.adjacency.get(node_id)
            if adjacency is None:
                continue
            for edge in adjacency.outgoing:
                if edge.target not in visited:
                    visited.add(edge.target)
                    next_frontier.append(edge.target)
            for edge in adjacency.incoming:
                if edge.source not in visited:
                    visited.add(edge.source)
                    next_frontier.append(edge.source)
        frontier = next_frontier
        if not frontier:
            break

    return visited


def build_graph_view_model(model: GraphModel, options: GraphViewOptions) -> GraphViewModel:
    """Visible, positioned subgraph around an optional focus node.

    Without a focus (or with ``depth="full"``) every node starts visible;
    otherwise only nodes within ``depth`` undirected hops of the focus.
    ``hide_closed`` drops closed nodes except the focus itself. Edges are
    kept only when both endpoints stay visible. A focus that is not in the
    model reaches nothing, so a bounded depth yields an empty view.
    """
    focus_id = options.focus_id
    if focus_id and options.depth != "full":
        visible_ids = _collect_ids_with_depth(model, focus_id, int(options.depth))
    else:
        visible_ids = {node.id for node in model.nodes}

    def keep(node: GraphNode) -> bool:
        if node.id not in visible_ids:
            return False
        if not options.hide_closed or node.id == focus_id:
            return True
        return node.status != "closed"

    nodes = sorted((node for node in model.nodes if keep(node)), key=node_sort_key)
    kept_ids = {node.id for node in nodes}
    edges = sorted(
        (edge for edge in model.edges if edge.source in kept_ids and edge.target in kept_ids),
        key=edge_sort_key,
    )

    return GraphViewModel(nodes=apply_layout(nodes, edges, focus_id), edges=edges)


def build_path_workspace(model: GraphModel, options: GraphViewOptions) -> PathWorkspace:
    """Leveled blockers (upstream) and dependents (downstream) around the focus.

    Upstream follows incoming edges only, downstream outgoing edges only.
    Level ``n`` holds the nodes first reached at hop ``n``; empty levels
    (for example when every node of a hop is closed and hidden) are skipped.
    """
    node_by_id = model.node_by_id()
    focus_id = options.focus_id
    focus = node_by_id.get(focus_id) if focus_id else None
    if focus is None:
        return PathWorkspace()

    max_depth = None if options.depth == "full" else int(options.depth)

    blockers: List[List[GraphNode]] = []
    dependents: List[List[GraphNode]] = []
    blocker_seen = {focus.id}
    dependent_seen = {focus.id}
    blocker_frontier = [focus.id]
    dependent_frontier = [focus.id]

    def visible(node: GraphNode) -> bool:
        return not options.hide_closed or node.status != "closed"

    depth = 0
    while max_depth is None or depth < max_depth:
        depth += 1
        next_blockers: List[str] = []
        next_dependents: List[str] = []
        blocker_level: List[GraphNode] = []
        dependent_level: List[GraphNode] = []

        for node_id in blocker_frontier:
            for edge in model.adjacency[node_id].incoming:
                if edge.source in blocker_seen:
                    continue
                blocker_seen.add(edge.source)
                next_blockers.append(edge.source)
                if visible(node_by_id[edge.source]):
                    blocker_level.append(node_by_id[edge.source])

        for node_id in dependent_frontier:
            for edge in model.adjacency[node_id].outgoing:
                if edge.target in dependent_seen:
                    continue
                dependent_seen.add(edge.target)
                next_dependents.append(edge.target)
                if visible(node_by_id[edge.target]):
                    dependent_level.append(node_by_id[edge.target])

        if blocker_level:
            blockers.append(sorted(blocker_level, key=node_sort_key))
        if dependent_level:
            dependents.append(sorted(dependent_level, key=node_sort_key))

        blocker_frontier = next_blockers
        dependent_frontier = next_dependents
        if not blocker_frontier and not dependent_frontier:
            break

    return PathWorkspace(focus=focus, blockers=blockers, dependents=dependents)


def _has_open_blocker(model: GraphModel, node_id: str, node_by_id: Dict[str, GraphNode]) -> bool:
    adjacency = model.adjacency.get(node_id)
    if adjacency is None:
        return False
    for edge in adjacency.incoming:
        if edge.type != "blocks":
            continue
        source = node_by_id.get(edge.source)
        if source is None or source.status != "closed":
            return True
    return False


def analyze_blocked_chain(model: GraphModel, focus_id: Optional[str]) -> BlockedChainAnalysis:
    """Every transitive blocker of ``focus_id`` via ``blocks`` edges.

    Unresolved blockers (anything not closed) are split into
    ``in_progress_blocker_count`` and ``open_blocker_count`` (the rest).
    ``first_actionable_blocker_id`` is the first unresolved blocker, in BFS
    discovery order, whose own ``blocks`` predecessors are all closed:
    the root cause someone can start on right now.
    """
    if not focus_id or focus_id not in model.adjacency:
        return BlockedChainAnalysis()

    node_by_id = model.node_by_id()
    visited = {focus_id}
    queue = deque([focus_id])
    blocker_ids: List[str] = []
    chain_edge_ids: Set[str] = set()

    while queue:
        node_id = queue.popleft()
        for edge in model.adjacency[node_id].incoming:
            if edge.type != "blocks":
                continue
            chain_edge_ids.add(edge.key)
            if edge.source not in visited:
                visited.add(edge.source)
                queue.append(edge.source)
                blocker_ids.append(edge.source)

    unresolved = [node_by_id[node_id] for node_id in blocker_ids if node_by_id[node_id].status != "closed"]
    in_progress = [node for node in unresolved if node.status == "in_progress"]
    first_actionable = next(
        (node.id for node in unresolved if not _has_open_blocker(model, node.id, node_by_id)),
        None,
    )

    # open + in progress partition the unresolved blockers
    return BlockedChainAnalysis(
        blocker_node_ids=sorted(blocker_ids),
        open_blocker_count=len(unresolved) - len(in_progress),
        in_progress_blocker_count=len(in_progress),
        first_actionable_blocker_id=first_actionable,
        chain_edge_ids=sorted(chain_edge_ids),
    )


def detect_dependency_cycles(model: GraphModel) -> CycleAnomaly:
    """Find blocking deadlocks: closed loops of ``blocks`` edges.

    Depth-first search with an on-stack set; each back edge closes one
    simple cycle, sliced from the current path. Cycles are deduplicated by
    their sorted member ids. Nodes that merely lead into a cycle are never
    reported. A self-referential ``blocks`` edge is a cycle of length one.
    The walk uses an explicit stack, so deep chains cannot exhaust the
    interpreter recursion limit.
    """
    successors: Dict[str, List[str]] = {node.id: [] for node in model.nodes}
    for edge in model.edges:
        if edge.type == "blocks":
            successors.setdefault(edge.source, []).append(edge.target)
    for node_id in successors:
        successors[node_id].sort()

    visited: Set[str] = set()
    on_stack: Set[str] = set()
    path: List[str] = []
    cycle_keys: Set[str] = set()
    cycles: List[List[str]] = []
    cycle_node_ids: Set[str] = set()
    cycle_edge_ids: Set[str] = set()

    def record(cycle_nodes: List[str]) -> None:
        canonical = sorted(cycle_nodes)
        cycle_key = "|".join(canonical)
        if cycle_key not in cycle_keys:
            cycle_keys.add(cycle_key)
            cycles.append(canonical)
        cycle_node_ids.update(canonical)
        for index, source in enumerate(cycle_nodes):
            target = cycle_nodes[(index + 1) % len(cycle_nodes)]
            cycle_edge_ids.add(f"{source}:blocks:{target}")

    for node in model.nodes:
        if node.id in visited:
            continue

        stack: List[Tuple[str, Iterator[str]]] = [(node.id, iter(successors[node.id]))]
        visited.add(node.id)
        on_stack.add(node.id)
        path.append(node.id)

        while stack:
            current, neighbors = stack[-1]
            next_id = next(neighbors, None)
            if next_id is None:
                stack.pop()
                on_stack.discard(current)
                path.pop()
                continue
            if next_id not in visited:
                visited.add(next_id)
                on_stack.add(next_id)
                path.append(next_id)
                stack.append((next_id, iter(successors.get(next_id, []))))
            elif next_id in on_stack:
                record(path[path.index(next_id):])

    cycles.sort(key=lambda cycle: "|".join(cycle))
    if cycles:
        logger.debug("Detected %d blocking cycle(s) over %d nodes", len(cycles), len(cycle_node_ids))

    return CycleAnomaly(
        cycles=cycles,
        cycle_node_ids=sorted(cycle_node_ids),
        cycle_edge_ids=sorted(cycle_edge_ids),
    )
