"""One-shot analysis bundle for a dashboard snapshot."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Set

from .graph import build_graph_model
from .graph_view import analyze_blocked_chain, detect_dependency_cycles
from .models import BlockedChainAnalysis, CycleAnomaly, GraphModel, Issue


@dataclass
class NodeSignal:
    blocked_by: int
    blocks: int


@dataclass
class GraphAnalysis:
    graph_model: GraphModel
    signal_by_id: Dict[str, NodeSignal]
    cycle_analysis: CycleAnomaly
    cycle_node_ids: Set[str]
    actionable_node_ids: List[str]
    blocker_tooltips: Dict[str, List[str]]
    blocker_analysis: Optional[BlockedChainAnalysis] = None
    chain_node_ids: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "projectKey": self.graph_model.project_key,
            "signals": {
                node_id: {"blockedBy": signal.blocked_by, "blocks": signal.blocks}
                for node_id, signal in self.signal_by_id.items()
            },
            "cycleAnalysis": self.cycle_analysis.to_dict(),
            "actionableNodeIds": list(self.actionable_node_ids),
            "blockerTooltips": {node_id: list(lines) for node_id, lines in self.blocker_tooltips.items()},
            "blockerAnalysis": self.blocker_analysis.to_dict() if self.blocker_analysis else None,
            "chainNodeIds": list(self.chain_node_ids),
        }


def analyze_graph(
    issues: Iterable[Issue],
    project_key: Optional[str] = None,
    selected_id: Optional[str] = None,
) -> GraphAnalysis:
    """Build the model once and derive the per-node signals the board shows.

    ``actionable_node_ids`` are open issues with no open ``blocks``
    predecessor. Signal counts cover every edge type, while tooltips list
    only open blockers.
    """
    issues = list(issues)
    model = build_graph_model(issues, project_key=project_key)
    node_by_id = model.node_by_id()

    signal_by_id: Dict[str, NodeSignal] = {}
    actionable: List[str] = []
    tooltips: Dict[str, List[str]] = {}

    for node in model.nodes:
        adjacency = model.adjacency[node.id]
        signal_by_id[node.id] = NodeSignal(blocked_by=len(adjacency.incoming), blocks=len(adjacency.outgoing))

        open_blockers = [
            node_by_id[edge.source]
            for edge in adjacency.incoming
            if edge.type == "blocks" and node_by_id[edge.source].status != "closed"
        ]
        tooltips[node.id] = [f'{blocker.id} ({blocker.status}) - "{blocker.title}"' for blocker in open_blockers]
        if node.status != "closed" and not open_blockers:
            actionable.append(node.id)

    cycle_analysis = detect_dependency_cycles(model)

    blocker_analysis = None
    chain_node_ids: List[str] = []
    if selected_id:
        blocker_analysis = analyze_blocked_chain(model, selected_id)
        chain_node_ids = sorted({selected_id, *blocker_analysis.blocker_node_ids})

    return GraphAnalysis(
        graph_model=model,
        signal_by_id=signal_by_id,
        cycle_analysis=cycle_analysis,
        cycle_node_ids=set(cycle_analysis.cycle_node_ids),
        actionable_node_ids=actionable,
        blocker_tooltips=tooltips,
        blocker_analysis=blocker_analysis,
        chain_node_ids=chain_node_ids,
    )
