"""Core data models: issue snapshots in, graph value objects out."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional, Union

IssueStatus = Literal[
    "open",
    "in_progress",
    "blocked",
    "deferred",
    "closed",
    "tombstone",
    "pinned",
    "hooked",
]

ISSUE_STATUSES = (
    "open",
    "in_progress",
    "blocked",
    "deferred",
    "closed",
    "tombstone",
    "pinned",
    "hooked",
)

EdgeType = Literal["blocks", "parent", "relates_to", "duplicates", "supersedes"]

GraphHopDepth = Union[Literal[1, 2], Literal["full"]]


@dataclass
class Dependency:
    type: str
    target: str


@dataclass
class Issue:
    """A tracked work item ("bead") as read from the issue tracker.

    Only ``id``, ``title``, ``status``, ``priority``, ``issue_type``,
    ``assignee``, ``updated_at`` and ``dependencies`` are read by the graph
    engine; everything else rides along untouched.
    """
    id: str
    title: str
    status: str = "open"
    priority: int = 2
    issue_type: str = "task"
    assignee: Optional[str] = None
    updated_at: str = ""
    dependencies: List[Dependency] = field(default_factory=list)
    description: Optional[str] = None
    owner: Optional[str] = None
    labels: List[str] = field(default_factory=list)
    created_at: str = ""
    closed_at: Optional[str] = None
    close_reason: Optional[str] = None
    created_by: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class GraphNode:
    id: str
    title: str
    status: str
    priority: int
    issue_type: str
    assignee: Optional[str]
    updated_at: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "status": self.status,
            "priority": self.priority,
            "issueType": self.issue_type,
            "assignee": self.assignee,
            "updatedAt": self.updated_at,
        }


@dataclass(frozen=True)
class GraphEdge:
    """Directed edge. ``blocks`` edges always point blocker -> blocked."""
    source: str
    target: str
    type: str

    @property
    def key(self) -> str:
        """Edge id used by chain and cycle reports: ``source:type:target``."""
        return f"{self.source}:{self.type}:{self.target}"

    def to_dict(self) -> Dict[str, str]:
        return {"source": self.source, "target": self.target, "type": self.type}


@dataclass
class AdjacencyEntry:
    incoming: List[GraphEdge] = field(default_factory=list)
    outgoing: List[GraphEdge] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "incoming": [edge.to_dict() for edge in self.incoming],
            "outgoing": [edge.to_dict() for edge in self.outgoing],
        }


@dataclass
class GraphDiagnostics:
    missing_targets: int = 0
    dropped_duplicates: int = 0
    unsupported_types: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "missingTargets": self.missing_targets,
            "droppedDuplicates": self.dropped_duplicates,
            "unsupportedTypes": self.unsupported_types,
        }


@dataclass
class GraphModel:
    nodes: List[GraphNode]
    edges: List[GraphEdge]
    adjacency: Dict[str, AdjacencyEntry]
    diagnostics: GraphDiagnostics
    project_key: Optional[str] = None

    def node_by_id(self) -> Dict[str, GraphNode]:
        return {node.id: node for node in self.nodes}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodes": [node.to_dict() for node in self.nodes],
            "edges": [edge.to_dict() for edge in self.edges],
            "adjacency": {node_id: entry.to_dict() for node_id, entry in self.adjacency.items()},
            "diagnostics": self.diagnostics.to_dict(),
            "projectKey": self.project_key,
        }


@dataclass(frozen=True)
class Position:
    x: float
    y: float


@dataclass(frozen=True)
class PositionedGraphNode:
    node: GraphNode
    position: Position

    @property
    def id(self) -> str:
        return self.node.id

    @property
    def status(self) -> str:
        return self.node.status

    def to_dict(self) -> Dict[str, Any]:
        payload = self.node.to_dict()
        payload["position"] = {"x": self.position.x, "y": self.position.y}
        return payload


@dataclass
class GraphViewOptions:
    focus_id: Optional[str] = None
    depth: GraphHopDepth = "full"
    hide_closed: bool = False


@dataclass
class GraphViewModel:
    nodes: List[PositionedGraphNode]
    edges: List[GraphEdge]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodes": [node.to_dict() for node in self.nodes],
            "edges": [edge.to_dict() for edge in self.edges],
        }


@dataclass
class PathWorkspace:
    focus: Optional[GraphNode] = None
    blockers: List[List[GraphNode]] = field(default_factory=list)
    dependents: List[List[GraphNode]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "focus": self.focus.to_dict() if self.focus else None,
            "blockers": [[node.to_dict() for node in level] for level in self.blockers],
            "dependents": [[node.to_dict() for node in level] for level in self.dependents],
        }


@dataclass
class BlockedChainAnalysis:
    blocker_node_ids: List[str] = field(default_factory=list)
    open_blocker_count: int = 0
    in_progress_blocker_count: int = 0
    first_actionable_blocker_id: Optional[str] = None
    chain_edge_ids: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "blockerNodeIds": list(self.blocker_node_ids),
            "openBlockerCount": self.open_blocker_count,
            "inProgressBlockerCount": self.in_progress_blocker_count,
            "firstActionableBlockerId": self.first_actionable_blocker_id,
            "chainEdgeIds": list(self.chain_edge_ids),
        }


@dataclass
class CycleAnomaly:
    cycles: List[List[str]] = field(default_factory=list)
    cycle_node_ids: List[str] = field(default_factory=list)
    cycle_edge_ids: List[str] = field(default_factory=list)

    @property
    def has_cycles(self) -> bool:
        return bool(self.cycles)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cycles": [list(cycle) for cycle in self.cycles],
            "cycleNodeIds": list(self.cycle_node_ids),
            "cycleEdgeIds": list(self.cycle_edge_ids),
        }
