"""beadgraph: dependency-graph modeling and analysis for tracked issues."""

from .analysis import GraphAnalysis, analyze_graph
from .graph import SUPPORTED_EDGE_TYPES, build_graph_model
from .graph_view import (
    analyze_blocked_chain,
    build_graph_view_model,
    build_path_workspace,
    detect_dependency_cycles,
    parse_hop_depth,
)
from .models import (
    BlockedChainAnalysis,
    CycleAnomaly,
    Dependency,
    GraphEdge,
    GraphModel,
    GraphNode,
    GraphViewModel,
    GraphViewOptions,
    Issue,
    PathWorkspace,
    PositionedGraphNode,
)
from .parser import parse_issues_jsonl

__version__ = "0.1.0"

__all__ = [
    "BlockedChainAnalysis",
    "CycleAnomaly",
    "Dependency",
    "GraphAnalysis",
    "GraphEdge",
    "GraphModel",
    "GraphNode",
    "GraphViewModel",
    "GraphViewOptions",
    "Issue",
    "PathWorkspace",
    "PositionedGraphNode",
    "SUPPORTED_EDGE_TYPES",
    "analyze_blocked_chain",
    "analyze_graph",
    "build_graph_model",
    "build_graph_view_model",
    "build_path_workspace",
    "detect_dependency_cycles",
    "parse_hop_depth",
    "parse_issues_jsonl",
]
