"""Typer-based CLI for exploring a tracker's dependency graph."""

from __future__ import annotations

import json
import logging
import sys
from collections import Counter
from pathlib import Path
from typing import Any, List, Optional, Tuple

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from . import __version__
from .analysis import analyze_graph
from .cli_groups import config_grp, project_grp
from .config_manager import load_config
from .graph import build_graph_model
from .graph_export import export_dot, export_html
from .graph_view import (
    analyze_blocked_chain,
    build_graph_view_model,
    build_path_workspace,
    detect_dependency_cycles,
    parse_hop_depth,
)
from .models import GraphHopDepth, GraphModel, GraphViewOptions, Issue
from .storage import ProjectRegistry, project_key, read_issues_from_disk

console = Console()

app = typer.Typer(
    help="🧵 beadgraph — dependency graph analysis for tracked issues.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.add_typer(project_grp, name="project")
app.add_typer(config_grp, name="config")

_settings = load_config()
DEFAULT_DEPTH = str(_settings["view"]["depth"])
DEFAULT_HIDE_CLOSED = bool(_settings["view"]["hide_closed"])

STATUS_COLORS = {
    "open": "green",
    "in_progress": "yellow",
    "blocked": "red",
    "deferred": "magenta",
    "closed": "dim",
}


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        typer.echo(f"beadgraph v{__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    level_name = "DEBUG" if verbose else str(load_config()["logging"]["level"]).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.WARNING),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging on stderr."),
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
):
    """beadgraph: blockers, dependents, chains, and cycles of a beads issue snapshot."""
    _configure_logging(verbose)


# ===================================================================
# Helpers
# ===================================================================

def _project_root(project: Optional[Path]) -> Path:
    if project is not None:
        return project.resolve()
    return ProjectRegistry().current_project_root() or Path.cwd()


def _load_issues(project: Optional[Path], include_tombstones: bool) -> Tuple[Path, List[Issue]]:
    root = _project_root(project)
    try:
        issues = read_issues_from_disk(root, include_tombstones=include_tombstones)
    except OSError as exc:
        typer.echo(f"❌ Could not read issues for '{root}': {exc}", err=True)
        raise typer.Exit(code=1)
    return root, issues


def _load_model(project: Optional[Path], include_tombstones: bool) -> GraphModel:
    root, issues = _load_issues(project, include_tombstones)
    return build_graph_model(issues, project_key=project_key(root))


def _depth(value: str) -> GraphHopDepth:
    try:
        return parse_hop_depth(value)
    except ValueError as exc:
        raise typer.BadParameter(str(exc))


def _require_focus(model: GraphModel, focus: str) -> None:
    if focus not in model.adjacency:
        typer.echo(f"❌ Issue '{focus}' not found in current snapshot.", err=True)
        raise typer.Exit(code=1)


def _emit_json(payload: Any) -> None:
    typer.echo(json.dumps(payload, indent=2))


def _status(status: str) -> str:
    color = STATUS_COLORS.get(status)
    return f"[{color}]{status}[/{color}]" if color else status


ProjectOption = typer.Option(None, "--project", "-p", file_okay=False, help="Project root (default: current project or cwd).")
TombstoneOption = typer.Option(False, "--include-tombstones", help="Keep tombstoned issues.")
JsonOption = typer.Option(False, "--json", help="Emit JSON instead of tables.")


# ===================================================================
# Commands
# ===================================================================

@app.command("model")
def model_summary(
    project: Optional[Path] = ProjectOption,
    include_tombstones: bool = TombstoneOption,
    as_json: bool = JsonOption,
):
    """Summarize the normalized graph and its build diagnostics."""
    model = _load_model(project, include_tombstones)
    if as_json:
        _emit_json(model.to_dict())
        return

    by_type = Counter(edge.type for edge in model.edges)
    table = Table(title=f"Graph model ({model.project_key})")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Nodes", str(len(model.nodes)))
    table.add_row("Edges", str(len(model.edges)))
    for edge_type in sorted(by_type):
        table.add_row(f"  {edge_type}", str(by_type[edge_type]))
    table.add_row("Missing targets", str(model.diagnostics.missing_targets))
    table.add_row("Dropped duplicates", str(model.diagnostics.dropped_duplicates))
    table.add_row("Unsupported types", str(model.diagnostics.unsupported_types))
    console.print(table)


@app.command("view")
def view(
    focus: Optional[str] = typer.Argument(None, help="Issue id to center the view on."),
    depth: str = typer.Option(DEFAULT_DEPTH, "--depth", "-d", help="Hop depth: 1, 2, or full."),
    hide_closed: bool = typer.Option(DEFAULT_HIDE_CLOSED, "--hide-closed/--show-closed", help="Hide closed issues."),
    project: Optional[Path] = ProjectOption,
    include_tombstones: bool = TombstoneOption,
    as_json: bool = JsonOption,
):
    """Show the visible, positioned subgraph around an optional focus."""
    hop_depth = _depth(depth)
    model = _load_model(project, include_tombstones)
    if focus:
        _require_focus(model, focus)

    result = build_graph_view_model(model, GraphViewOptions(focus_id=focus, depth=hop_depth, hide_closed=hide_closed))
    if as_json:
        _emit_json(result.to_dict())
        return

    table = Table(title=f"View ({focus or 'full graph'}, depth={hop_depth})")
    table.add_column("Issue", style="cyan", no_wrap=True)
    table.add_column("Status")
    table.add_column("x", justify="right")
    table.add_column("y", justify="right")
    table.add_column("Title")
    for item in result.nodes:
        table.add_row(item.id, _status(item.status), str(item.position.x), str(item.position.y), escape(item.node.title))
    console.print(table)
    typer.echo(f"Nodes: {len(result.nodes)} | Edges: {len(result.edges)}")


@app.command("path")
def path_workspace(
    focus: str = typer.Argument(..., help="Issue id to trace blockers and dependents for."),
    depth: str = typer.Option(DEFAULT_DEPTH, "--depth", "-d", help="Hop depth: 1, 2, or full."),
    hide_closed: bool = typer.Option(DEFAULT_HIDE_CLOSED, "--hide-closed/--show-closed", help="Hide closed issues."),
    project: Optional[Path] = ProjectOption,
    include_tombstones: bool = TombstoneOption,
    as_json: bool = JsonOption,
):
    """Show blockers (upstream) and dependents (downstream) level by level."""
    hop_depth = _depth(depth)
    model = _load_model(project, include_tombstones)
    _require_focus(model, focus)

    workspace = build_path_workspace(model, GraphViewOptions(focus_id=focus, depth=hop_depth, hide_closed=hide_closed))
    if as_json:
        _emit_json(workspace.to_dict())
        return

    typer.echo(f"Focus: {workspace.focus.id} ({workspace.focus.status}) {workspace.focus.title}")
    for label, levels in (("Blockers", workspace.blockers), ("Dependents", workspace.dependents)):
        typer.echo(f"{label}:")
        if not levels:
            typer.echo("  none")
        for index, level in enumerate(levels, 1):
            typer.echo(f"  L{index}: {', '.join(node.id for node in level)}")


@app.command("chain")
def blocked_chain(
    focus: str = typer.Argument(..., help="Blocked issue id."),
    project: Optional[Path] = ProjectOption,
    include_tombstones: bool = TombstoneOption,
    as_json: bool = JsonOption,
):
    """Analyze the transitive blocker chain of an issue."""
    model = _load_model(project, include_tombstones)
    _require_focus(model, focus)

    summary = analyze_blocked_chain(model, focus)
    if as_json:
        _emit_json(summary.to_dict())
        return

    typer.echo(f"Blockers: {', '.join(summary.blocker_node_ids) or 'none'}")
    typer.echo(f"Open blockers: {summary.open_blocker_count} | In progress: {summary.in_progress_blocker_count}")
    typer.echo(f"First actionable blocker: {summary.first_actionable_blocker_id or 'none'}")
    if summary.chain_edge_ids:
        typer.echo("Chain edges:")
        for edge_id in summary.chain_edge_ids:
            typer.echo(f"- {edge_id}")


@app.command("cycles")
def cycles(
    project: Optional[Path] = ProjectOption,
    include_tombstones: bool = TombstoneOption,
    as_json: bool = JsonOption,
):
    """Detect deadlocked loops of blocking dependencies."""
    model = _load_model(project, include_tombstones)
    anomaly = detect_dependency_cycles(model)
    if as_json:
        _emit_json(anomaly.to_dict())
        return

    if not anomaly.has_cycles:
        typer.echo("No blocking cycles detected.")
        return

    typer.echo(f"⚠️  {len(anomaly.cycles)} blocking cycle(s):")
    for cycle in anomaly.cycles:
        typer.echo(f"- {', '.join(cycle)}")
    typer.echo("Cycle edges:")
    for edge_id in anomaly.cycle_edge_ids:
        typer.echo(f"- {edge_id}")


@app.command("signals")
def signals(
    selected: Optional[str] = typer.Option(None, "--selected", "-s", help="Issue id to run chain analysis for."),
    project: Optional[Path] = ProjectOption,
    include_tombstones: bool = TombstoneOption,
    as_json: bool = JsonOption,
):
    """Per-issue blocker counts, actionable issues, and cycle membership."""
    root, issues = _load_issues(project, include_tombstones)
    analysis = analyze_graph(issues, project_key=project_key(root), selected_id=selected)
    if as_json:
        _emit_json(analysis.to_dict())
        return

    actionable = set(analysis.actionable_node_ids)
    table = Table(title="Issue signals")
    table.add_column("Issue", style="cyan", no_wrap=True)
    table.add_column("Status")
    table.add_column("In", justify="right")
    table.add_column("Out", justify="right")
    table.add_column("Actionable", justify="center")
    table.add_column("Cycle", justify="center")
    for node in analysis.graph_model.nodes:
        signal = analysis.signal_by_id[node.id]
        table.add_row(
            node.id,
            _status(node.status),
            str(signal.blocked_by),
            str(signal.blocks),
            "✓" if node.id in actionable else "",
            "⚠" if node.id in analysis.cycle_node_ids else "",
        )
    console.print(table)

    if analysis.blocker_analysis is not None:
        typer.echo(f"Chain for {selected}: {', '.join(analysis.chain_node_ids)}")


@app.command("export-graph")
def export_graph(
    focus: Optional[str] = typer.Argument(None, help="Optional focus issue id."),
    fmt: str = typer.Option("html", "--format", "-f", help="Export format: html or dot."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output file path."),
    depth: str = typer.Option(DEFAULT_DEPTH, "--depth", "-d", help="Hop depth: 1, 2, or full."),
    hide_closed: bool = typer.Option(DEFAULT_HIDE_CLOSED, "--hide-closed/--show-closed", help="Hide closed issues."),
    project: Optional[Path] = ProjectOption,
    include_tombstones: bool = TombstoneOption,
):
    """Export a view to standalone HTML or Graphviz DOT."""
    fmt = fmt.lower()
    if fmt not in {"html", "dot"}:
        raise typer.BadParameter("Format must be one of: html, dot")

    hop_depth = _depth(depth)
    model = _load_model(project, include_tombstones)
    if focus:
        _require_focus(model, focus)
    result = build_graph_view_model(model, GraphViewOptions(focus_id=focus, depth=hop_depth, hide_closed=hide_closed))

    if output is None:
        name = Path(model.project_key or "beads").name or "beads"
        output = Path.cwd() / f"{name}_graph.{fmt}"

    if fmt == "html":
        export_html(result, output, title=f"{focus or 'Dependency graph'}")
    else:
        export_dot(result, output)

    typer.echo(f"Exported graph to {output}")


if __name__ == "__main__":
    app()
