"""Command hierarchy groups for the beadgraph CLI.

  beadgraph project  — Registered project roots
  beadgraph config   — Default view and logging settings
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from . import config
from .config_manager import load_config, save_config
from .graph_view import parse_hop_depth
from .storage import ProjectRegistry, RegistryValidationError, resolve_issues_path

console = Console()

# ── Project management group ─────────────────────────────────
project_grp = typer.Typer(
    help="📂 Projects — register, select, and list tracked project roots.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# ── Configuration group ──────────────────────────────────────
config_grp = typer.Typer(
    help="⚙️  Configuration — default view options and logging.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


@project_grp.command("add")
def project_add(
    project_path: Path = typer.Argument(..., exists=True, file_okay=False, help="Project root containing .beads/."),
    use: bool = typer.Option(True, "--use/--no-use", help="Make it the current project."),
):
    """Register a project root."""
    registry = ProjectRegistry()
    try:
        added, _ = registry.add_project(project_path)
    except RegistryValidationError as exc:
        raise typer.BadParameter(str(exc))

    found = registry.find(str(project_path))
    if use and found:
        registry.set_current_project(found.key)

    if added:
        typer.echo(f"Registered project '{found.path if found else project_path}'.")
    else:
        typer.echo(f"Project '{project_path}' is already registered.")
    if not resolve_issues_path(project_path).exists():
        typer.echo(f"Note: no issue snapshot at {resolve_issues_path(project_path)} yet.")


@project_grp.command("list")
def project_list():
    """List registered project roots."""
    registry = ProjectRegistry()
    projects = registry.list_projects()
    current = registry.get_current_project()

    if not projects:
        typer.echo("No projects registered yet.")
        raise typer.Exit(code=0)

    for project in projects:
        marker = "*" if project.key == current else " "
        typer.echo(f"{marker} {project.path}")


@project_grp.command("remove")
def project_remove(project: str = typer.Argument(..., help="Project path, key, or directory name.")):
    """Forget a registered project root (the snapshot is left untouched)."""
    registry = ProjectRegistry()
    found = registry.find(project)
    if not found:
        raise typer.BadParameter(f"Project '{project}' not found.")
    registry.remove_project(Path(found.path))
    typer.echo(f"Removed project '{found.path}'.")


@project_grp.command("use")
def project_use(project: str = typer.Argument(..., help="Project path, key, or directory name.")):
    """Switch the current project."""
    registry = ProjectRegistry()
    found = registry.find(project)
    if not found:
        raise typer.BadParameter(f"Project '{project}' not found.")
    registry.set_current_project(found.key)
    typer.echo(f"Using project '{found.path}'.")


@project_grp.command("current")
def project_current():
    """Print the current project root."""
    root = ProjectRegistry().current_project_root()
    typer.echo(str(root) if root else "No project selected")


@config_grp.command("show")
def config_show(as_json: bool = typer.Option(False, "--json", help="Emit JSON.")):
    """Show effective configuration."""
    settings = load_config()
    if as_json:
        typer.echo(json.dumps(settings, indent=2))
        return

    table = Table(title=f"Configuration ({config.CONFIG_FILE})")
    table.add_column("Key", style="cyan")
    table.add_column("Value")
    for section, values in settings.items():
        for key, value in values.items():
            table.add_row(f"{section}.{key}", str(value))
    console.print(table)


@config_grp.command("set-view")
def config_set_view(
    depth: Optional[str] = typer.Option(None, "--depth", "-d", help="Default hop depth: 1, 2, or full."),
    hide_closed: Optional[bool] = typer.Option(None, "--hide-closed/--show-closed", help="Hide closed issues by default."),
):
    """Persist default view options."""
    values = {}
    if depth is not None:
        try:
            values["depth"] = parse_hop_depth(depth)
        except ValueError as exc:
            raise typer.BadParameter(str(exc))
    if hide_closed is not None:
        values["hide_closed"] = hide_closed
    if not values:
        raise typer.BadParameter("Nothing to set. Pass --depth and/or --hide-closed/--show-closed.")

    if not save_config("view", values):
        typer.echo("❌ Could not write configuration.", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"Saved view defaults: {values}")


@config_grp.command("set-log-level")
def config_set_log_level(level: str = typer.Argument(..., help="DEBUG, INFO, WARNING, or ERROR.")):
    """Persist the default log level."""
    level = level.upper()
    if level not in {"DEBUG", "INFO", "WARNING", "ERROR"}:
        raise typer.BadParameter("Level must be one of: DEBUG, INFO, WARNING, ERROR")
    if not save_config("logging", {"level": level}):
        typer.echo("❌ Could not write configuration.", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"Saved log level: {level}")
