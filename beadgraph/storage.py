"""Issue snapshot reading and the local project registry.

The graph engine itself performs no I/O; this module is the thin layer that
loads a tracker snapshot from ``<project>/.beads/issues.jsonl`` and remembers
which project roots the user works with.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import List, Optional, Tuple

from .config import ISSUES_RELATIVE_PATH, REGISTRY_FILE, STATE_FILE, ensure_base_dirs
from .models import Issue
from .parser import parse_issues_jsonl

logger = logging.getLogger(__name__)

REGISTRY_VERSION = 1


class RegistryValidationError(ValueError):
    """Raised when a project path cannot be registered."""


def resolve_issues_path(project_root: Path) -> Path:
    return (Path(project_root) / ISSUES_RELATIVE_PATH).resolve()


def read_issues_from_disk(project_root: Path, include_tombstones: bool = False) -> List[Issue]:
    """Load the issue snapshot of a project. A missing snapshot is empty."""
    issues_path = resolve_issues_path(project_root)
    try:
        text = issues_path.read_text(encoding="utf-8", errors="replace")
    except FileNotFoundError:
        logger.info("No issue snapshot at %s", issues_path)
        return []
    return parse_issues_jsonl(text, include_tombstones=include_tombstones)


def project_key(project_path: Path) -> str:
    """Stable identity of a project root (case-insensitive on Windows)."""
    resolved = str(Path(project_path).expanduser().resolve())
    return os.path.normcase(resolved)


@dataclass
class RegistryProject:
    path: str
    key: str


# ===================================================================
# ProjectRegistry
# ===================================================================

class ProjectRegistry:
    """Manage registered project roots and the active project."""

    def __init__(self) -> None:
        ensure_base_dirs()

    def _read(self) -> List[RegistryProject]:
        if not REGISTRY_FILE.exists():
            return []
        try:
            payload = json.loads(REGISTRY_FILE.read_text(encoding="utf-8"))
        except ValueError as exc:
            logger.warning("Ignoring unreadable project registry %s: %s", REGISTRY_FILE, exc)
            return []

        entries = payload.get("projects") if isinstance(payload, dict) else None
        if not isinstance(entries, list):
            return []

        seen = set()
        projects: List[RegistryProject] = []
        for entry in entries:
            if not isinstance(entry, dict) or not isinstance(entry.get("path"), str):
                continue
            key = project_key(Path(entry["path"]))
            if key in seen:
                continue
            seen.add(key)
            projects.append(RegistryProject(path=entry["path"], key=key))
        return projects

    def _write(self, projects: List[RegistryProject]) -> None:
        REGISTRY_FILE.parent.mkdir(parents=True, exist_ok=True)
        REGISTRY_FILE.write_text(
            json.dumps(
                {"version": REGISTRY_VERSION, "projects": [asdict(p) for p in projects]},
                indent=2,
            )
            + "\n",
            encoding="utf-8",
        )

    def _normalize(self, project_path: Path) -> RegistryProject:
        resolved = Path(project_path).expanduser().resolve()
        if not resolved.is_dir():
            raise RegistryValidationError(f"Project path must be an existing directory: {project_path}")
        return RegistryProject(path=str(resolved), key=project_key(resolved))

    def list_projects(self) -> List[RegistryProject]:
        return self._read()

    def find(self, key_or_path: str) -> Optional[RegistryProject]:
        """Look a project up by key, path, or directory name."""
        projects = self._read()
        candidate_key = project_key(Path(key_or_path))
        for project in projects:
            if project.key == candidate_key or project.key == key_or_path:
                return project
        for project in projects:
            if Path(project.path).name == key_or_path:
                return project
        return None

    def add_project(self, project_path: Path) -> Tuple[bool, List[RegistryProject]]:
        projects = self._read()
        project = self._normalize(project_path)
        if any(entry.key == project.key for entry in projects):
            return False, projects
        projects.append(project)
        self._write(projects)
        logger.info("Registered project %s", project.path)
        return True, projects

    def remove_project(self, project_path: Path) -> Tuple[bool, List[RegistryProject]]:
        projects = self._read()
        key = project_key(project_path)
        remaining = [entry for entry in projects if entry.key != key]
        if len(remaining) == len(projects):
            return False, projects
        self._write(remaining)
        if self.get_current_project() == key:
            self.clear_current_project()
        logger.info("Removed project %s", project_path)
        return True, remaining

    def set_current_project(self, key: str) -> None:
        ensure_base_dirs()
        STATE_FILE.write_text(
            json.dumps({"current_project": key}, indent=2),
            encoding="utf-8",
        )

    def get_current_project(self) -> Optional[str]:
        if not STATE_FILE.exists():
            return None
        try:
            payload = json.loads(STATE_FILE.read_text(encoding="utf-8"))
        except ValueError:
            return None
        return payload.get("current_project") if isinstance(payload, dict) else None

    def clear_current_project(self) -> None:
        ensure_base_dirs()
        STATE_FILE.write_text(
            json.dumps({"current_project": None}, indent=2),
            encoding="utf-8",
        )

    def current_project_root(self) -> Optional[Path]:
        key = self.get_current_project()
        if not key:
            return None
        for project in self._read():
            if project.key == key:
                return Path(project.path)
        return None
