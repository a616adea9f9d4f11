"""Configuration paths and layout constants for beadgraph."""

from __future__ import annotations

import os
from pathlib import Path

BASE_DIR = Path(os.environ.get("BEADGRAPH_HOME", str(Path.home() / ".beadgraph"))).expanduser()
REGISTRY_FILE = BASE_DIR / "projects.json"
STATE_FILE = BASE_DIR / "state.json"
CONFIG_FILE = BASE_DIR / "config.toml"

# Issue snapshot location inside a tracked project
ISSUES_RELATIVE_PATH = Path(".beads") / "issues.jsonl"

# Node box used by every layout mode
NODE_WIDTH = 340
NODE_HEIGHT = 132

# Focus-relative column layout
FOCUS_GUTTER_X = 60
FOCUS_GUTTER_Y = 26
FOCUS_COLUMN_OFFSET = 3

# Grid fallback (no edges)
GRID_GUTTER_X = 36
GRID_GUTTER_Y = 28

# Layered layout
RANK_SEPARATION = 110
NODE_SEPARATION = 36
ORDERING_SWEEPS = 4


def ensure_base_dirs() -> None:
    """Create the beadgraph home directory if needed."""
    BASE_DIR.mkdir(parents=True, exist_ok=True)
