"""Configuration manager for beadgraph using TOML files."""

from __future__ import annotations

import copy
import logging
from typing import Any, Dict

import toml

from . import config

logger = logging.getLogger(__name__)

DEFAULT_CONFIG: Dict[str, Dict[str, Any]] = {
    "view": {
        "depth": "full",
        "hide_closed": False,
    },
    "logging": {
        "level": "WARNING",
    },
}


def load_full_config() -> Dict[str, Any]:
    """Load the entire TOML config (all sections), or ``{}``."""
    if not config.CONFIG_FILE.exists():
        return {}
    try:
        with open(config.CONFIG_FILE, "r", encoding="utf-8") as f:
            return toml.load(f)
    except (OSError, toml.TomlDecodeError) as exc:
        logger.warning("Ignoring unreadable config %s: %s", config.CONFIG_FILE, exc)
        return {}


def load_config() -> Dict[str, Dict[str, Any]]:
    """Known sections merged over :data:`DEFAULT_CONFIG`.

    Unknown sections and keys are ignored.
    """
    merged = copy.deepcopy(DEFAULT_CONFIG)
    stored = load_full_config()
    for section, defaults in merged.items():
        values = stored.get(section)
        if not isinstance(values, dict):
            continue
        for key in defaults:
            if key in values:
                defaults[key] = values[key]
    return merged


def save_config(section: str, values: Dict[str, Any]) -> bool:
    """Update one section of the TOML file, preserving the others.

    Returns:
        True if saved successfully, False otherwise
    """
    full = load_full_config()
    current = full.get(section)
    full[section] = {**(current if isinstance(current, dict) else {}), **values}
    try:
        config.CONFIG_FILE.parent.mkdir(parents=True, exist_ok=True)
        with open(config.CONFIG_FILE, "w", encoding="utf-8") as f:
            toml.dump(full, f)
    except OSError as exc:
        logger.warning("Could not write config %s: %s", config.CONFIG_FILE, exc)
        return False
    return True
