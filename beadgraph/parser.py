"""JSONL issue snapshot parser.

The tracker appends one JSON object per line and may be mid-write while we
read, so the parser is deliberately forgiving: anything it cannot make sense
of is skipped rather than raised.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

from .models import Dependency, Issue

logger = logging.getLogger(__name__)

DEPENDENCY_TYPE_ALIASES = {"parent-child": "parent"}


def _str_or_none(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def normalize_dependencies(value: Any) -> List[Dependency]:
    """Accept ``{type, target}`` or ``{type, depends_on_id}`` records."""
    if not isinstance(value, list):
        return []

    dependencies = []
    for item in value:
        if not isinstance(item, dict):
            continue
        dep_type = item.get("type")
        if not isinstance(dep_type, str):
            continue
        target = _str_or_none(item.get("target")) or _str_or_none(item.get("depends_on_id"))
        if not target:
            continue
        dependencies.append(Dependency(type=DEPENDENCY_TYPE_ALIASES.get(dep_type, dep_type), target=target))
    return dependencies


def issue_from_dict(raw: Dict[str, Any]) -> Issue:
    """Normalize one raw record, filling tracker defaults for missing fields."""
    priority = raw.get("priority")
    labels = raw.get("labels")
    metadata = raw.get("metadata")
    return Issue(
        id=raw["id"],
        title=raw["title"],
        status=_str_or_none(raw.get("status")) or "open",
        priority=priority if isinstance(priority, int) and not isinstance(priority, bool) else 2,
        issue_type=_str_or_none(raw.get("issue_type")) or "task",
        assignee=_str_or_none(raw.get("assignee")),
        updated_at=_str_or_none(raw.get("updated_at")) or "",
        dependencies=normalize_dependencies(raw.get("dependencies")),
        description=_str_or_none(raw.get("description")),
        owner=_str_or_none(raw.get("owner")),
        labels=[label for label in labels if isinstance(label, str)] if isinstance(labels, list) else [],
        created_at=_str_or_none(raw.get("created_at")) or "",
        closed_at=_str_or_none(raw.get("closed_at")),
        close_reason=_str_or_none(raw.get("close_reason")),
        created_by=_str_or_none(raw.get("created_by")),
        metadata=metadata if isinstance(metadata, dict) else {},
    )


def parse_issues_jsonl(text: str, include_tombstones: bool = False) -> List[Issue]:
    """Parse a JSONL snapshot into issues.

    Args:
        text: File contents, one JSON object per line.
        include_tombstones: Keep issues whose status is ``tombstone``.

    Returns:
        Issues in file order. Blank lines, malformed JSON, and records
        without ``id``/``title`` are skipped.
    """
    issues: List[Issue] = []
    skipped = 0

    for line_no, line in enumerate(text.splitlines(), 1):
        stripped = line.strip()
        if not stripped:
            continue

        try:
            raw = json.loads(stripped)
        except json.JSONDecodeError as exc:
            logger.debug("Skipping malformed line %d: %s", line_no, exc)
            skipped += 1
            continue

        if not isinstance(raw, dict) or not _str_or_none(raw.get("id")) or not _str_or_none(raw.get("title")):
            skipped += 1
            continue

        issue = issue_from_dict(raw)
        if not include_tombstones and issue.status == "tombstone":
            continue
        issues.append(issue)

    if skipped:
        logger.info("Parsed %d issues, skipped %d unreadable line(s)", len(issues), skipped)
    return issues
