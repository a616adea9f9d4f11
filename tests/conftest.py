"""Pytest configuration and fixtures for beadgraph tests."""

import json
import shutil
import tempfile
from pathlib import Path
from typing import Callable, Generator, Iterable, List

import pytest

from beadgraph.models import Dependency, Issue


def make_issue(
    id: str,
    status: str = "open",
    blocked_by: Iterable[str] = (),
    deps: Iterable[tuple] = (),
    **overrides,
) -> Issue:
    """Build an issue; ``blocked_by`` ids become ``blocks`` dependencies."""
    dependencies = [Dependency(type="blocks", target=target) for target in blocked_by]
    dependencies.extend(Dependency(type=dep_type, target=target) for dep_type, target in deps)
    return Issue(
        id=id,
        title=overrides.pop("title", f"Issue {id}"),
        status=status,
        updated_at=overrides.pop("updated_at", "2026-02-12T00:00:00Z"),
        dependencies=dependencies,
        **overrides,
    )


def blocking_chain(*ids: str, statuses: dict = None) -> List[Issue]:
    """Issues whose graph edges run ids[0] -> ids[1] -> ... as ``blocks``."""
    statuses = statuses or {}
    issues = [make_issue(ids[0], status=statuses.get(ids[0], "open"))]
    for previous, current in zip(ids, ids[1:]):
        issues.append(make_issue(current, status=statuses.get(current, "open"), blocked_by=[previous]))
    return issues


@pytest.fixture
def issue() -> Callable[..., Issue]:
    return make_issue


@pytest.fixture
def chain() -> Callable[..., List[Issue]]:
    return blocking_chain


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    tmp = Path(tempfile.mkdtemp())
    yield tmp
    shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture(autouse=True)
def beadgraph_home(temp_dir: Path, monkeypatch) -> Path:
    """Point the registry, state, and config files at a temp home."""
    home = temp_dir / "home"

    # Patch both config AND storage modules (storage imports at module load)
    monkeypatch.setattr("beadgraph.config.BASE_DIR", home)
    monkeypatch.setattr("beadgraph.config.REGISTRY_FILE", home / "projects.json")
    monkeypatch.setattr("beadgraph.config.STATE_FILE", home / "state.json")
    monkeypatch.setattr("beadgraph.config.CONFIG_FILE", home / "config.toml")
    monkeypatch.setattr("beadgraph.storage.REGISTRY_FILE", home / "projects.json")
    monkeypatch.setattr("beadgraph.storage.STATE_FILE", home / "state.json")
    return home


@pytest.fixture
def sample_records() -> List[dict]:
    """Raw tracker records: a blocked chain, an epic, a stale target, a reply."""
    return [
        {"id": "bb-1", "title": "Design schema", "status": "closed", "priority": 1, "issue_type": "task"},
        {
            "id": "bb-2",
            "title": "Write migrations",
            "status": "in_progress",
            "assignee": "ana",
            "dependencies": [{"type": "blocks", "target": "bb-1"}],
        },
        {
            "id": "bb-3",
            "title": "Ship API",
            "status": "blocked",
            "dependencies": [
                {"type": "blocks", "depends_on_id": "bb-2"},
                {"type": "parent-child", "target": "bb-epic"},
                {"type": "blocks", "target": "bb-gone"},
            ],
        },
        {"id": "bb-epic", "title": "Backend epic", "issue_type": "epic"},
        {
            "id": "bb-4",
            "title": "Discussion",
            "dependencies": [{"type": "replies_to", "target": "bb-3"}],
        },
    ]


@pytest.fixture
def beads_project(temp_dir: Path, sample_records: List[dict]) -> Path:
    """A project root with a ``.beads/issues.jsonl`` snapshot."""
    root = temp_dir / "project"
    (root / ".beads").mkdir(parents=True)
    lines = [json.dumps(record) for record in sample_records]
    (root / ".beads" / "issues.jsonl").write_text("\n".join(lines) + "\n", encoding="utf-8")
    return root
