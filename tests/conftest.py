"""
Pytest configuration and fixtures for buildmanifest tests.
"""

from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Dict, Iterator, List, Optional

import pytest

from buildmanifest.config import reset_config
from buildmanifest.facts import ManifestFacts
from buildmanifest.models import CommitInfo, ProjectIdentity


# ============================================================================
# Environment Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def clean_config(monkeypatch) -> Iterator[None]:
    """Isolate tests from BUILDMANIFEST_* variables and the config singleton."""
    for key in list(os.environ):
        if key.startswith("BUILDMANIFEST_"):
            monkeypatch.delenv(key)
    reset_config()
    yield
    reset_config()
    log = logging.getLogger("buildmanifest")
    log.handlers.clear()
    log.setLevel(logging.NOTSET)


# ============================================================================
# Fact Fixtures
# ============================================================================


BUILD_INSTANT = datetime(2024, 5, 1, 10, 20, 30, 123456, tzinfo=timezone.utc)

PROPERTIES: Dict[str, str] = {
    "user.name": "builder",
    "os.name": "Linux",
    "os.version": "6.1.0",
    "os.arch": "x86_64",
    "python.version": "3.12.1",
    "python.implementation": "CPython",
}


class FakeRepository:
    """In-memory repository handle recording its lifecycle."""

    def __init__(
        self,
        head: Optional[CommitInfo] = None,
        branch: str = "main",
        remote: Optional[str] = "https://example.com/acme/app.git",
    ):
        self.head = head
        self.branch = branch
        self.remote = remote
        self.opened_at: List[Path] = []
        self.closed = False

    def head_commit(self) -> CommitInfo:
        if self.head is None:
            raise RuntimeError("HEAD cannot be resolved")
        return self.head

    def full_branch(self) -> str:
        return self.branch

    def remote_url(self, name: str = "origin") -> Optional[str]:
        return self.remote

    @contextmanager
    def opener(self, path: Path) -> Iterator["FakeRepository"]:
        self.opened_at.append(path)
        self.closed = False
        try:
            yield self
        finally:
            self.closed = True


@pytest.fixture
def head_commit() -> CommitInfo:
    return CommitInfo(
        hash="abcdef1234567890abcdef1234567890abcdef12",
        short_message="Fix bug",
        author_name="Jane Doe",
        author_email="jane@example.com",
        authored_at=datetime(2024, 4, 30, 8, 0, 0, 999, tzinfo=timezone.utc),
    )


@pytest.fixture
def repository(head_commit) -> FakeRepository:
    return FakeRepository(head=head_commit)


@pytest.fixture
def project() -> ProjectIdentity:
    return ProjectIdentity(
        name="app",
        group="com.acme",
        version="1.2.0",
        main_class="com.acme.Main",
    )


@pytest.fixture
def make_facts(project, repository, tmp_path) -> Callable[..., ManifestFacts]:
    """Factory for fact snapshots backed by fixed, fake host facts."""

    def _make(**overrides) -> ManifestFacts:
        values = {
            "project": project,
            "project_dir": tmp_path,
            "dependencies": (),
            "clock": lambda: BUILD_INSTANT,
            "host_name_resolver": lambda: "build-host",
            "properties": PROPERTIES.get,
            "open_repository": repository.opener,
        }
        values.update(overrides)
        return ManifestFacts(**values)

    return _make


@pytest.fixture
def facts(make_facts) -> ManifestFacts:
    return make_facts()
