"""
Host facts consumed by attribute providers.

Each accessor is a thin callable over the environment: the clock, the
local host name, named system properties and the source-control
repository. ManifestFacts bundles them into one read-only snapshot so
that providers stay pure and tests can substitute any fact.

System properties:
    user.name               login name (honours LOGNAME/USER/USERNAME)
    os.name                 platform.system()
    os.version              platform.release()
    os.arch                 platform.machine()
    python.version          platform.python_version()
    python.implementation   platform.python_implementation()
"""

from __future__ import annotations

import getpass
import platform
import socket
from dataclasses import dataclass, field
from datetime import datetime, timezone
from functools import partial
from pathlib import Path
from typing import Callable, ContextManager, Dict, Iterable, Optional, Protocol, Tuple

from buildmanifest.models import CommitInfo, ProjectIdentity
from buildmanifest.scm import open_repository

Clock = Callable[[], datetime]
HostNameResolver = Callable[[], str]
PropertyReader = Callable[[str], Optional[str]]


class Repository(Protocol):
    """What providers need from a source-control handle."""

    def head_commit(self) -> CommitInfo: ...

    def full_branch(self) -> str: ...

    def remote_url(self, name: str = ...) -> Optional[str]: ...


RepositoryOpener = Callable[[Path], ContextManager[Repository]]


def system_clock() -> datetime:
    """Current instant in UTC."""
    return datetime.now(timezone.utc)


def resolve_host_name() -> str:
    """Local host name."""
    return socket.gethostname()


SYSTEM_PROPERTIES: Dict[str, Callable[[], str]] = {
    "user.name": getpass.getuser,
    "os.name": platform.system,
    "os.version": platform.release,
    "os.arch": platform.machine,
    "python.version": platform.python_version,
    "python.implementation": platform.python_implementation,
}


def system_property(name: str) -> Optional[str]:
    """Read a named system property, or None if unknown or unreadable."""
    reader = SYSTEM_PROPERTIES.get(name)
    if reader is None:
        return None
    try:
        return reader()
    except Exception:
        return None


@dataclass(frozen=True)
class ManifestFacts:
    """
    Snapshot of everything providers may read during one merge.

    Attributes:
        project: Identity of the project being packaged
        project_dir: Root directory, used to locate the repository
        dependencies: Ordered runtime dependency files (names or paths)
        clock: Returns the current instant
        host_name_resolver: Returns the local host name
        properties: Reads named system properties
        open_repository: Opens the repository at a path as a context manager
    """

    project: ProjectIdentity
    project_dir: Path = field(default_factory=Path.cwd)
    dependencies: Tuple[str, ...] = ()
    clock: Clock = system_clock
    host_name_resolver: HostNameResolver = resolve_host_name
    properties: PropertyReader = system_property
    open_repository: RepositoryOpener = open_repository

    @classmethod
    def from_environment(
        cls,
        project: ProjectIdentity,
        project_dir: Path,
        dependencies: Iterable[str] = (),
        git_executable: str = "git",
        git_timeout_s: Optional[float] = None,
    ) -> "ManifestFacts":
        """Build a snapshot backed by the real host and git executable."""
        opener_kwargs = {"executable": git_executable}
        if git_timeout_s is not None:
            opener_kwargs["timeout_s"] = git_timeout_s
        return cls(
            project=project,
            project_dir=Path(project_dir),
            dependencies=tuple(str(d) for d in dependencies),
            open_repository=partial(open_repository, **opener_kwargs),
        )
