"""
Read-only access to a git repository.

The repository is queried through the ``git`` executable, the same way
provenance tooling usually shells out to git. Only the facts needed for
manifest attributes are exposed: the head commit, the full branch ref
and a remote URL.

Usage:
    from buildmanifest.scm import open_repository

    with open_repository(Path(".")) as repo:
        head = repo.head_commit()
        print(head.hash, repo.full_branch())

Remote lookups are local config reads, but every command is bounded by
a timeout because git may still block (credential helpers, slow disks).
"""

from __future__ import annotations

import logging
import subprocess
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, List, Optional

from buildmanifest.constants import GIT_COMMAND_TIMEOUT_S, GIT_REMOTE_NAME
from buildmanifest.models import CommitInfo

logger = logging.getLogger(__name__)

# Fields of `git log --format`, NUL separated
_HEAD_FORMAT = "%H%x00%s%x00%an%x00%ae%x00%at"


class ScmError(Exception):
    """Raised when repository state cannot be read."""


class RepositoryNotFoundError(ScmError):
    """Raised when the directory is not inside a git work tree."""

    def __init__(self, path: Path):
        self.path = path
        super().__init__(f"No git repository found at {path}")


class GitCommandError(ScmError):
    """Rich error for failed git invocations."""

    def __init__(self, args: List[str], returncode: int, stderr: str = ""):
        self.args_list = args
        self.returncode = returncode
        self.stderr = stderr
        message = f"git {' '.join(args)} exited with {returncode}"
        if stderr:
            message += f": {stderr.strip()}"
        super().__init__(message)


class GitRepository:
    """Handle on a git work tree. Obtain one through open_repository()."""

    def __init__(
        self,
        path: Path,
        executable: str = "git",
        timeout_s: float = GIT_COMMAND_TIMEOUT_S,
    ):
        self.path = path
        self.executable = executable
        self.timeout_s = timeout_s
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        self._closed = True

    def _git(self, *args: str, check: bool = True) -> Optional[str]:
        """
        Run a git command in the repository.

        Returns stripped stdout. With check=False a non-zero exit yields
        None instead of raising.
        """
        if self._closed:
            raise ScmError(f"Repository {self.path} is closed")
        cmd = [self.executable, "-C", str(self.path), *args]
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.timeout_s,
            )
        except subprocess.TimeoutExpired as e:
            raise ScmError(f"git {' '.join(args)} timed out after {self.timeout_s}s") from e
        except OSError as e:
            raise ScmError(f"Could not run {self.executable}: {e}") from e

        if result.returncode != 0:
            if not check:
                return None
            raise GitCommandError(list(args), result.returncode, result.stderr)
        return result.stdout.strip()

    def verify(self) -> None:
        """Ensure the path is a git work tree."""
        try:
            inside = self._git("rev-parse", "--is-inside-work-tree")
        except GitCommandError as e:
            raise RepositoryNotFoundError(self.path) from e
        if inside != "true":
            raise RepositoryNotFoundError(self.path)

    def head_commit(self) -> CommitInfo:
        """Read the commit HEAD points to."""
        out = self._git("log", "-1", f"--format={_HEAD_FORMAT}", "HEAD")
        parts = out.split("\x00") if out else []
        if len(parts) != 5:
            raise ScmError(f"Unexpected git log output for HEAD in {self.path}")
        commit_hash, subject, name, email, timestamp = parts
        return CommitInfo(
            hash=commit_hash,
            short_message=subject,
            author_name=name,
            author_email=email,
            authored_at=datetime.fromtimestamp(int(timestamp), tz=timezone.utc),
        )

    def full_branch(self) -> str:
        """Full ref HEAD points to, or the commit hash when detached."""
        ref = self._git("symbolic-ref", "-q", "HEAD", check=False)
        if ref:
            return ref
        return self._git("rev-parse", "HEAD")

    def remote_url(self, name: str = GIT_REMOTE_NAME) -> Optional[str]:
        """URL configured for a remote, or None when absent."""
        return self._git("config", "--get", f"remote.{name}.url", check=False) or None


@contextmanager
def open_repository(
    path: Path,
    executable: str = "git",
    timeout_s: float = GIT_COMMAND_TIMEOUT_S,
) -> Iterator[GitRepository]:
    """
    Open the repository containing path; the handle is closed on exit.

    git discovers the work tree from path upward, so a project directory
    nested inside a repository resolves to the enclosing repository
    rather than requiring a .git directory at path itself.
    """
    repo = GitRepository(Path(path), executable=executable, timeout_s=timeout_s)
    try:
        repo.verify()
        logger.debug("Opened git repository at %s", repo.path)
        yield repo
    finally:
        repo.close()
