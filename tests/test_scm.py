"""
Tests for git repository access against real repositories.
"""

import os
import shutil
import subprocess
from datetime import datetime, timezone
from pathlib import Path

import pytest

from buildmanifest.attributes import generate_attributes
from buildmanifest.facts import ManifestFacts
from buildmanifest.models import ManifestOptions, ProjectIdentity
from buildmanifest.scm import (
    GitCommandError,
    GitRepository,
    RepositoryNotFoundError,
    ScmError,
    open_repository,
)

pytestmark = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")

AUTHORED_AT = datetime(2024, 5, 1, 10, 20, 30, tzinfo=timezone.utc)


@pytest.fixture
def git_env(tmp_path, monkeypatch):
    """Environment isolating git from user/system configuration."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_CEILING_DIRECTORIES", str(tmp_path))
    env = dict(os.environ)
    env.update({
        "GIT_AUTHOR_NAME": " Jane Doe ",
        "GIT_AUTHOR_EMAIL": "jane@example.com",
        "GIT_AUTHOR_DATE": f"{int(AUTHORED_AT.timestamp())} +0200",
        "GIT_COMMITTER_NAME": "Committer",
        "GIT_COMMITTER_EMAIL": "committer@example.com",
    })
    return env


def _git(path: Path, env, *args: str) -> str:
    result = subprocess.run(
        ["git", "-c", "commit.gpgsign=false", *args],
        cwd=path,
        env=env,
        check=True,
        capture_output=True,
        text=True,
    )
    return result.stdout.strip()


@pytest.fixture
def empty_repo(tmp_path, git_env) -> Path:
    path = tmp_path / "repo"
    path.mkdir()
    _git(path, git_env, "init", "-q")
    _git(path, git_env, "symbolic-ref", "HEAD", "refs/heads/main")
    return path


@pytest.fixture
def git_repo(empty_repo, git_env) -> Path:
    _git(empty_repo, git_env, "commit", "-q", "--allow-empty", "-m", "Fix bug\n\nLonger body text.")
    _git(empty_repo, git_env, "remote", "add", "origin", "https://example.com/acme/app.git")
    return empty_repo


class TestOpenRepository:
    def test_not_a_repository(self, tmp_path, git_env):
        plain = tmp_path / "plain"
        plain.mkdir()
        with pytest.raises(RepositoryNotFoundError):
            with open_repository(plain):
                pass

    def test_missing_directory(self, tmp_path, git_env):
        with pytest.raises(RepositoryNotFoundError):
            with open_repository(tmp_path / "does-not-exist"):
                pass

    def test_handle_closed_on_exit(self, git_repo):
        with open_repository(git_repo) as repo:
            assert not repo.closed
        assert repo.closed
        with pytest.raises(ScmError):
            repo.head_commit()

    def test_handle_closed_on_error(self, git_repo):
        with pytest.raises(KeyError):
            with open_repository(git_repo) as repo:
                raise KeyError("boom")
        assert repo.closed

    def test_missing_executable(self, git_repo):
        with pytest.raises(ScmError):
            with open_repository(git_repo, executable="git-does-not-exist-xyz"):
                pass


class TestGitRepository:
    def test_head_commit(self, git_repo):
        with open_repository(git_repo) as repo:
            head = repo.head_commit()
        assert len(head.hash) == 40
        assert head.short_message == "Fix bug"
        assert head.author == "Jane Doe <jane@example.com>"
        assert head.authored_at == AUTHORED_AT

    def test_full_branch(self, git_repo):
        with open_repository(git_repo) as repo:
            assert repo.full_branch() == "refs/heads/main"

    def test_detached_head_reports_hash(self, git_repo, git_env):
        _git(git_repo, git_env, "checkout", "-q", "--detach")
        with open_repository(git_repo) as repo:
            assert repo.full_branch() == repo.head_commit().hash

    def test_remote_url(self, git_repo):
        with open_repository(git_repo) as repo:
            assert repo.remote_url() == "https://example.com/acme/app.git"
            assert repo.remote_url("upstream") is None

    def test_empty_repository_has_no_head(self, empty_repo):
        with open_repository(empty_repo) as repo:
            with pytest.raises(GitCommandError) as exc_info:
                repo.head_commit()
        assert exc_info.value.returncode != 0

    def test_subdirectory_of_work_tree(self, git_repo):
        sub = git_repo / "module"
        sub.mkdir()
        repo = GitRepository(sub)
        repo.verify()
        assert repo.head_commit().short_message == "Fix bug"

    def test_nested_project_dir_opens_enclosing_repository(self, git_repo):
        nested = git_repo / "services" / "api"
        nested.mkdir(parents=True)
        with open_repository(nested) as repo:
            assert repo.full_branch() == "refs/heads/main"


class TestScmAttributesFromGit:
    def _facts(self, path: Path) -> ManifestFacts:
        return ManifestFacts.from_environment(ProjectIdentity(name="app"), project_dir=path)

    def test_attributes_from_real_repository(self, git_repo):
        attrs = generate_attributes(self._facts(git_repo))
        assert attrs["SCM-Repository"] == "https://example.com/acme/app.git"
        assert attrs["SCM-Branch"] == "refs/heads/main"
        assert attrs["SCM-Commit-Message"] == "Fix bug"
        assert attrs["SCM-Commit-Author"] == "Jane Doe <jane@example.com>"
        assert attrs["SCM-Commit-Date"] == "2024-05-01T10:20:30Z"
        assert len(attrs["SCM-Commit-Hash"]) == 40

    def test_empty_repository_contributes_nothing(self, empty_repo):
        attrs = generate_attributes(self._facts(empty_repo))
        assert not [k for k in attrs if k.startswith("SCM-")]
        assert attrs["Implementation-Title"] == "app"

    def test_plain_directory_contributes_nothing(self, tmp_path, git_env):
        plain = tmp_path / "plain"
        plain.mkdir()
        attrs = generate_attributes(self._facts(plain))
        assert not [k for k in attrs if k.startswith("SCM-")]
        assert "Built-Date" in attrs

    def test_disabled_scm_skips_git(self, tmp_path):
        attrs = generate_attributes(
            self._facts(tmp_path / "nowhere"), ManifestOptions(scm_attributes=False)
        )
        assert not [k for k in attrs if k.startswith("SCM-")]
