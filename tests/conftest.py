"""Shared test fixtures for gitrefs.

Provides:
- git: Run a git command in a directory, failing the test on error
- git_repo: Empty real git repo on branch master
- commit: Commit helper with controllable commit dates
- git_workspace: Real git repo with one commit
- cli_runner: Click CliRunner
- mock_git_basic: pytest-subprocess fixture pre-configured for git commands
"""

import os
import subprocess
from datetime import datetime
from pathlib import Path
from typing import Optional, Sequence

import pytest
from click.testing import CliRunner


SHA_MASTER = "a" * 40
SHA_FEATURE = "b" * 40


def _run(cwd: Path, *args, env: Optional[dict] = None) -> str:
    result = subprocess.run(
        ["git"] + list(args),
        cwd=cwd,
        capture_output=True,
        text=True,
        env={**os.environ, **(env or {})},
    )
    assert result.returncode == 0, f"git {' '.join(args)} failed: {result.stderr}"
    return result.stdout


@pytest.fixture
def git():
    """Run git in a directory and return stdout."""
    return _run


@pytest.fixture
def git_repo(tmp_path):
    """Create an empty git repo whose unborn branch is master."""
    repo = tmp_path / "repo"
    repo.mkdir()
    _run(repo, "init")
    _run(repo, "symbolic-ref", "HEAD", "refs/heads/master")
    _run(repo, "config", "user.email", "test@test.com")
    _run(repo, "config", "user.name", "Test User")
    _run(repo, "config", "commit.gpgsign", "false")
    return repo


@pytest.fixture
def commit(git_repo):
    """Commit files to git_repo, optionally on a new branch and at a given date.

    Returns the new commit's sha.
    """

    def _commit(
        files: Sequence[str] = ("file1.txt",),
        size: int = 20,
        new_branch: Optional[str] = None,
        parent_branch: Optional[str] = None,
        date: Optional[datetime] = None,
        tags: Sequence[str] = (),
    ) -> str:
        if parent_branch:
            _run(git_repo, "checkout", parent_branch)
        if new_branch:
            _run(git_repo, "checkout", "-b", new_branch)
        for name in files:
            path = git_repo / name
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text("x" * size)
            _run(git_repo, "add", name)
        env = {}
        if date is not None:
            stamp = f"{int(date.timestamp())} +0000"
            env = {"GIT_AUTHOR_DATE": stamp, "GIT_COMMITTER_DATE": stamp}
        _run(git_repo, "commit", "-m", f"commit {size}", env=env)
        for tag in tags:
            _run(git_repo, "tag", tag)
        return _run(git_repo, "rev-parse", "HEAD").strip()

    return _commit


@pytest.fixture
def add_remote(git_repo, tmp_path):
    """Add a bare repository as a named remote of git_repo."""

    def _add_remote(name: str) -> Path:
        bare = tmp_path / f"{name}.git"
        _run(tmp_path, "init", "--bare", str(bare))
        _run(git_repo, "remote", "add", name, str(bare))
        return bare

    return _add_remote


@pytest.fixture
def git_workspace(git_repo):
    """A real git repo with an initial commit on master."""
    readme = git_repo / "README.md"
    readme.write_text("# Test Project\n")
    _run(git_repo, "add", "-A")
    _run(git_repo, "commit", "-m", "Initial commit")
    return git_repo


@pytest.fixture
def cli_runner():
    """Click CliRunner for testing CLI commands."""
    return CliRunner()


@pytest.fixture
def mock_git_basic(fp):
    """Mock basic git commands using pytest-subprocess.

    Pre-registers HEAD resolution on master with an upstream on origin.
    Use `fp` directly for custom subprocess mocking in individual tests.
    """
    fp.keep_last_process(True)
    fp.register(
        ["git", "rev-parse", "HEAD", "--symbolic-full-name", "HEAD"],
        stdout=f"{SHA_MASTER}\nrefs/heads/master\n",
    )
    fp.register(
        ["git", "config", "--get", "branch.master.remote"],
        stdout="origin\n",
    )
    fp.register(
        ["git", "config", "--get", "branch.master.merge"],
        stdout="refs/heads/master\n",
    )
    fp.register(
        ["git", "version"],
        stdout="git version 2.39.2\n",
    )
    return fp
