"""Shared Git utilities for gitrefs.

This module provides the command runner every query goes through, the
exception hierarchy, and the version helpers used to gate
capability-dependent behavior.
"""

import logging
import re
import subprocess
from pathlib import Path
from typing import Callable, Optional, Tuple

logger = logging.getLogger(__name__)

# Default timeout for git operations (seconds)
DEFAULT_GIT_TIMEOUT = 60

_VERSION_RE = re.compile(r"git version (\d+(?:\.\d+)*)")


# =============================================================================
# Exceptions
# =============================================================================

class GitError(Exception):
    """Base exception for Git operations."""
    pass


class GitNotInstalledError(GitError):
    """Git is not installed or not in PATH."""
    pass


class GitTimeoutError(GitError):
    """Git command timed out."""

    def __init__(self, message: str, timeout: int):
        super().__init__(message)
        self.timeout = timeout


class GitCommandError(GitError):
    """Git command failed with non-zero exit code."""

    def __init__(self, message: str, returncode: int, stderr: str = "", command: str = ""):
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr
        self.command = command


class GitOutputParseError(GitError):
    """Git produced output that does not match the expected format."""

    def __init__(self, message: str, line: str = ""):
        super().__init__(message)
        self.line = line


class RefNotFoundError(GitError):
    """A reference could not be resolved."""

    def __init__(self, message: str, ref: str = ""):
        super().__init__(message)
        self.ref = ref


class NoCommitsError(RefNotFoundError):
    """HEAD cannot be resolved, usually because the repository has no commits."""
    pass


class NoUpstreamError(RefNotFoundError):
    """The current branch has no upstream configured."""
    pass


class WorktreesUnsupportedError(Exception):
    """The installed git is too old for worktrees.

    Not a GitError: callers treat it as "feature unavailable" rather
    than as a failed command.
    """

    def __init__(self, message: str, version: str = ""):
        super().__init__(message)
        self.version = version


# Anything with run_git's signature; lets tests feed canned output.
GitRunner = Callable[..., subprocess.CompletedProcess]


# =============================================================================
# Core Functions
# =============================================================================


def run_git(
    *args,
    cwd: Optional[Path] = None,
    check: bool = False,
    timeout: int = DEFAULT_GIT_TIMEOUT
) -> subprocess.CompletedProcess:
    """Run a git command with standard options.

    Args:
        *args: Git command arguments
        cwd: Working directory
        check: Raise exception on failure
        timeout: Command timeout in seconds

    Returns:
        CompletedProcess result

    Raises:
        GitNotInstalledError: If git is not installed
        GitTimeoutError: If command times out
        GitCommandError: If check=True and command fails
    """
    cmd = ["git"] + list(args)
    cmd_str = " ".join(cmd)
    logger.debug("Running %s (cwd=%s)", cmd_str, cwd)

    try:
        result = subprocess.run(
            cmd,
            cwd=cwd or Path.cwd(),
            capture_output=True,
            text=True,
            timeout=timeout
        )
    except FileNotFoundError:
        raise GitNotInstalledError(
            "Git is not installed or not in PATH. "
            "Please install git: https://git-scm.com/downloads"
        )
    except subprocess.TimeoutExpired:
        raise GitTimeoutError(
            f"Git command timed out after {timeout}s: {cmd_str}",
            timeout=timeout
        )

    if check and result.returncode != 0:
        raise GitCommandError(
            f"Git command failed (exit {result.returncode}): {cmd_str}\n{result.stderr}",
            returncode=result.returncode,
            stderr=result.stderr,
            command=cmd_str,
        )
    return result


def is_git_repo(path: Optional[Path] = None, runner: Optional[GitRunner] = None) -> bool:
    """Check if path is inside a Git repository.

    Args:
        path: Directory to check (defaults to cwd)

    Returns:
        True if path is in a Git repository

    Note:
        Returns False if git is not installed (does not raise).
    """
    runner = runner or run_git
    try:
        result = runner("rev-parse", "--git-dir", cwd=path, timeout=10)
        return result.returncode == 0
    except (GitError, OSError):
        return False


def config_get(
    key: str,
    cwd: Optional[Path] = None,
    runner: Optional[GitRunner] = None,
) -> str:
    """Read a single git config value.

    Returns:
        The value, or "" when the key is unset
    """
    runner = runner or run_git
    result = runner("config", "--get", key, cwd=cwd)
    # exit 1 means the key is simply not set
    if result.returncode == 1:
        return ""
    if result.returncode != 0:
        raise GitCommandError(
            f"Git command failed (exit {result.returncode}): git config --get {key}\n{result.stderr}",
            returncode=result.returncode,
            stderr=result.stderr,
            command=f"git config --get {key}",
        )
    return result.stdout.strip()


def git_and_root_dirs(
    cwd: Optional[Path] = None,
    runner: Optional[GitRunner] = None,
) -> Tuple[Path, Optional[Path]]:
    """Get the git directory and the working tree root.

    Args:
        cwd: Starting path (defaults to cwd)

    Returns:
        (git_dir, root_dir) as absolute paths; root_dir is None
        for a bare repository
    """
    runner = runner or run_git
    base = Path(cwd) if cwd else Path.cwd()
    result = runner("rev-parse", "--is-bare-repository", "--git-dir", cwd=cwd, check=True)
    lines = [line.strip() for line in result.stdout.splitlines() if line.strip()]
    if len(lines) != 2:
        raise GitOutputParseError(
            f"Unexpected git rev-parse output: {result.stdout!r}",
            line=result.stdout,
        )

    # --git-dir may be relative to the directory the command ran in
    gitdir = (base / lines[1]).resolve()
    if lines[0] == "true":
        return gitdir, None

    result = runner("rev-parse", "--show-toplevel", cwd=cwd, check=True)
    toplevel = result.stdout.strip()
    if not toplevel:
        raise GitOutputParseError("git rev-parse returned no working tree root")
    return gitdir, Path(toplevel).resolve()


def git_dir(cwd: Optional[Path] = None, runner: Optional[GitRunner] = None) -> Path:
    """Absolute path of the repository's git directory."""
    return git_and_root_dirs(cwd, runner)[0]


def root_dir(cwd: Optional[Path] = None, runner: Optional[GitRunner] = None) -> Optional[Path]:
    """Absolute path of the working tree root, None for bare repositories."""
    return git_and_root_dirs(cwd, runner)[1]


def git_common_dir(cwd: Optional[Path] = None, runner: Optional[GitRunner] = None) -> Path:
    """Absolute path of the git directory shared by all worktrees.

    Inside a linked worktree git_dir() is that worktree's private
    .git/worktrees/<id>; this returns the main repository's .git.
    Requires git 2.5+.
    """
    runner = runner or run_git
    base = Path(cwd) if cwd else Path.cwd()
    result = runner("rev-parse", "--git-common-dir", cwd=cwd, check=True)
    common = result.stdout.strip()
    if not common:
        raise GitOutputParseError("git rev-parse returned no common git directory")
    return (base / common).resolve()


# =============================================================================
# Versions
# =============================================================================


def _version_segments(version: str) -> list:
    try:
        return [int(part) for part in version.strip().split(".")]
    except ValueError:
        raise ValueError(f"Invalid version string: {version!r}") from None


def is_version_at_least(actual: str, required: str) -> bool:
    """Compare dotted version strings numerically.

    Missing segments count as zero, so "2.6.0" satisfies "2" and
    "2.5.2" does not satisfy "2.5.10".

    Args:
        actual: Version that is available
        required: Minimum version needed

    Returns:
        True if actual >= required
    """
    have = _version_segments(actual)
    want = _version_segments(required)
    for i in range(max(len(have), len(want))):
        a = have[i] if i < len(have) else 0
        b = want[i] if i < len(want) else 0
        if a != b:
            return a > b
    return True


def git_version(runner: Optional[GitRunner] = None) -> str:
    """Get the installed git version, e.g. "2.39.2".

    Platform suffixes such as ".windows.1" are dropped.
    """
    runner = runner or run_git
    result = runner("version", check=True)
    match = _VERSION_RE.search(result.stdout)
    if not match:
        raise GitOutputParseError(
            f"Unable to parse git version from {result.stdout.strip()!r}",
            line=result.stdout.strip(),
        )
    return match.group(1)


def is_git_version_at_least(required: str, runner: Optional[GitRunner] = None) -> bool:
    """Check the installed git against a minimum version."""
    return is_version_at_least(git_version(runner), required)
