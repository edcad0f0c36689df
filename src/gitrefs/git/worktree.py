"""Resolve the checked-out ref of every worktree of a repository.

A linked worktree keeps its own HEAD under
<git-dir>/worktrees/<id>/HEAD, so what it has checked out is not
visible from the main working copy's HEAD. Each HEAD file is read
directly and resolved through the shared object store.
"""

import logging
from pathlib import Path
from typing import List, Optional

from gitrefs.git.refs import Ref, resolve_ref
from gitrefs.git.utils import (
    GitOutputParseError,
    GitRunner,
    WorktreesUnsupportedError,
    git_version,
    is_version_at_least,
)

logger = logging.getLogger(__name__)

# `git worktree` first shipped in 2.5.0
MIN_WORKTREE_GIT_VERSION = "2.5.0"


def worktrees_supported(runner: Optional[GitRunner] = None) -> bool:
    """Check whether the installed git supports linked worktrees."""
    return is_version_at_least(git_version(runner), MIN_WORKTREE_GIT_VERSION)


def read_head_file(head_file: Path) -> str:
    """Read a HEAD file and return the ref path or commit id it names.

    Args:
        head_file: Path to a HEAD file

    Returns:
        "refs/heads/<branch>" for a symbolic HEAD, the raw sha otherwise

    Raises:
        GitOutputParseError: If the file is empty
    """
    contents = head_file.read_text().strip()
    if contents.startswith("ref:"):
        contents = contents[len("ref:"):].strip()
    if not contents:
        raise GitOutputParseError(f"Empty HEAD file: {head_file}", line=contents)
    return contents


def _resolve_head_file(head_file: Path, git_dir: Path, runner: Optional[GitRunner]) -> Ref:
    target = read_head_file(head_file)
    logger.debug("%s -> %s", head_file, target)
    # rev-parse run from inside the git dir sees the shared refs
    return resolve_ref(target, cwd=git_dir, runner=runner)


def get_all_worktree_heads(
    git_dir: Path,
    supported: Optional[bool] = None,
    runner: Optional[GitRunner] = None,
) -> List[Ref]:
    """Get the checked-out Ref of the main working copy and every linked worktree.

    Args:
        git_dir: The repository's git directory (e.g. repo/.git); a
            linked worktree's own git directory is also accepted
        supported: Precomputed worktree capability; read from
            `git version` when None

    Returns:
        The main working copy's Ref (when it has a HEAD) followed by one
        Ref per linked worktree, ordered by worktree id

    Raises:
        WorktreesUnsupportedError: If git is older than 2.5.0
        RefNotFoundError: If a worktree's HEAD cannot be resolved
    """
    if supported is None:
        supported = worktrees_supported(runner)
    if not supported:
        raise WorktreesUnsupportedError(
            f"Worktrees require git {MIN_WORKTREE_GIT_VERSION} or later"
        )

    git_dir = Path(git_dir)
    # a linked worktree's private dir points back at the shared one
    commondir = git_dir / "commondir"
    if commondir.is_file():
        git_dir = (git_dir / commondir.read_text().strip()).resolve()
        logger.debug("Following commondir to %s", git_dir)
    refs = []

    main_head = git_dir / "HEAD"
    if main_head.is_file():
        refs.append(_resolve_head_file(main_head, git_dir, runner))
    else:
        logger.debug("No HEAD in %s, skipping main checkout", git_dir)

    worktrees_dir = git_dir / "worktrees"
    if worktrees_dir.is_dir():
        for entry in sorted(worktrees_dir.iterdir(), key=lambda p: p.name):
            if not entry.is_dir():
                continue
            refs.append(_resolve_head_file(entry / "HEAD", git_dir, runner))

    return refs
