"""List files tracked by the index."""

from pathlib import Path
from typing import List, Optional

from gitrefs.git.utils import GitRunner, run_git


def _pathspec(pattern: str) -> str:
    # a leading slash anchors the glob at the repository root
    if pattern.startswith("/"):
        return ":(top)" + pattern.lstrip("/")
    return pattern


def get_tracked_files(
    pattern: str,
    base_dir: Optional[Path] = None,
    runner: Optional[GitRunner] = None,
) -> List[str]:
    """List tracked files matching a glob.

    A file counts as tracked when the index has an entry for it, so
    newly staged files and files with (staged or unstaged) working tree
    changes are included, while files staged for deletion are not.

    Args:
        pattern: Glob such as "*.txt" or "folder1/*"
        base_dir: Directory the pattern and the returned paths are
            relative to (defaults to cwd)

    Returns:
        Relative paths in index order, each listed once
    """
    runner = runner or run_git
    result = runner(
        "-c", "core.quotepath=false",
        "ls-files", "--cached", "-z",
        "--", _pathspec(pattern),
        cwd=base_dir,
        check=True,
    )
    # an unmerged path appears once per conflict stage
    return list(dict.fromkeys(path for path in result.stdout.split("\0") if path))
