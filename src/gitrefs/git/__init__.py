"""Git introspection for gitrefs."""

from gitrefs.git.refs import (
    Ref,
    RefType,
    parse_ref_to_type_and_name,
    resolve_ref,
    resolve_refs,
    current_ref,
    current_remote_ref,
    remote_ref_name_for_current_branch,
    remote_for_current_branch,
    remote_for_branch,
    remote_branch_for_local_branch,
    local_refs,
    remote_list,
    recent_branches,
)
from gitrefs.git.worktree import (
    get_all_worktree_heads,
    worktrees_supported,
    MIN_WORKTREE_GIT_VERSION,
)
from gitrefs.git.files import get_tracked_files
from gitrefs.git.utils import (
    run_git,
    is_git_repo,
    git_and_root_dirs,
    git_dir,
    root_dir,
    git_version,
    is_version_at_least,
    is_git_version_at_least,
    GitError,
    GitCommandError,
    GitNotInstalledError,
    GitTimeoutError,
    GitOutputParseError,
    RefNotFoundError,
    NoCommitsError,
    NoUpstreamError,
    WorktreesUnsupportedError,
)

__all__ = [
    "Ref",
    "RefType",
    "parse_ref_to_type_and_name",
    "resolve_ref",
    "resolve_refs",
    "current_ref",
    "current_remote_ref",
    "remote_ref_name_for_current_branch",
    "remote_for_current_branch",
    "remote_for_branch",
    "remote_branch_for_local_branch",
    "local_refs",
    "remote_list",
    "recent_branches",
    "get_all_worktree_heads",
    "worktrees_supported",
    "MIN_WORKTREE_GIT_VERSION",
    "get_tracked_files",
    "run_git",
    "is_git_repo",
    "git_and_root_dirs",
    "git_dir",
    "root_dir",
    "git_version",
    "is_version_at_least",
    "is_git_version_at_least",
    "GitError",
    "GitCommandError",
    "GitNotInstalledError",
    "GitTimeoutError",
    "GitOutputParseError",
    "RefNotFoundError",
    "NoCommitsError",
    "NoUpstreamError",
    "WorktreesUnsupportedError",
]
