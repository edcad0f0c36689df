"""Tests for gitrefs.git.worktree module."""

import pytest

from gitrefs.git.refs import Ref, RefType
from gitrefs.git.utils import GitOutputParseError, RefNotFoundError, WorktreesUnsupportedError
from gitrefs.git.worktree import (
    get_all_worktree_heads,
    read_head_file,
    worktrees_supported,
)


class TestReadHeadFile:
    def test_symbolic(self, tmp_path):
        head = tmp_path / "HEAD"
        head.write_text("ref: refs/heads/branch2\n")
        assert read_head_file(head) == "refs/heads/branch2"

    def test_detached(self, tmp_path):
        head = tmp_path / "HEAD"
        head.write_text("c" * 40 + "\n")
        assert read_head_file(head) == "c" * 40

    def test_empty(self, tmp_path):
        head = tmp_path / "HEAD"
        head.write_text("\n")
        with pytest.raises(GitOutputParseError):
            read_head_file(head)


class TestWorktreesSupported:
    def test_old_git(self, fp):
        fp.register(["git", "version"], stdout="git version 2.4.9\n")
        assert worktrees_supported() is False

    def test_new_git(self, mock_git_basic):
        assert worktrees_supported() is True

    def test_unsupported_raises(self, fp):
        fp.register(["git", "version"], stdout="git version 2.4.9\n")
        with pytest.raises(WorktreesUnsupportedError):
            get_all_worktree_heads("/does/not/matter")

    def test_explicit_capability_skips_version_check(self, fp, tmp_path):
        # no `git version` registered: an unexpected version check would fail
        with pytest.raises(WorktreesUnsupportedError):
            get_all_worktree_heads(tmp_path, supported=False)


class TestWorkTrees:
    """Tests against a real repository with linked worktrees."""

    @pytest.fixture(autouse=True)
    def _require_worktrees(self):
        if not worktrees_supported():
            pytest.skip("git 2.5+ required for worktrees")

    def test_each_worktree_reports_its_own_branch(self, git_repo, git, commit):
        shas = [
            commit(size=20),
            commit(size=25, new_branch="branch2"),
            commit(size=30, parent_branch="master", new_branch="branch3"),
            commit(size=40, parent_branch="master", new_branch="branch4"),
        ]
        # a branch checked out here can't also be checked out in a worktree
        git(git_repo, "checkout", "master")

        # no worktree for branch3
        git(git_repo, "worktree", "add", "branch2_wt", "branch2")
        git(git_repo, "worktree", "add", "branch4_wt", "branch4")

        refs = get_all_worktree_heads(git_repo / ".git")
        assert refs == [
            Ref("master", RefType.LOCAL_BRANCH, shas[0]),
            Ref("branch2", RefType.LOCAL_BRANCH, shas[1]),
            Ref("branch4", RefType.LOCAL_BRANCH, shas[3]),
        ]

    def test_detached_worktree(self, git_repo, git, commit):
        first = commit(size=20)
        commit(size=21)
        git(git_repo, "worktree", "add", "--detach", "old_wt", first)

        refs = get_all_worktree_heads(git_repo / ".git", supported=True)
        assert refs[1] == Ref(first, RefType.OTHER, first)

    def test_no_linked_worktrees(self, git_workspace, git):
        sha = git(git_workspace, "rev-parse", "HEAD").strip()
        refs = get_all_worktree_heads(git_workspace / ".git")
        assert refs == [Ref("master", RefType.LOCAL_BRANCH, sha)]

    def test_unresolvable_worktree_head_raises(self, git_workspace):
        admin = git_workspace / ".git" / "worktrees" / "broken"
        admin.mkdir(parents=True)
        (admin / "HEAD").write_text("ref: refs/heads/deleted-branch\n")
        with pytest.raises(RefNotFoundError):
            get_all_worktree_heads(git_workspace / ".git")

    def test_linked_worktree_git_dir_lists_all(self, git_repo, git, commit):
        main_sha = commit(size=20)
        side_sha = commit(size=25, new_branch="branch2")
        git(git_repo, "checkout", "master")
        git(git_repo, "worktree", "add", "branch2_wt", "branch2")

        linked = git(git_repo / "branch2_wt", "rev-parse", "--git-dir").strip()
        refs = get_all_worktree_heads(git_repo / "branch2_wt" / linked)
        assert refs == [
            Ref("master", RefType.LOCAL_BRANCH, main_sha),
            Ref("branch2", RefType.LOCAL_BRANCH, side_sha),
        ]
