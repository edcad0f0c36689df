"""gitrefs - read-only introspection of git refs, branches and worktrees."""

__version__ = "0.1.0"
