"""gitrefs worktrees - Show what every worktree has checked out."""

import sys
from pathlib import Path

import click
from rich.console import Console

from gitrefs.commands.refs import ref_table
from gitrefs.core.config import load_config, make_runner
from gitrefs.git.utils import GitError, WorktreesUnsupportedError, git_common_dir
from gitrefs.git.worktree import (
    MIN_WORKTREE_GIT_VERSION,
    get_all_worktree_heads,
    worktrees_supported,
)

console = Console()


@click.command("worktrees")
def worktrees_cmd():
    """Show the checked-out ref of the main checkout and each linked worktree.

    Works from the main checkout or from inside any linked worktree.
    """
    cwd = Path.cwd()
    runner = make_runner(load_config(cwd))

    try:
        # --git-common-dir needs the same git version as worktrees
        supported = worktrees_supported(runner)
        if not supported:
            raise WorktreesUnsupportedError(
                f"Worktrees require git {MIN_WORKTREE_GIT_VERSION} or later"
            )
        common = git_common_dir(cwd, runner=runner)
        refs = get_all_worktree_heads(common, supported=supported, runner=runner)
    except WorktreesUnsupportedError:
        console.print(
            f"[yellow]Worktrees are not supported[/] (requires git {MIN_WORKTREE_GIT_VERSION}+)"
        )
        return
    except (GitError, OSError) as e:
        console.print(f"[red]Error:[/] {e}")
        sys.exit(1)

    console.print(ref_table(refs, title="Worktree HEADs"))
