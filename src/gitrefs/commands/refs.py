"""gitrefs current/recent - Inspect the checked-out ref and recent branches."""

import sys
from datetime import datetime, timedelta
from pathlib import Path
from typing import Iterable, Optional

import click
from rich.console import Console
from rich.table import Table

from gitrefs.core.config import load_config, make_runner
from gitrefs.git.refs import (
    Ref,
    RefType,
    current_ref,
    current_remote_ref,
    recent_branches,
)
from gitrefs.git.utils import GitError, NoCommitsError, NoUpstreamError

console = Console()

TYPE_LABELS = {
    RefType.LOCAL_BRANCH: "[green]local[/]",
    RefType.REMOTE_BRANCH: "[magenta]remote[/]",
    RefType.TAG: "[yellow]tag[/]",
    RefType.OTHER: "[dim]other[/]",
}


def ref_table(refs: Iterable[Ref], title: Optional[str] = None) -> Table:
    """Build a rich table of refs."""
    table = Table(title=title)
    table.add_column("Name", style="cyan")
    table.add_column("Type")
    table.add_column("Commit", style="dim")
    for ref in refs:
        table.add_row(ref.name, TYPE_LABELS[ref.type], ref.sha[:12])
    return table


# =============================================================================
# gitrefs current
# =============================================================================

@click.command("current")
@click.option("--remote", "-r", "show_remote", is_flag=True, help="Also show the upstream ref")
def current_cmd(show_remote: bool):
    """Show the currently checked-out ref.

    \b
    Examples:
      gitrefs current              # Branch and commit
      gitrefs current --remote     # Plus its upstream
    """
    cwd = Path.cwd()
    runner = make_runner(load_config(cwd))

    try:
        refs = [current_ref(cwd=cwd, runner=runner)]
        if show_remote:
            refs.append(current_remote_ref(cwd=cwd, runner=runner))
    except NoCommitsError:
        console.print("[red]Error:[/] HEAD does not point at a commit yet")
        sys.exit(1)
    except NoUpstreamError as e:
        console.print(f"[red]Error:[/] {e}")
        console.print("Set one with: [cyan]git branch --set-upstream-to <remote>/<branch>[/]")
        sys.exit(1)
    except GitError as e:
        console.print(f"[red]Error:[/] {e}")
        sys.exit(1)

    console.print(ref_table(refs))


# =============================================================================
# gitrefs recent
# =============================================================================

@click.command("recent")
@click.option("--days", "-d", type=int, help="Only branches with commits in the last N days")
@click.option("--remotes/--no-remotes", default=None, help="Include remote-tracking branches")
@click.option("--remote", help="Only include branches from this remote")
def recent_cmd(days: Optional[int], remotes: Optional[bool], remote: Optional[str]):
    """List branches with recent commits, newest first.

    Defaults come from .gitrefs/config.json.

    \b
    Examples:
      gitrefs recent                     # Local branches, last 7 days
      gitrefs recent -d 30 --remotes     # Include all remotes
      gitrefs recent --remote origin     # Local plus origin/*
    """
    cwd = Path.cwd()
    config = load_config(cwd)
    runner = make_runner(config)

    days = config.recent_days if days is None else days
    only_remote = config.remote if remote is None else remote
    # naming a remote implies wanting remote branches
    include_remotes = config.include_remotes or bool(remote)
    if remotes is not None:
        include_remotes = remotes

    since = datetime.now() - timedelta(days=days)
    try:
        refs = recent_branches(
            since,
            include_remotes=include_remotes,
            only_remote=only_remote,
            cwd=cwd,
            runner=runner,
        )
    except GitError as e:
        console.print(f"[red]Error:[/] {e}")
        sys.exit(1)

    if not refs:
        console.print(f"[dim]No branches with commits in the last {days} day(s)[/]")
        return

    console.print(ref_table(refs, title=f"Branches active in the last {days} day(s)"))
