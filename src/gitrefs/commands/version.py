"""gitrefs version-check - Compare dotted version strings."""

import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console

from gitrefs.core.config import load_config, make_runner
from gitrefs.git.utils import GitError, git_version, is_version_at_least

console = Console()


@click.command("version-check")
@click.argument("required")
@click.argument("actual", required=False)
def version_check_cmd(required: str, actual: Optional[str]):
    """Check that ACTUAL (default: the installed git) is at least REQUIRED.

    Exits 0 when satisfied and 1 otherwise.

    \b
    Examples:
      gitrefs version-check 2.5.0
      gitrefs version-check 2.6 2.5.10
    """
    try:
        if actual is None:
            actual = git_version(make_runner(load_config(Path.cwd())))
        ok = is_version_at_least(actual, required)
    except (GitError, ValueError) as e:
        console.print(f"[red]Error:[/] {e}")
        sys.exit(1)

    if ok:
        console.print(f"[green]✓[/] {actual} >= {required}")
    else:
        console.print(f"[red]✗[/] {actual} < {required}")
        sys.exit(1)
