"""gitrefs files - List tracked files matching a pattern."""

import sys
from pathlib import Path

import click
from rich.console import Console

from gitrefs.core.config import load_config, make_runner
from gitrefs.git.files import get_tracked_files
from gitrefs.git.utils import GitError

console = Console()


@click.command("files")
@click.argument("pattern")
@click.option("--count", "-c", is_flag=True, help="Only print the number of matches")
def files_cmd(pattern: str, count: bool):
    """List tracked files matching PATTERN, relative to the current directory.

    \b
    Examples:
      gitrefs files "*.txt"
      gitrefs files "folder1/*"
      gitrefs files "/docs/*.md"   # anchored at the repository root
    """
    cwd = Path.cwd()
    runner = make_runner(load_config(cwd))

    try:
        paths = get_tracked_files(pattern, base_dir=cwd, runner=runner)
    except GitError as e:
        console.print(f"[red]Error:[/] {e}")
        sys.exit(1)

    if count:
        console.print(len(paths))
        return
    for path in paths:
        # markup off: paths may contain brackets
        console.print(path, markup=False, highlight=False)
