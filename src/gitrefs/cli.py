"""Main CLI entry point for gitrefs."""

import logging

import click
from rich.logging import RichHandler

from gitrefs import __version__
from gitrefs.commands.files import files_cmd
from gitrefs.commands.refs import current_cmd, recent_cmd
from gitrefs.commands.version import version_check_cmd
from gitrefs.commands.worktrees import worktrees_cmd


@click.group()
@click.version_option(version=__version__, prog_name="gitrefs")
@click.option("--verbose", "-v", is_flag=True, help="Log every git invocation")
def main(verbose: bool):
    """gitrefs - Read-only view of refs, branches and worktrees.

    \b
    Commands:
      gitrefs current             Checked-out ref (and upstream)
      gitrefs recent              Branches with recent commits
      gitrefs worktrees           HEAD of every worktree
      gitrefs files PATTERN       Tracked files matching a glob
      gitrefs version-check V     Compare versions
    """
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(show_path=False)],
        )


main.add_command(current_cmd, name="current")
main.add_command(recent_cmd, name="recent")
main.add_command(worktrees_cmd, name="worktrees")
main.add_command(files_cmd, name="files")
main.add_command(version_check_cmd, name="version-check")


if __name__ == "__main__":
    main()
