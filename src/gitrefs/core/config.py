"""Configuration for gitrefs.

Settings are read from .gitrefs/config.json in the workspace. A missing
or unreadable file yields the defaults; unknown keys are ignored.
"""

import json
import logging
from dataclasses import dataclass, asdict
from functools import partial
from pathlib import Path
from typing import Optional

from gitrefs.git.utils import DEFAULT_GIT_TIMEOUT, GitRunner, run_git

logger = logging.getLogger(__name__)

CONFIG_DIR = ".gitrefs"
CONFIG_FILE = "config.json"


@dataclass
class GitRefsConfig:
    """Configuration for gitrefs (stored in .gitrefs/config.json)."""
    # Per-invocation git timeout
    git_timeout_seconds: int = DEFAULT_GIT_TIMEOUT

    # Defaults for `gitrefs recent`
    recent_days: int = 7
    include_remotes: bool = False
    remote: str = ""  # empty means all remotes

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "GitRefsConfig":
        return cls(**{
            k: v for k, v in data.items()
            if k in cls.__dataclass_fields__
        })


def config_path(workspace: Optional[Path] = None) -> Path:
    return (workspace or Path.cwd()) / CONFIG_DIR / CONFIG_FILE


def load_config(workspace: Optional[Path] = None) -> GitRefsConfig:
    """Load configuration for a workspace.

    Args:
        workspace: Directory containing .gitrefs/ (defaults to cwd)

    Returns:
        GitRefsConfig, defaults when the file is absent or corrupt
    """
    path = config_path(workspace)
    if path.exists():
        try:
            data = json.loads(path.read_text())
            return GitRefsConfig.from_dict(data)
        except (json.JSONDecodeError, TypeError, AttributeError) as e:
            logger.warning("Ignoring unreadable config %s: %s", path, e)
    return GitRefsConfig()


def make_runner(config: GitRefsConfig) -> GitRunner:
    """A run_git bound to the configured timeout."""
    return partial(run_git, timeout=config.git_timeout_seconds)
