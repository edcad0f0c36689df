"""Core modules for gitrefs.

- config: Settings loaded from .gitrefs/config.json
"""

from gitrefs.core.config import (
    GitRefsConfig,
    load_config,
    make_runner,
    CONFIG_DIR,
    CONFIG_FILE,
)

__all__ = [
    "GitRefsConfig",
    "load_config",
    "make_runner",
    "CONFIG_DIR",
    "CONFIG_FILE",
]
