"""Central logging setup for the project."""
from __future__ import annotations
import logging
import os
import sys

from roast_relay.common.errors import ConfigurationError

def setup_logging(level: int | str | None = None) -> None:
    """
    Configure root logger with sane defaults.

    The handler is installed before the level is checked, so an unknown
    level leaves the root logger usable at INFO.

    Args:
        level: Logging level. Falls back to LOG_LEVEL, then INFO.

    Raises:
        ConfigurationError: The level name is not a known logging level.
    """
    if level is None:
        level = os.getenv("LOG_LEVEL", "INFO")
    if isinstance(level, str):
        level = level.strip().upper()
    handler = logging.StreamHandler(sys.stdout)
    fmt = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"
    handler.setFormatter(logging.Formatter(fmt))
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    # getLevelName maps known names to ints and unknown ones to "Level <name>"
    resolved = logging.getLevelName(level) if isinstance(level, str) else level
    if not isinstance(resolved, int):
        root.setLevel(logging.INFO)
        raise ConfigurationError(f"LOG_LEVEL must be a logging level name, got {level!r}.")
    root.setLevel(resolved)
