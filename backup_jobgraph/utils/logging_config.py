"""Centralized logging configuration with environment variable support."""

from __future__ import annotations

import logging
import os
from typing import Literal


LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

LOG_LEVEL_ENV = "BACKUP_JOBGRAPH_LOG_LEVEL"


def get_log_level_from_env(
    default: int = logging.INFO,
    env_var: str = LOG_LEVEL_ENV,
) -> int:
    """Get log level from environment variable.

    Args:
        default: Default log level if environment variable is not set
        env_var: Name of environment variable to read

    Returns:
        Logging level constant (e.g., logging.DEBUG, logging.INFO)

    Examples:
        export BACKUP_JOBGRAPH_LOG_LEVEL=DEBUG
    """
    level_str = os.getenv(env_var, "").upper()

    level_map = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
    }

    return level_map.get(level_str, default)


def configure_logging(
    verbose: bool = False,
    debug: bool = False,
    level: int | None = None,
    format: str = "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt: str = "%Y-%m-%d %H:%M:%S",
    respect_env: bool = True,
) -> None:
    """Configure root logging.

    Priority (highest to lowest): explicit ``level``, ``debug``,
    ``verbose``, the ``BACKUP_JOBGRAPH_LOG_LEVEL`` environment variable
    (when ``respect_env``), and finally WARNING.
    """
    if level is not None:
        final_level = level
    elif debug:
        final_level = logging.DEBUG
    elif verbose:
        final_level = logging.INFO
    elif respect_env:
        final_level = get_log_level_from_env(default=logging.WARNING)
    else:
        final_level = logging.WARNING

    logging.basicConfig(
        level=final_level,
        format=format,
        datefmt=datefmt,
        force=True,  # Reconfigure if already configured
    )


__all__ = ["configure_logging", "get_log_level_from_env", "LogLevel", "LOG_LEVEL_ENV"]
