"""This module defines log formats and sets up logging for the command line."""

from __future__ import annotations

import logging
from typing import Sequence

from .config import DEFAULT_CONFIG_NAME, SqlStepConfig


__all__ = [
    "LOG_FMT_LONG",
    "LOG_FMT_SHORT",
    "setup_logging",
]

LOG_FMT_LONG = logging.Formatter(
    fmt="%(asctime)s %(name)s %(levelname)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
LOG_FMT_SHORT = logging.Formatter(fmt="%(levelname)s: %(message)s")

# Handlers installed by the last call of setup_logging.
_handlers: list[logging.Handler] = []


def setup_logging(
    config_name: str = DEFAULT_CONFIG_NAME,
    stderr: bool = True,
    level: int | None = None,
) -> Sequence[logging.Handler]:
    """
    Sends the log messages of all sqlstep modules to stderr. The library itself never
    installs handlers, this is left to applications such as the CLI. Handlers from
    previous calls are removed, so repeated calls never duplicate output.

    :param config_name: Config to read the ``app/log_level`` option from.
    :param stderr: Whether to install a stderr handler. If ``False``, only the level
        is applied.
    :param level: Log level to use instead of the configured one.
    :returns: The installed handlers. Debug output uses :data:`LOG_FMT_LONG`, all
        other levels :data:`LOG_FMT_SHORT`.
    """
    if level is None:
        level = SqlStepConfig(config_name).get("app", "log_level")

    package_logger = logging.getLogger("sqlstep")
    package_logger.setLevel(level)

    while _handlers:
        package_logger.removeHandler(_handlers.pop())

    if not stderr:
        return []

    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(LOG_FMT_LONG if level < logging.INFO else LOG_FMT_SHORT)
    package_logger.addHandler(handler)
    _handlers.append(handler)

    return [handler]
