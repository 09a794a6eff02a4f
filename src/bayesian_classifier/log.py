"""Logging configuration for command-line use.

Library modules only create module loggers; handlers are installed by the
application. ``setup_logging`` attaches a single rich console handler to
the package logger.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

PACKAGE_LOGGER = "bayesian_classifier"


def setup_logging(level: int | str = logging.WARNING, console: Console | None = None) -> logging.Logger:
    """Configure the package logger and return it.

    Calling it again replaces the handler instead of adding another one.

    Args:
        level: Log level (name or number).
        console: Rich console to log to; defaults to stderr.
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        log_time_format="%Y-%m-%d %H:%M:%S",
    )
    handler.setFormatter(logging.Formatter("%(name)s | %(message)s"))
    logger.addHandler(handler)
    return logger
