"""Console logging for the logsh CLI.

Log records from every ``logsh.*`` module go through one ``RichHandler``
writing to stderr. Verbosity maps to levels as follows:

- 0: ERROR
- 1: WARNING
- 2: INFO
- 3 and above: DEBUG
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

from logsh import meta

ROOT_LOGGER_NAME = meta.__app_name__

VERBOSITY_LEVELS = (logging.ERROR, logging.WARNING, logging.INFO, logging.DEBUG)


def level_for(verbosity: int) -> int:
    """Return the logging level for a ``-v`` count.

    Examples:
        >>> level_for(0) == logging.ERROR
        True
        >>> level_for(7) == logging.DEBUG
        True
    """
    index = min(max(verbosity, 0), len(VERBOSITY_LEVELS) - 1)
    return VERBOSITY_LEVELS[index]


def install(verbosity: int = 0, console: Console | None = None) -> logging.Logger:
    """Attach the console handler to the ``logsh`` logger.

    Calling it again replaces the handler installed by the previous call.

    Args:
        verbosity: Number of ``-v`` flags.
        console: Console to log to (defaults to stderr).

    Returns:
        The configured ``logsh`` logger.
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    level = level_for(verbosity)
    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=verbosity >= len(VERBOSITY_LEVELS) - 1,
        rich_tracebacks=True,
        tracebacks_show_locals=False,
        markup=False,
    )
    handler.setLevel(level)
    logger.addHandler(handler)
    logger.setLevel(level)
    return logger


__all__ = [
    "ROOT_LOGGER_NAME",
    "VERBOSITY_LEVELS",
    "install",
    "level_for",
]
