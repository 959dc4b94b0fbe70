"""Logging setup for the command-line interface."""

from __future__ import annotations

import logging

LOGGER_NAME = "blockmark"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(verbosity: int = 0, *, debug: bool = False) -> logging.Logger:
    """Configure the ``blockmark`` logger for the requested verbosity.

    ``verbosity`` 0 shows warnings, 1 adds info and 2 or more adds debug
    output; ``debug`` forces debug output regardless of verbosity.
    """

    if debug or verbosity >= 2:
        level = logging.DEBUG
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.handlers.clear()

    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
    logger.addHandler(handler)
    return logger


__all__ = ["LOGGER_NAME", "setup_logging"]
