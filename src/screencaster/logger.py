"""Logging setup for screencaster."""

from __future__ import annotations

import logging
import sys

LOGGER_NAME = "screencaster"


def setup_logger(debug: bool = False, stream=None) -> logging.Logger:
    """Configure and return the screencaster logger.

    Called once at startup. Messages go to stderr as ``LEVEL: message``;
    debug messages are only emitted when *debug* is set.
    """
    logger = logging.getLogger(LOGGER_NAME)
    level = logging.DEBUG if debug else logging.INFO
    logger.setLevel(level)
    logger.propagate = False

    # Replace handlers so a second call (tests, repeated main()) doesn't duplicate output
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    logger.addHandler(handler)
    return logger
