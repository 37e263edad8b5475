"""
Logging Helpers

Package-wide logger plus two small helpers used by the client layer:

    - logger:        the ``gasless_relay`` logger (silent until the host
                     application configures logging or calls ``setup_logger``)
    - setup_logger:  attach a single stream handler at the requested level
    - error_context: one-line ``file:line in func`` summary of the exception
                     currently being handled
"""

import logging
import sys
import traceback
from typing import Optional, Union


LOGGER_NAME = "gasless_relay"
DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

logger = logging.getLogger(LOGGER_NAME)
logger.addHandler(logging.NullHandler())


def setup_logger(
    level: Union[int, str] = "INFO",
    fmt: Optional[str] = None,
) -> logging.Logger:
    """
    Configure the package logger with a stream handler.

    Calling this more than once only updates the level and format; it never
    stacks duplicate handlers.

    Args:
        level: Logging level name or number (e.g. ``"DEBUG"``).
        fmt: Optional ``logging.Formatter`` format string.

    Returns:
        The configured package logger.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())

    formatter = logging.Formatter(fmt or DEFAULT_FORMAT)
    handler = next(
        (h for h in logger.handlers if isinstance(h, logging.StreamHandler)),
        None,
    )
    if handler is None:
        handler = logging.StreamHandler(sys.stderr)
        logger.addHandler(handler)
    handler.setFormatter(formatter)
    logger.setLevel(level)
    return logger


def error_context() -> str:
    """
    Describe where the exception currently being handled was raised.

    Returns:
        ``"<file>:<line> in <function>"`` for the innermost frame, or
        ``"no active exception"`` when called outside an ``except`` block.
    """
    _, exc, tb = sys.exc_info()
    if exc is None or tb is None:
        return "no active exception"
    frame = traceback.extract_tb(tb)[-1]
    return f"{frame.filename}:{frame.lineno} in {frame.name}"
