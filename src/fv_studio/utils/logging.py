"""Logging setup for fv-studio.

Modules log through ``logging.getLogger(__name__)``; applications call
``setup_logging`` once to attach a handler to the ``fv_studio`` logger.
"""

from __future__ import annotations

import logging
import sys

PACKAGE_LOGGER = "fv_studio"
DEFAULT_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def setup_logging(
    level: str | int = "INFO",
    *,
    fmt: str = DEFAULT_FORMAT,
    stream=None,
) -> logging.Logger:
    """Configure the package logger.

    Calling this more than once replaces the handler installed by the
    previous call instead of stacking handlers.

    Args:
        level: Logging level name or number.
        fmt: Log record format string.
        stream: Output stream (defaults to stderr).

    Returns:
        The configured ``fv_studio`` logger.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level.upper() if isinstance(level, str) else level)

    for handler in list(logger.handlers):
        if getattr(handler, "_fv_studio_handler", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(fmt))
    handler._fv_studio_handler = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    return logger
