"""Console logging configuration for fluxq applications and the CLI."""

from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s - %(message)s"


def setup_logging(level: str | int = "WARNING") -> logging.Logger:
    """
    Attach a stderr handler to the ``fluxq`` logger.

    Args:
        level (str | int): Level name (case-insensitive) or number.

    Returns:
        logging.Logger: The configured ``fluxq`` logger.

    Notes:
        Calling it again replaces the handler installed by a previous call.
    """
    if isinstance(level, str):
        level = level.upper()
    logger = logging.getLogger("fluxq")
    logger.setLevel(level)
    for handler in list(logger.handlers):
        if getattr(handler, "_fluxq_console", False):
            logger.removeHandler(handler)
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._fluxq_console = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    return logger
