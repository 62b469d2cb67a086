"""Console logging configuration for kakeibo."""

import logging
import os
from typing import Optional, Union

LOG_LEVEL_ENV = "KAKEIBO_LOG_LEVEL"
LOGGER_NAME = "kakeibo"

CONSOLE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
VERBOSE_FORMAT = "[%(asctime)s] %(levelname)-8s [%(name)s.%(funcName)s:%(lineno)d] %(message)s"


def resolve_log_level(level: Optional[Union[str, int]] = None) -> int:
    """Resolve a level name or number, falling back to the environment.

    Unknown names resolve to WARNING.
    """
    if level is None:
        level = os.environ.get(LOG_LEVEL_ENV, "WARNING")
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    return resolved if isinstance(resolved, int) else logging.WARNING


def setup_logging(level: Optional[Union[str, int]] = None) -> logging.Logger:
    """Configure the ``kakeibo`` logger with a single stderr handler.

    Args:
        level: Level name or number; defaults to ``KAKEIBO_LOG_LEVEL`` or WARNING

    Returns:
        Configured package logger
    """
    log_level = resolve_log_level(level)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(log_level)

    # Remove existing handlers to avoid duplicates
    logger.handlers.clear()

    handler = logging.StreamHandler()
    handler.setLevel(log_level)
    handler.setFormatter(
        logging.Formatter(
            fmt=VERBOSE_FORMAT if log_level <= logging.DEBUG else CONSOLE_FORMAT,
            datefmt="%H:%M:%S" if log_level <= logging.DEBUG else "%Y-%m-%d %H:%M:%S",
        )
    )
    logger.addHandler(handler)
    logger.debug("Logging initialized at %s", logging.getLevelName(log_level))
    return logger
