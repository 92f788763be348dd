"""
Logging for the mensa query service.

Every module logs through `get_logger(__name__)`. Output goes to stdout with
one shared format; the level comes from MENSA_LOG_LEVEL (default INFO).
"""
import logging
import os
import sys

FORMATTER = logging.Formatter(
    "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S"
)


def log_level() -> int:
    """Level named by MENSA_LOG_LEVEL, falling back to INFO for unknown names."""
    name = os.getenv("MENSA_LOG_LEVEL", "INFO").strip().upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def get_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(name)

    # Only add handler if not already configured
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(FORMATTER)
        logger.addHandler(handler)
        logger.setLevel(log_level())

    return logger
