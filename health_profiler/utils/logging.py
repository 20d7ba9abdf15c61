"""
Logging configuration for the health profiler service.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

_LOGGER_NAME = "health_profiler"
_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(funcName)s:%(lineno)d | %(message)s"


def setup_logging(level: str = "INFO", log_file: Optional[Path] = None) -> logging.Logger:
    """
    Configure the package logger.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR).
        log_file: Optional file path to mirror console output into.

    Returns:
        The configured ``health_profiler`` logger.
    """
    level_num = getattr(logging, str(level or "INFO").upper(), logging.INFO)

    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level_num)
    logger.handlers = []

    formatter = logging.Formatter(_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level_num)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(level_num)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def text_snippet(text: str, limit: int = 100) -> str:
    """Single-line preview of user text for DEBUG logs."""
    flat = " ".join((text or "").split())
    if len(flat) > limit:
        return flat[:limit] + "..."
    return flat
