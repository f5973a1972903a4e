"""Logger setup shared by the whole application."""

from __future__ import annotations

import logging
import sys
from typing import Final

from .config import LOG_FILE, LOG_LEVEL


def is_running_tests() -> bool:
    """Check if code is being run by pytest."""

    return "pytest" in sys.modules


def setup_logger() -> logging.Logger:
    logger = logging.getLogger("kudos")
    level = logging.DEBUG if is_running_tests() else getattr(logging, LOG_LEVEL, logging.INFO)
    logger.setLevel(level)

    # Reloads must not stack handlers
    if logger.handlers:
        return logger

    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    c_handler = logging.StreamHandler(sys.stdout)
    c_handler.setLevel(level)
    c_handler.setFormatter(formatter)
    logger.addHandler(c_handler)

    if LOG_FILE:
        f_handler = logging.FileHandler(LOG_FILE)
        f_handler.setLevel(logging.DEBUG)  # File always logs DEBUG
        f_handler.setFormatter(formatter)
        logger.addHandler(f_handler)

    return logger


LOGGER: Final[logging.Logger] = setup_logger()


__all__ = ["LOGGER", "is_running_tests", "setup_logger"]
