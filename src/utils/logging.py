"""
Logging helpers shared by the library, the API and the CLI.

Usage:
    from src.utils.logging import get_logger

    logger = get_logger(__name__)
    logger.info("Registry loaded")
"""

import logging
import sys
from typing import Optional

LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"
CLI_LOG_FORMAT = "%(levelname)s: %(message)s"

# verbosity 0..4 -> logging level
VERBOSITY_LEVELS = {
    0: logging.CRITICAL,
    1: logging.ERROR,
    2: logging.WARNING,
    3: logging.INFO,
    4: logging.DEBUG,
}

ROOT_LOGGER_NAME = "tikidan"


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger namespaced under the project root logger.

    Module names starting with ``src.`` are re-rooted so that a single
    ``setup_logging`` call controls every module.
    """
    if name.startswith("src."):
        name = name[len("src."):]
    if not name.startswith(ROOT_LOGGER_NAME):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)


def _configure(level: int, fmt: str, stream=None) -> logging.Logger:
    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(level)

    # Replace our own handler on repeated calls instead of stacking them
    for handler in list(root.handlers):
        if getattr(handler, "_tikidan_handler", False):
            root.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(fmt))
    handler._tikidan_handler = True
    root.addHandler(handler)
    return root


def setup_logging(level: Optional[str] = None) -> logging.Logger:
    """
    Configure logging for long-running services.

    Args:
        level: Level name such as "INFO" or "DEBUG". Defaults to INFO.
    """
    resolved = logging.getLevelName((level or "INFO").upper())
    if not isinstance(resolved, int):
        resolved = logging.INFO
    return _configure(resolved, LOG_FORMAT)


def setup_cli_logging(verbosity: int = 3) -> logging.Logger:
    """Configure terse logging for CLI commands (verbosity 0-4)."""
    verbosity = max(0, min(4, verbosity))
    return _configure(VERBOSITY_LEVELS[verbosity], CLI_LOG_FORMAT)
