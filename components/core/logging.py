"""Logging configuration for the API server.

Output goes to stdout and, when LOG_FILE is set, to a file as well.
The level comes from the LOG_LEVEL setting (default: INFO).
"""

import logging
import sys
from pathlib import Path
from typing import Optional

from components.core.config import get_settings

# Map string level names to logging constants
LOG_LEVEL_MAP = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def get_log_level(level_name: Optional[str] = None) -> int:
    """Resolve a level name to a logging constant, falling back to INFO."""
    if level_name is None:
        level_name = get_settings().LOG_LEVEL
    return LOG_LEVEL_MAP.get(level_name.upper(), logging.INFO)


def setup_logging(log_file: Optional[str] = None, level_name: Optional[str] = None) -> None:
    """
    Configure the root logger.

    Args:
        log_file: Optional path of a log file; defaults to the LOG_FILE setting
        level_name: Optional level name; defaults to the LOG_LEVEL setting
    """
    settings = get_settings()
    log_file = log_file or settings.LOG_FILE

    formatter = logging.Formatter(
        fmt="[%(asctime)s] %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    log_level = get_log_level(level_name)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Remove any existing handlers to avoid duplicates
    root_logger.handlers.clear()

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setLevel(log_level)
    stdout_handler.setFormatter(formatter)
    root_logger.addHandler(stdout_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path)
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)
