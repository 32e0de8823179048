"""
================================================================================
Mentoring Tools Common Utilities
================================================================================

Shared logging setup and small filesystem helpers.

Exports:
    - init_logger: Initialize loguru with the suite's logging settings
    - ensure_directory: Create a directory if it does not exist

Usage:
    from mentoring_tools.common import init_logger

    init_logger()
    init_logger(level="DEBUG", log_file="reports/logs/run.log")

================================================================================
"""

import os
import sys
from typing import Optional

from loguru import logger


DEFAULT_LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)


# ============================================================
# Logging Setup
# ============================================================

_logger_initialized = False


def init_logger(
    level: Optional[str] = None,
    format_string: Optional[str] = None,
    log_file: Optional[str] = None,
    rotation: str = "10 MB",
    retention: str = "7 days",
    force: bool = False,
) -> None:
    """
    Route loguru to stderr (and optionally a rotating file) once per process.

    The level comes from the argument, then LOG_LEVEL, then INFO. Callers
    pass the file sink settings from their own configuration.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        format_string: loguru format (DEFAULT_LOG_FORMAT when omitted)
        log_file: Extra file sink
        rotation: loguru rotation for the file sink
        retention: loguru retention for the file sink
        force: Reconfigure even if already initialized (e.g. --verbose)
    """
    global _logger_initialized

    if _logger_initialized and not force:
        return

    # Remove default handler
    logger.remove()

    level = (level or os.environ.get("LOG_LEVEL") or "INFO").upper()
    format_string = format_string or DEFAULT_LOG_FORMAT

    logger.add(
        sys.stderr,
        format=format_string,
        level=level,
        colorize=True,
    )

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            ensure_directory(log_dir)

        logger.add(
            log_file,
            format=format_string,
            level=level,
            rotation=rotation,
            retention=retention,
            enqueue=True,
        )

    _logger_initialized = True
    logger.debug(f"Logger initialized (level={level}, file={log_file or '-'})")


# ============================================================
# Common Utilities
# ============================================================

def ensure_directory(path) -> str:
    """mkdir -p; returns the path as a string."""
    os.makedirs(path, exist_ok=True)
    return str(path)


__all__ = [
    "init_logger",
    "ensure_directory",
    "DEFAULT_LOG_FORMAT",
]
