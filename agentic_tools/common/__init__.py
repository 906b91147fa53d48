"""
================================================================================
Agentic Tools Common Utilities
================================================================================

Logging setup and helpers shared by the framework, the runner and the tests.

Exports:
    - init_logger: Initialize the loguru logger with standard settings
    - reset_logger: Allow init_logger to run again (tests, reconfiguration)
    - safe_json_serialize: `default=` hook for json.dumps

Usage:
    from agentic_tools.common import init_logger

    init_logger(level="DEBUG", log_file="logs/framework.log")

================================================================================
"""

import os
import sys
from datetime import date, datetime
from enum import Enum
from typing import Any, Optional

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
) -> None:
    """
    Initializes the loguru logger with standard settings.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR). Defaults to LOG_LEVEL env or INFO.
        format_string: Log format string. Uses default if not provided.
        log_file: Optional file path to write logs to.
        rotation: Rotation policy for the file sink.
        retention: Retention policy for the file sink.

    Example:
        init_logger()  # Use defaults
        init_logger(level="DEBUG", log_file="logs/framework.log")
    """
    global _logger_initialized

    if _logger_initialized:
        return

    # Remove default handler
    logger.remove()

    level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
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
            os.makedirs(log_dir, exist_ok=True)

        logger.add(
            log_file,
            format=format_string,
            level=level,
            rotation=rotation,
            retention=retention,
        )

    _logger_initialized = True
    logger.debug(f"Logger initialized with level: {level}")


def reset_logger() -> None:
    """Allow the next init_logger() call to reconfigure sinks."""
    global _logger_initialized
    _logger_initialized = False


# ============================================================
# Common Utilities
# ============================================================

def safe_json_serialize(obj: Any) -> Any:
    """
    Serializes objects json.dumps cannot handle on its own.

    Handles datetimes, enums, bytes and objects exposing to_dict().
    """
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, bytes):
        return obj.decode("utf-8", errors="replace")
    if hasattr(obj, "to_dict"):
        return obj.to_dict()
    if hasattr(obj, "__dict__"):
        return obj.__dict__
    return str(obj)


# Export public API
__all__ = [
    "DEFAULT_LOG_FORMAT",
    "init_logger",
    "reset_logger",
    "safe_json_serialize",
]
