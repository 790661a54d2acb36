"""Logging infrastructure for outlook-agent.

Library code only logs through module loggers under ``outlook_agent``; until
setup_logging() is called nothing is written anywhere. Once set up, logs go
to ~/Library/Logs/ with automatic rotation:
- outlook-agent.log: All activity at the configured level
- outlook-agent-error.log: Errors only (ERROR+ level)

Usage:
    from outlook_agent.logging import setup_logging, get_logger

    # Initialize once at startup
    setup_logging()

    logger = get_logger("cli")
    logger.info("Listing folders...")
"""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

# Default log directory (macOS standard location)
DEFAULT_LOG_DIR = Path.home() / "Library" / "Logs"

# Default rotation settings
DEFAULT_MAX_BYTES = 5 * 1024 * 1024  # 5MB
DEFAULT_BACKUP_COUNT = 3

ROOT_LOGGER_NAME = "outlook_agent"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# Module-level state
_handlers: list[logging.Handler] = []
_initialized: bool = False


def setup_logging(
    log_dir: Path | None = None,
    log_level: str = "INFO",
    max_bytes: int | None = None,
    backup_count: int | None = None,
) -> None:
    """Initialize the logging system.

    Calling it again replaces the handlers installed by the previous call.

    Args:
        log_dir: Directory for log files (default: ~/Library/Logs)
        log_level: Minimum log level (default: INFO)
        max_bytes: Max size per log file before rotation (default: 5MB)
        backup_count: Number of backup files to keep (default: 3)
    """
    global _initialized

    if _initialized:
        reset_logging()

    log_dir = log_dir or DEFAULT_LOG_DIR
    max_bytes = max_bytes or DEFAULT_MAX_BYTES
    backup_count = backup_count if backup_count is not None else DEFAULT_BACKUP_COUNT

    # Ensure log directory exists
    log_dir.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))
    formatter = logging.Formatter(LOG_FORMAT)

    activity_handler = RotatingFileHandler(
        log_dir / "outlook-agent.log",
        maxBytes=max_bytes,
        backupCount=backup_count,
    )
    activity_handler.setFormatter(formatter)

    error_handler = RotatingFileHandler(
        log_dir / "outlook-agent-error.log",
        maxBytes=max_bytes,
        backupCount=backup_count,
    )
    error_handler.setLevel(logging.ERROR)
    error_handler.setFormatter(formatter)

    for handler in (activity_handler, error_handler):
        root_logger.addHandler(handler)
        _handlers.append(handler)

    _initialized = True


def get_logger(component: str) -> logging.Logger:
    """Get a logger for one component (e.g. "mail.send", "cli")."""
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{component}")


def reset_logging() -> None:
    """Remove and close the handlers installed by setup_logging (primarily for testing)."""
    global _initialized

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in _handlers:
        root_logger.removeHandler(handler)
        handler.close()

    _handlers.clear()
    _initialized = False
