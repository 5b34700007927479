"""
Logger Module

Provides a centralized logging system that outputs to both console and file.
Every component logger shares one DTR log file; the file can be moved at
startup from configuration.
"""

import logging
import sys
from pathlib import Path
from typing import Dict, Optional

_LOG_FILE_NAME = "dtr.log"

_FORMATTER = logging.Formatter(
    fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S"
)

# Loggers handed out so far, keyed by component name
_loggers: Dict[str, logging.Logger] = {}
_log_path: Optional[Path] = None


def _get_project_root() -> Path:
    """Get the project root directory."""
    return Path(__file__).parent.parent.parent


def _current_log_path() -> Path:
    return _log_path or _get_project_root() / _LOG_FILE_NAME


def _attach_file_handler(logger: logging.Logger, log_path: Path) -> None:
    try:
        file_handler = logging.FileHandler(log_path, mode="a", encoding="utf-8")
    except OSError as e:
        # Console only
        logger.warning(f"Cannot open log file {log_path}: {e}")
        return
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(_FORMATTER)
    logger.addHandler(file_handler)


def set_log_file(path: Optional[str]) -> None:
    """
    Send all component logs to another file.

    Loggers are created at import time, so existing file handlers are
    closed and reopened on the new path. None restores dtr.log in the
    project root.
    """
    global _log_path
    _log_path = Path(path) if path else None
    log_path = _current_log_path()

    for logger in _loggers.values():
        for handler in [h for h in logger.handlers if isinstance(h, logging.FileHandler)]:
            logger.removeHandler(handler)
            handler.close()
        _attach_file_handler(logger, log_path)


def get_logger(name: str) -> logging.Logger:
    """
    Get or create a logger with console and file handlers.

    Args:
        name: Logger name (typically a component name like "PunchService")

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    # Avoid adding handlers multiple times
    if logger.handlers:
        return logger

    logger.setLevel(logging.DEBUG)

    # Console handler - INFO level and above
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(_FORMATTER)
    logger.addHandler(console_handler)

    # File handler - DEBUG level and above
    _attach_file_handler(logger, _current_log_path())

    _loggers[name] = logger
    return logger
