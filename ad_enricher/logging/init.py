from __future__ import annotations

import logging
import sys
from pathlib import Path

"""Logging initialization with labeled prefixes.

Console output uses INFO|WARN|ERROR|SUMMARY prefixes. Each run additionally
writes a timestamped log file next to the output workbook (see
`attach_log_file`), using the same labels preceded by a timestamp.

Module loggers are created with `logging.getLogger(__name__)`; since every
module lives under the `ad_enricher` package they propagate to the application
logger configured here.
"""

__all__ = [
    "setup_logging",
    "get_logger",
    "attach_log_file",
    "detach_log_file",
    "log_summary",
]

APP_LOGGER_NAME = "ad_enricher"

# Custom SUMMARY level (between INFO=20 and WARNING=30)
SUMMARY_LEVEL = 25

# Global logger instance
_logger: logging.Logger | None = None


class LabeledFormatter(logging.Formatter):
    """Formatter that prefixes each message with its level label."""

    LEVEL_LABELS = {
        logging.DEBUG: "DEBUG",
        logging.INFO: "INFO",
        logging.WARNING: "WARN",
        logging.ERROR: "ERROR",
        logging.CRITICAL: "CRITICAL",
        SUMMARY_LEVEL: "SUMMARY",
    }

    def __init__(self, with_timestamp: bool = False) -> None:
        super().__init__(datefmt="%Y-%m-%d %H:%M:%S")
        self.with_timestamp = with_timestamp

    def format(self, record: logging.LogRecord) -> str:
        level_label = self.LEVEL_LABELS.get(record.levelno, record.levelname)
        line = f"{level_label} {record.getMessage()}"
        if self.with_timestamp:
            line = f"{self.formatTime(record, self.datefmt)} {line}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def setup_logging() -> logging.Logger:
    """Setup the application logger (stdout, labeled prefixes).

    Idempotent: the second call returns the already configured logger.
    """
    global _logger

    if _logger is not None:
        return _logger

    logging.addLevelName(SUMMARY_LEVEL, "SUMMARY")

    logger = logging.getLogger(APP_LOGGER_NAME)
    logger.setLevel(logging.INFO)

    # Clear any existing handlers to avoid duplication
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(logging.INFO)
    handler.setFormatter(LabeledFormatter())
    logger.addHandler(handler)

    # Prevent propagation to root logger to avoid duplicate output
    logger.propagate = False

    _logger = logger
    return logger


def get_logger() -> logging.Logger:
    """Get the configured application logger (configures it on first use)."""
    if _logger is None:
        return setup_logging()
    return _logger


def set_debug(logger: logging.Logger) -> None:
    for h in logger.handlers:
        h.setLevel(logging.DEBUG)
    logger.setLevel(logging.DEBUG)


def attach_log_file(path: Path) -> logging.FileHandler:
    """Add a file handler writing the run log to `path`."""
    logger = get_logger()
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(logger.level)
    handler.setFormatter(LabeledFormatter(with_timestamp=True))
    logger.addHandler(handler)
    return handler


def detach_log_file(handler: logging.Handler) -> None:
    logger = get_logger()
    logger.removeHandler(handler)
    handler.close()


def log_summary(message: str) -> None:
    """Log a message at SUMMARY level."""
    get_logger().log(SUMMARY_LEVEL, message)


def reset_logging() -> None:
    """Reset the global logger state. Mainly for testing purposes."""
    global _logger
    if _logger is not None:
        for handler in _logger.handlers[:]:
            _logger.removeHandler(handler)
            if isinstance(handler, logging.FileHandler):
                handler.close()
    _logger = None
