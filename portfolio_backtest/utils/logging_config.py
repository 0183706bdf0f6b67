# portfolio_backtest/utils/logging_config.py
"""
Logging configuration utilities.
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from ..models.config import LoggingConfig


DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class ColoredFormatter(logging.Formatter):
    """Colored log formatter for console output."""

    COLORS = {
        'DEBUG': '\033[36m',     # Cyan
        'INFO': '\033[32m',      # Green
        'WARNING': '\033[33m',   # Yellow
        'ERROR': '\033[31m',     # Red
        'CRITICAL': '\033[35m',  # Magenta
        'RESET': '\033[0m'       # Reset
    }

    def format(self, record):
        log_message = super().format(record)
        color = self.COLORS.get(record.levelname, self.COLORS['RESET'])
        return f"{color}{log_message}{self.COLORS['RESET']}"


def _to_level(level: str) -> int:
    return getattr(logging, level.upper(), logging.INFO)


def setup_logging(
    level: str = "INFO",
    format_str: Optional[str] = None,
    log_file: Optional[str] = None,
    max_bytes: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5,
    colored: bool = False
) -> logging.Logger:
    """
    Setup logging configuration.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_str: Log format string
        log_file: Optional log file path
        max_bytes: Maximum log file size before rotation
        backup_count: Number of backup files to keep
        colored: Color console output by level; the log file is never colored

    Returns:
        Configured root logger
    """
    format_str = format_str or DEFAULT_FORMAT
    numeric_level = _to_level(level)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(ColoredFormatter(format_str) if colored else logging.Formatter(format_str))
    root_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding='utf-8'
        )
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(logging.Formatter(format_str))
        root_logger.addHandler(file_handler)

    return root_logger


def setup_logging_from_config(config: "LoggingConfig", colored: bool = False) -> logging.Logger:
    """Setup logging from a LoggingConfig section."""
    return setup_logging(
        level=config.level,
        format_str=config.format,
        log_file=config.file,
        colored=colored
    )


def get_logger(name: str) -> logging.Logger:
    """
    Get a named logger.

    Args:
        name: Logger name

    Returns:
        Named logger instance
    """
    return logging.getLogger(name)


def set_logger_level(name: str, level: str) -> None:
    """
    Set logging level for a specific logger.

    Args:
        name: Logger name, e.g. ``portfolio_backtest.core.trade``
        level: Logging level
    """
    logging.getLogger(name).setLevel(_to_level(level))
