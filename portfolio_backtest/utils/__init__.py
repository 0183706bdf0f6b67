# portfolio_backtest/utils/__init__.py
"""
Utility functions and helpers.
"""

from .helpers import clean_code, clean_string, sgn
from .logging_config import get_logger, set_logger_level, setup_logging

__all__ = [
    "clean_code",
    "clean_string",
    "sgn",
    "get_logger",
    "set_logger_level",
    "setup_logging",
]
