# portfolio_backtest/errors.py
"""
Exception hierarchy for the backtesting engine.
"""

from __future__ import annotations


class BacktestError(Exception):
    """Base exception for backtest failures."""


class CurrencyValidationError(BacktestError, ValueError):
    """Raised when a currency code or pair is malformed."""


class InvalidCurrencyError(CurrencyValidationError):
    """Raised for currency codes that are not three characters."""


class InvalidPairError(CurrencyValidationError):
    """Raised for currency pairs that are not six characters."""


class ZeroRateError(BacktestError):
    """Raised when a registered FX rate of zero would be used."""


class ZeroPortfolioValueError(BacktestError):
    """Raised when weights are requested for a portfolio worth nothing."""


class NoBrokerError(BacktestError):
    """Raised when a trade needs a broker and the portfolio has none."""


class BacktestStateError(BacktestError):
    """Raised when a backtest is run while it is already running."""


class DuplicateRegistrationError(BacktestError):
    """Raised when a registration collides with an existing one."""


class DuplicateCodeError(DuplicateRegistrationError):
    """Raised when a portfolio code or asset ticker is already in use."""


class DuplicateFxRateError(DuplicateRegistrationError):
    """Raised when a pair, or its inverse, is already registered."""


class EmptyQueueError(BacktestError):
    """Raised when events are requested from an empty queue."""


class ExecutionError(BacktestError):
    """Raised when a broker cannot fill a trade."""


class InvalidConsiderationError(ExecutionError):
    """Raised when the trade consideration cannot be determined."""


class ChargesError(BacktestError):
    """Raised when broker charges cannot be applied."""


class InvalidTradeValueError(ChargesError):
    """Raised when a trade has no valid value to charge or settle against."""
