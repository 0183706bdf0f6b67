# portfolio_backtest/strategies/__init__.py
"""
Trading strategies.
"""

from .base_strategy import BaseStrategy, FunctionStrategy, NoTradeStrategy

__all__ = [
    "BaseStrategy",
    "FunctionStrategy",
    "NoTradeStrategy",
]
