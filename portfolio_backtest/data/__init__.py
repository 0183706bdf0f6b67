# portfolio_backtest/data/__init__.py
"""
Data loaders.
"""

from .price_loader import load_price_events

__all__ = [
    "load_price_events",
]
