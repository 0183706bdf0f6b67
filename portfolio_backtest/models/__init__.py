# portfolio_backtest/models/__init__.py
"""
Data models for the backtesting engine.
"""

from .assets import Asset, Cash, ReadOnlyAsset, Stock, WritableAsset
from .config import AppConfig, BacktestConfig, BrokerConfig, PortfolioConfig
from .price import NULL_PRICE, UNIT_PRICE, Price, PriceSnapshot

__all__ = [
    "Asset",
    "Cash",
    "Stock",
    "ReadOnlyAsset",
    "WritableAsset",
    "AppConfig",
    "BacktestConfig",
    "BrokerConfig",
    "PortfolioConfig",
    "Price",
    "PriceSnapshot",
    "NULL_PRICE",
    "UNIT_PRICE",
]
