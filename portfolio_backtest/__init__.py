# portfolio_backtest/__init__.py
"""
Event-driven, multi-currency portfolio backtesting.
"""

from .core import (
    AssetPriceEvent,
    Backtest,
    Broker,
    FillAtLast,
    FillAtLastWithSlippage,
    FixedRatePlusPercentageCharges,
    FxRate,
    FxRateEvent,
    FxRates,
    NoCharges,
    Portfolio,
    Trade,
    TradeEvent,
    UnitLimit,
    WeightLimit,
)
from .models import NULL_PRICE, UNIT_PRICE, Cash, Price, Stock
from .strategies import BaseStrategy, FunctionStrategy, NoTradeStrategy

__version__ = "0.1.0"

__all__ = [
    "AssetPriceEvent",
    "Backtest",
    "Broker",
    "FillAtLast",
    "FillAtLastWithSlippage",
    "FixedRatePlusPercentageCharges",
    "FxRate",
    "FxRateEvent",
    "FxRates",
    "NoCharges",
    "Portfolio",
    "Trade",
    "TradeEvent",
    "UnitLimit",
    "WeightLimit",
    "NULL_PRICE",
    "UNIT_PRICE",
    "Cash",
    "Price",
    "Stock",
    "BaseStrategy",
    "FunctionStrategy",
    "NoTradeStrategy",
]
