# portfolio_backtest/core/__init__.py
"""
Core backtesting engine components.
"""

from .backtest_engine import Backtest, BacktestState
from .broker import Broker
from .charges import FixedRatePlusPercentageCharges, NoCharges
from .compliance import ComplianceRule, CustomRule, UnitLimit, WeightLimit
from .events import AssetPriceEvent, Event, EventQueue, FxRateEvent, TradeEvent
from .execution import FillAtLast, FillAtLastWithSlippage
from .fx import FxRate, FxRates
from .portfolio import Portfolio, PortfolioSnapshot, Position
from .trade import Trade

__all__ = [
    "Backtest",
    "BacktestState",
    "Broker",
    "NoCharges",
    "FixedRatePlusPercentageCharges",
    "ComplianceRule",
    "CustomRule",
    "UnitLimit",
    "WeightLimit",
    "Event",
    "EventQueue",
    "AssetPriceEvent",
    "FxRateEvent",
    "TradeEvent",
    "FillAtLast",
    "FillAtLastWithSlippage",
    "FxRate",
    "FxRates",
    "Portfolio",
    "PortfolioSnapshot",
    "Position",
    "Trade",
]
