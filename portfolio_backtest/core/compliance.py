# portfolio_backtest/core/compliance.py
"""
Compliance rules evaluated against a (possibly hypothetical) portfolio.
"""

from typing import Callable, Protocol, runtime_checkable

from .portfolio import Portfolio
from ..models.assets import ReadOnlyAsset


@runtime_checkable
class ComplianceRule(Protocol):
    """
    Anything that can pass or fail a portfolio.

    ``passes`` returns False for a breach and raises only when the rule
    itself cannot be evaluated.
    """

    def passes(self, portfolio: Portfolio) -> bool: ...


class UnitLimit:
    """Caps the units held in an asset. Short positions are not bounded."""

    def __init__(self, asset: ReadOnlyAsset, limit: float):
        self.asset = asset
        self.limit = limit

    def get_asset(self) -> ReadOnlyAsset:
        return self.asset

    def get_limit(self) -> float:
        return self.limit

    def passes(self, portfolio: Portfolio) -> bool:
        return portfolio.get_units(self.asset) <= self.limit

    def __repr__(self) -> str:
        return f"UnitLimit({self.asset.get_ticker()!r}, {self.limit})"


class WeightLimit:
    """
    Caps the absolute portfolio weight of an asset.

    Fails while the weight cannot be determined (missing prices or FX
    rates). Valuation errors such as a zero portfolio value propagate.
    """

    def __init__(self, asset: ReadOnlyAsset, limit: float):
        self.asset = asset
        self.limit = limit

    def get_asset(self) -> ReadOnlyAsset:
        return self.asset

    def get_limit(self) -> float:
        return self.limit

    def passes(self, portfolio: Portfolio) -> bool:
        weight = portfolio.get_weight(self.asset)
        if not weight.valid:
            return False
        return abs(weight.value) <= abs(self.limit)

    def __repr__(self) -> str:
        return f"WeightLimit({self.asset.get_ticker()!r}, {self.limit})"


class CustomRule:
    """Wraps a callable ``fn(portfolio) -> bool`` as a compliance rule."""

    def __init__(self, fn: Callable[[Portfolio], bool], name: str = "CustomRule"):
        self.fn = fn
        self.name = name

    def passes(self, portfolio: Portfolio) -> bool:
        return bool(self.fn(portfolio))

    def __repr__(self) -> str:
        return f"CustomRule({self.name!r})"
