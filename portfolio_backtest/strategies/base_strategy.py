# portfolio_backtest/strategies/base_strategy.py
"""
Base strategy interface for backtesting.
"""
from abc import ABC, abstractmethod
from typing import Any, Callable, List, Optional

from ..core.trade import Trade


class BaseStrategy(ABC):
    """
    Base strategy interface that all strategies must implement.

    ``generate_trades`` is called once per distinct event time, after
    that time's price and FX events have been applied. The returned
    trades are executed in order.
    """

    def __init__(self, name: str = "BaseStrategy"):
        """
        Initialize strategy.

        Args:
            name: Strategy name
        """
        self.name = name
        self.context: Optional[Any] = None

    @abstractmethod
    def generate_trades(self) -> List[Trade]:
        """
        Propose trades for the current time step.

        Returns:
            Trades to execute, possibly empty
        """
        pass

    def set_context(self, context: Any) -> None:
        """
        Set the backtest the strategy runs in, so it can read the
        registered portfolios and assets.
        """
        self.context = context

    def get_state(self) -> dict:
        """
        Get current strategy state.

        Returns:
            Strategy state dictionary
        """
        return {
            'name': self.name,
            'has_context': self.context is not None
        }


class FunctionStrategy(BaseStrategy):
    """Strategy whose trades come from a plain callable."""

    def __init__(self, fn: Callable[[], List[Trade]], name: str = "FunctionStrategy"):
        super().__init__(name)
        self.fn = fn

    def set_generate_trades(self, fn: Callable[[], List[Trade]]) -> None:
        """Swap the trade generating callable."""
        self.fn = fn

    def generate_trades(self) -> List[Trade]:
        return list(self.fn() or [])


class NoTradeStrategy(BaseStrategy):
    """Never trades. Useful for pure valuation runs."""

    def __init__(self):
        super().__init__("NoTradeStrategy")

    def generate_trades(self) -> List[Trade]:
        return []
