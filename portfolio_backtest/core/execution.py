# portfolio_backtest/core/execution.py
"""
Broker execution strategies: how an approved trade is filled.
"""

import logging
from typing import Protocol

from .trade import Trade
from ..errors import InvalidConsiderationError
from ..models.price import Price


logger = logging.getLogger(__name__)


class ExecutionStrategy(Protocol):
    def execute(self, trade: Trade) -> None: ...


class FillAtLast:
    """
    Fills trades at the asset's last price.

    The portfolio receives the traded units and pays (or receives) the
    trade consideration in the asset's base currency.
    """

    def _consideration(self, trade: Trade) -> Price:
        consideration = trade.get_local_currency_consideration()
        if not consideration.valid:
            raise InvalidConsiderationError(
                f"'{trade.get_asset().get_ticker()}' cannot execute a trade with invalid consideration"
            )
        return consideration

    def execute(self, trade: Trade) -> None:
        """
        Fill a trade.

        Raises:
            InvalidConsiderationError: If the asset has no valid price
        """
        consideration = self._consideration(trade)
        trade.get_portfolio().trade(trade.get_asset(), trade.get_units(), consideration)

    def __repr__(self) -> str:
        return "FillAtLast()"


class FillAtLastWithSlippage(FillAtLast):
    """
    Fills at the last price less an unfavourable slippage.

    Buys pay ``(1 + slippage)`` times the consideration, sells receive
    ``(1 - slippage)`` times it.
    """

    def __init__(self, slippage: float):
        """
        Initialize execution.

        Args:
            slippage: Slippage as a fraction of trade value, e.g. 0.02 for 2%
        """
        self.slippage = slippage
        logger.info(f"Execution initialized: slippage={slippage:.4%}")

    @classmethod
    def from_bps(cls, slippage_bps: float) -> "FillAtLastWithSlippage":
        return cls(slippage_bps / 10000.0)

    def get_slippage(self) -> float:
        return self.slippage

    def _apply_slippage(self, consideration: float, units: float) -> float:
        if units > 0:
            # buys pay more
            return consideration * (1 + self.slippage)
        # sells receive less
        return consideration * (1 - self.slippage)

    def execute(self, trade: Trade) -> None:
        """
        Fill a trade with slippage.

        Raises:
            InvalidConsiderationError: If the asset has no valid price
        """
        consideration = self._consideration(trade)
        slipped = self._apply_slippage(consideration.value, trade.get_units())
        logger.debug(
            f"Slippage on {trade.get_asset().get_ticker()}: "
            f"{consideration.value:.2f} -> {slipped:.2f}"
        )
        trade.get_portfolio().trade(trade.get_asset(), trade.get_units(), Price.of(slipped))

    def __repr__(self) -> str:
        return f"FillAtLastWithSlippage({self.slippage})"
