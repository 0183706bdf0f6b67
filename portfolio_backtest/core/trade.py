# portfolio_backtest/core/trade.py
"""
Trades and the compliance-checked execution pipeline.
"""

import logging

from .portfolio import Portfolio
from ..errors import NoBrokerError
from ..models.assets import Cash, ReadOnlyAsset
from ..models.price import NULL_PRICE, Price
from ..utils.helpers import sgn


logger = logging.getLogger(__name__)


class Trade:
    """
    A proposed change in units of one asset for one portfolio.

    Nothing is mutated until ``execute`` is called, and then only if
    the trade passes the portfolio's compliance rules.
    """

    def __init__(self, portfolio: Portfolio, asset: ReadOnlyAsset, units: float):
        """
        Initialize trade.

        Args:
            portfolio: Portfolio to trade in
            asset: Asset to trade
            units: Signed units, positive to buy and negative to sell
        """
        self.portfolio = portfolio
        self.asset = asset
        self.units = units

    def get_portfolio(self) -> Portfolio:
        return self.portfolio

    def get_asset(self) -> ReadOnlyAsset:
        return self.asset

    def get_units(self) -> float:
        return self.units

    @property
    def base_currency_cash(self) -> Cash:
        """Cash asset in which the trade settles."""
        return Cash(self.asset.get_base_currency())

    def get_local_currency_value(self) -> Price:
        """Absolute trade value in the asset's base currency."""
        asset_value = self.asset.get_value()
        if not asset_value.valid:
            return NULL_PRICE
        return Price.of(asset_value.value * abs(self.units))

    def get_local_currency_consideration(self) -> Price:
        """Cash moved by the trade: negative for buys, positive for sells."""
        trade_value = self.get_local_currency_value()
        if not trade_value.valid:
            return NULL_PRICE
        return Price.of(trade_value.value * sgn(self.units) * -1.0)

    def passes_compliance(self) -> bool:
        """
        Check the trade against the portfolio's compliance rules.

        The trade is executed against a copy of the portfolio through
        the copy's broker and every rule is evaluated on the copy. The
        real portfolio is never touched.

        Raises:
            NoBrokerError: If rules are attached and there is no broker
        """
        if self.portfolio.num_compliance_rules() == 0:
            return True

        portfolio_copy = self.portfolio.copy()
        broker = portfolio_copy.get_broker()
        if broker is None:
            raise NoBrokerError("portfolio has no assigned executing broker")

        broker.execute(self.with_portfolio(portfolio_copy))
        return portfolio_copy.passes_compliance()

    def execute(self) -> bool:
        """
        Execute the trade if it passes compliance.

        Returns:
            True if executed, False if rejected by compliance

        Raises:
            NoBrokerError: If the portfolio has no broker
        """
        if not self.passes_compliance():
            logger.warning(
                f"Trade rejected by compliance: {self.units:+.2f} "
                f"{self.asset.get_ticker()} in '{self.portfolio.get_code()}'"
            )
            return False

        broker = self.portfolio.get_broker()
        if broker is None:
            raise NoBrokerError("portfolio requires an executing broker to call trade.execute()")

        broker.execute(self)
        logger.debug(
            f"Trade executed: {self.units:+.2f} {self.asset.get_ticker()} "
            f"in '{self.portfolio.get_code()}'"
        )
        return True

    def with_portfolio(self, portfolio: Portfolio) -> "Trade":
        """Same asset and units against another portfolio."""
        return Trade(portfolio, self.asset, self.units)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            'portfolio': self.portfolio.get_code(),
            'ticker': self.asset.get_ticker(),
            'units': self.units,
            'value': self.get_local_currency_value().as_float(),
            'consideration': self.get_local_currency_consideration().as_float()
        }

    def __repr__(self) -> str:
        return f"Trade({self.portfolio.get_code()!r}, {self.asset.get_ticker()!r}, {self.units:+.2f})"
