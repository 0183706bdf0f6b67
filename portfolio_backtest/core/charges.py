# portfolio_backtest/core/charges.py
"""
Broker charge strategies: fees deducted from portfolio cash.
"""

import logging
from typing import Protocol

from .trade import Trade
from ..errors import InvalidTradeValueError
from ..models.assets import Cash
from ..models.currency import validate_currency


logger = logging.getLogger(__name__)


class ChargesStrategy(Protocol):
    def charge(self, trade: Trade) -> None: ...


class NoCharges:
    """Applies no charges."""

    def charge(self, trade: Trade) -> None:
        return None

    def __repr__(self) -> str:
        return "NoCharges()"


class FixedRatePlusPercentageCharges:
    """
    Charges a fixed amount plus a percentage of trade value.

    Charges are debited from cash in a chosen currency, which need not
    be the traded asset's currency.
    """

    def __init__(self, fixed_amount: float, percentage: float, currency: str):
        """
        Initialize charges.

        Args:
            fixed_amount: Flat fee per trade
            percentage: Fee as a fraction of trade value, e.g. 0.01 for 1%
            currency: Currency the fees are paid in

        Raises:
            InvalidCurrencyError: If currency is malformed
        """
        self.fixed_amount = fixed_amount
        self.percentage = percentage
        self.currency = validate_currency(currency)

        logger.info(
            f"Charges initialized: fixed={fixed_amount} {self.currency}, "
            f"percentage={percentage:.4%}"
        )

    def get_fixed_amount(self) -> float:
        return self.fixed_amount

    def get_percentage(self) -> float:
        return self.percentage

    def get_currency_code(self) -> str:
        return self.currency

    def charge(self, trade: Trade) -> None:
        """
        Deduct charges for a trade from portfolio cash.

        Raises:
            InvalidTradeValueError: If the trade has no valid value
            ZeroRateError: If the FX rate into the charge currency is zero
        """
        trade_value = trade.get_local_currency_value()
        if not trade_value.valid:
            raise InvalidTradeValueError("cannot apply charges to a trade with invalid value")

        portfolio = trade.get_portfolio()
        cash = Cash(self.currency)

        portfolio.transfer(cash, -abs(self.fixed_amount))

        pair = trade.get_asset().get_base_currency() + self.currency
        fx_rate, available = portfolio.get_fx_rates().get_rate(pair)
        if not available:
            logger.warning(f"No {pair} rate available, percentage charge skipped")
            return

        variable_charge = abs(trade_value.value * fx_rate * self.percentage)
        portfolio.transfer(cash, -variable_charge)

        logger.debug(
            f"Charged {abs(self.fixed_amount) + variable_charge:.4f} {self.currency} "
            f"on {trade.get_asset().get_ticker()}"
        )

    def __repr__(self) -> str:
        return f"FixedRatePlusPercentageCharges({self.fixed_amount}, {self.percentage}, {self.currency!r})"
