# portfolio_backtest/models/assets.py
"""
Price-bearing assets: generic assets, stocks and cash.
"""

from datetime import datetime
from typing import Dict, Protocol, runtime_checkable

from .currency import validate_currency
from .price import NULL_PRICE, UNIT_PRICE, Price, PriceSnapshot
from ..utils.helpers import clean_string


DEFAULT_MULTIPLIER = 1.0


@runtime_checkable
class ReadOnlyAsset(Protocol):
    """Capability shared by everything a portfolio can hold."""

    def get_ticker(self) -> str: ...

    def get_base_currency(self) -> str: ...

    def get_price(self) -> Price: ...

    def get_value(self) -> Price: ...


@runtime_checkable
class WritableAsset(Protocol):
    """Capability for anything a price event can update."""

    def set_price(self, price: Price) -> None: ...


class Asset:
    """
    Generic asset with a ticker, base currency, price and value.

    Value is price times multiplier and is recalculated whenever the
    price is set. Assets are compared by identity.
    """

    def __init__(self, ticker: str, base_currency: str, multiplier: float = DEFAULT_MULTIPLIER):
        """
        Initialize asset.

        Args:
            ticker: Asset ticker, cleaned to upper case
            base_currency: Three letter currency code
            multiplier: Value multiplier applied to price (e.g. contract size)

        Raises:
            InvalidCurrencyError: If base_currency is malformed
        """
        self.ticker = clean_string(ticker)
        self.base_currency = validate_currency(base_currency)
        self.multiplier = multiplier
        self._price = NULL_PRICE
        self._value = NULL_PRICE
        self.history: Dict[datetime, PriceSnapshot] = {}

    def get_ticker(self) -> str:
        return self.ticker

    def get_base_currency(self) -> str:
        return self.base_currency

    def get_multiplier(self) -> float:
        return self.multiplier

    def get_price(self) -> Price:
        return self._price

    def get_value(self) -> Price:
        return self._value

    def set_price(self, price: Price) -> None:
        """Set the price and revalue."""
        self._price = price
        self.revalue()

    def revalue(self) -> None:
        if not self._price.valid:
            self._value = NULL_PRICE
            return
        self._value = Price.of(self._price.value * self.multiplier)

    def take_snapshot(self, timestamp: datetime) -> PriceSnapshot:
        snapshot = PriceSnapshot.capture(timestamp, self)
        self.history[timestamp] = snapshot
        return snapshot

    def get_history(self) -> Dict[datetime, PriceSnapshot]:
        return self.history

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.ticker!r}, {self.base_currency!r})"


class Stock(Asset):
    """Equity with a unit multiplier."""

    def __init__(self, ticker: str, base_currency: str):
        super().__init__(ticker, base_currency, DEFAULT_MULTIPLIER)


class Cash(Asset):
    """
    Cash in a single currency.

    Price and value are always 1.0 and the ticker is the currency code.
    Two Cash instances in the same currency are the same holding, so a
    portfolio keeps one position per currency however many instances
    are created.
    """

    def __init__(self, currency: str):
        currency = validate_currency(currency)
        super().__init__(currency, currency, DEFAULT_MULTIPLIER)
        self._price = UNIT_PRICE
        self._value = UNIT_PRICE

    @property
    def currency(self) -> str:
        return self.base_currency

    def get_currency(self) -> str:
        return self.base_currency

    def set_price(self, price: Price) -> None:
        # cash is always worth its face value
        return None

    def revalue(self) -> None:
        self._value = UNIT_PRICE

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Cash):
            return self.base_currency == other.base_currency
        return NotImplemented

    def __hash__(self) -> int:
        return hash(("CASH", self.base_currency))
