# portfolio_backtest/core/fx.py
"""
FX rates and the FX rate table used for portfolio valuation.
"""

import logging
from datetime import datetime
from typing import Dict, Iterator, List, Optional, Tuple

from ..errors import DuplicateFxRateError, ZeroRateError
from ..models.currency import get_inverse_pair, is_equivalent_pair, validate_pair
from ..models.price import NULL_PRICE, Price, PriceSnapshot


logger = logging.getLogger(__name__)


class FxRate:
    """An ordered currency pair with a rate, e.g. AUDUSD = 0.75."""

    def __init__(self, pair: str, rate: Price = NULL_PRICE):
        """
        Initialize FX rate.

        Args:
            pair: Six letter currency pair
            rate: Initial rate, invalid until set

        Raises:
            InvalidPairError: If pair is malformed
        """
        self.pair = validate_pair(pair)
        self._rate = rate
        self.history: Dict[datetime, PriceSnapshot] = {}

    def get_pair(self) -> str:
        return self.pair

    def get_rate(self) -> Price:
        return self._rate

    def set_rate(self, rate: Price) -> None:
        self._rate = rate

    # FxRate behaves as a price-bearing object for events and snapshots.
    def get_price(self) -> Price:
        return self._rate

    def get_value(self) -> Price:
        return self._rate

    def set_price(self, price: Price) -> None:
        self.set_rate(price)

    def take_snapshot(self, timestamp: datetime) -> PriceSnapshot:
        snapshot = PriceSnapshot.capture(timestamp, self)
        self.history[timestamp] = snapshot
        return snapshot

    def __repr__(self) -> str:
        return f"FxRate({self.pair!r}, {self._rate})"


class FxRates:
    """
    Table of registered FX rates.

    Only one of a pair and its inverse may be registered; the inverse
    rate is derived. Equivalent pairs such as AUDAUD are always 1.0 and
    are never stored.
    """

    def __init__(self, rates: Optional[List[FxRate]] = None):
        self.rates: List[FxRate] = []
        for rate in rates or []:
            self.register(rate)

    def __len__(self) -> int:
        return len(self.rates)

    def register(self, rate: FxRate) -> None:
        """
        Register an FX rate.

        Raises:
            DuplicateFxRateError: If the pair or its inverse is already registered
        """
        pair = validate_pair(rate.get_pair())
        inverse = get_inverse_pair(pair)

        for registered in self.rates:
            if registered.get_pair() in (pair, inverse):
                raise DuplicateFxRateError(f"'{pair}' fx rate instance already exists")

        self.rates.append(rate)
        logger.debug(f"Registered FX rate {pair}")

    def __iter__(self) -> Iterator[FxRate]:
        return iter(self.rates)

    def get_fx_rate(self, pair: str) -> Optional[FxRate]:
        """The registered rate for exactly this pair, if any."""
        pair = validate_pair(pair)
        for registered in self.rates:
            if registered.get_pair() == pair:
                return registered
        return None

    def has_pair(self, pair: str) -> bool:
        """True if the pair or its inverse is registered."""
        pair = validate_pair(pair)
        inverse = get_inverse_pair(pair)
        return any(r.get_pair() in (pair, inverse) for r in self.rates)

    def get_rate(self, pair: str) -> Tuple[float, bool]:
        """
        Resolve the rate for a pair.

        Args:
            pair: Six letter currency pair, e.g. 'USDAUD'

        Returns:
            Tuple of (rate, available). ``available`` is False where
            neither the pair nor its inverse has a valid registered rate.

        Raises:
            InvalidPairError: If pair is malformed
            ZeroRateError: If the matching registered rate is exactly zero
        """
        pair = validate_pair(pair)
        if is_equivalent_pair(pair):
            return 1.0, True

        inverse = get_inverse_pair(pair)
        for registered in self.rates:
            registered_pair = registered.get_pair()
            if registered_pair not in (pair, inverse):
                continue

            rate = registered.get_rate()
            if not rate.valid:
                continue
            if rate.value == 0.0:
                raise ZeroRateError(f"'{pair}' FX rate is zero")

            if registered_pair == pair:
                return rate.value, True
            return 1.0 / rate.value, True

        return 0.0, False
