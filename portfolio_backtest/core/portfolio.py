# portfolio_backtest/core/portfolio.py
"""
Portfolio management, multi-currency valuation and snapshot history.
"""

from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional, Tuple
import logging

from .fx import FxRates
from ..errors import InvalidTradeValueError, ZeroPortfolioValueError
from ..models.assets import Cash, ReadOnlyAsset
from ..models.currency import validate_currency
from ..models.price import NULL_PRICE, Price

if TYPE_CHECKING:
    from .broker import Broker
    from .compliance import ComplianceRule


logger = logging.getLogger(__name__)


@dataclass
class Position:
    """Holding of some number of units in a single asset."""
    asset: ReadOnlyAsset
    units: float = 0.0

    @property
    def value(self) -> Price:
        """Position value in the asset's base currency."""
        asset_value = self.asset.get_value()
        if not asset_value.valid:
            return NULL_PRICE
        return Price.of(asset_value.value * self.units)

    def get_value(self) -> Price:
        return self.value

    def get_ticker(self) -> str:
        return self.asset.get_ticker()

    def get_base_currency(self) -> str:
        return self.asset.get_base_currency()

    def increment(self, units: float) -> None:
        self.units += units

    def decrement(self, units: float) -> None:
        self.units -= units

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            'ticker': self.get_ticker(),
            'currency': self.get_base_currency(),
            'units': self.units,
            'value': self.value.as_float()
        }


@dataclass(frozen=True)
class PortfolioSnapshot:
    """Point-in-time record of portfolio value, weights and units."""
    timestamp: datetime
    value: Price
    weights: Mapping[Any, Price] = field(default_factory=dict)
    holdings: Mapping[Any, float] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, 'weights', MappingProxyType(dict(self.weights)))
        object.__setattr__(self, 'holdings', MappingProxyType(dict(self.holdings)))

    def get_units(self, asset: ReadOnlyAsset) -> float:
        return self.holdings.get(asset, 0.0)

    def to_dict(self) -> dict:
        """Convert to dictionary keyed by ticker."""
        return {
            'timestamp': self.timestamp.isoformat(),
            'value': self.value.as_float(),
            'weights': {a.get_ticker(): w.as_float() for a, w in self.weights.items()},
            'holdings': {a.get_ticker(): u for a, u in self.holdings.items()}
        }


class Portfolio:
    """
    Collection of asset positions valued in a single base currency.

    Positions are keyed by asset. Units may go negative, for short
    positions or cash borrowed. The FX table is held by reference so it
    can be shared with other portfolios.
    """

    def __init__(
        self,
        code: str,
        base_currency: str,
        fx_rates: Optional[FxRates] = None,
        broker: Optional["Broker"] = None
    ):
        """
        Initialize portfolio.

        Args:
            code: Portfolio code, unique within a backtest
            base_currency: Reporting currency code
            fx_rates: Shared FX table, an empty table if omitted
            broker: Executing broker used for trades

        Raises:
            InvalidCurrencyError: If base_currency is malformed
        """
        self.code = code
        self.base_currency = validate_currency(base_currency)
        self.positions: Dict[ReadOnlyAsset, Position] = {}
        self.fx_rates = fx_rates if fx_rates is not None else FxRates()
        self.broker = broker
        self.compliance_rules: List["ComplianceRule"] = []
        self.history: Dict[datetime, PortfolioSnapshot] = {}

        logger.debug(f"Portfolio '{code}' initialized in {self.base_currency}")

    def get_code(self) -> str:
        return self.code

    def get_base_currency(self) -> str:
        return self.base_currency

    def get_fx_rates(self) -> FxRates:
        return self.fx_rates

    def set_fx_rates(self, fx_rates: FxRates) -> None:
        self.fx_rates = fx_rates

    def get_broker(self) -> Optional["Broker"]:
        return self.broker

    def set_broker(self, broker: "Broker") -> None:
        self.broker = broker

    def num_positions(self) -> int:
        return len(self.positions)

    def has_asset(self, asset: ReadOnlyAsset) -> bool:
        return asset in self.positions

    def get_units(self, asset: ReadOnlyAsset) -> float:
        """Units held in an asset, zero if never held."""
        position = self.positions.get(asset)
        return position.units if position else 0.0

    def get_position(self, asset: ReadOnlyAsset) -> Optional[Position]:
        return self.positions.get(asset)

    def modify_positions(self, asset: ReadOnlyAsset, units: float) -> None:
        """Increment (or decrement, for negative units) a position."""
        if asset in self.positions:
            self.positions[asset].increment(units)
        else:
            self.positions[asset] = Position(asset, units)

    def transfer(self, asset: ReadOnlyAsset, units: float) -> None:
        """Transfer units of an asset in (positive) or out (negative)."""
        self.modify_positions(asset, units)

    def trade(
        self,
        asset: ReadOnlyAsset,
        units: float,
        consideration: Optional[Price] = None
    ) -> None:
        """
        Trade an asset against cash in the asset's base currency.

        Args:
            asset: Asset to trade
            units: Signed units, positive to buy
            consideration: Cash amount in the asset's base currency,
                negative for buys. Derived from the asset value if omitted.

        Raises:
            InvalidCurrencyError: If the asset's base currency is malformed
            InvalidTradeValueError: If the consideration cannot be determined
        """
        cash = Cash(asset.get_base_currency())

        if consideration is None:
            asset_value = asset.get_value()
            if not asset_value.valid:
                raise InvalidTradeValueError(
                    f"'{asset.get_ticker()}' cannot trade an asset with invalid value"
                )
            consideration = Price.of(-units * asset_value.value)
        elif not consideration.valid:
            raise InvalidTradeValueError(
                f"'{asset.get_ticker()}' cannot trade with an invalid consideration"
            )

        self.transfer(asset, units)
        self.transfer(cash, consideration.value)

        logger.debug(
            f"Portfolio '{self.code}': {units:+.2f} {asset.get_ticker()} "
            f"for {consideration.value:+.2f} {cash.currency}"
        )

    def _valuation(self) -> Tuple[bool, float, Dict[ReadOnlyAsset, Optional[float]]]:
        """
        Value every held position in the base currency.

        Returns:
            Tuple of (valid, total, converted). ``converted`` maps each
            asset with non-zero units to its base currency value, or None
            where the value or FX rate is not available.
        """
        valid = True
        total = 0.0
        converted: Dict[ReadOnlyAsset, Optional[float]] = {}

        for asset, position in self.positions.items():
            if position.units == 0:
                continue

            value = position.get_value()
            if not value.valid:
                valid = False
                converted[asset] = None
                continue

            pair = position.get_base_currency() + self.base_currency
            rate, available = self.fx_rates.get_rate(pair)
            if not available:
                valid = False
                converted[asset] = None
                continue

            amount = value.value * rate
            converted[asset] = amount
            total += amount

        return valid, total, converted

    def get_value(self) -> Price:
        """
        Portfolio value in the base currency.

        Invalid if any held position has no valid value or FX rate. An
        empty portfolio is worth a valid 0.0.
        """
        valid, total, _ = self._valuation()
        if not valid:
            return NULL_PRICE
        return Price.of(total)

    def get_value_and_weights(self) -> Tuple[Price, Dict[ReadOnlyAsset, Price]]:
        """
        Portfolio value and the weight of every held asset.

        Every asset with non-zero units appears in the weights. When the
        value is invalid every weight is invalid too.

        Raises:
            InvalidPairError: If an asset currency forms a malformed pair
            ZeroRateError: If a required FX rate is zero
            ZeroPortfolioValueError: If held positions sum to exactly zero
        """
        valid, total, converted = self._valuation()
        if not valid:
            return NULL_PRICE, {asset: NULL_PRICE for asset in converted}
        if not converted:
            return Price.of(0.0), {}
        if total == 0.0:
            raise ZeroPortfolioValueError("cannot calculate weights for portfolio with zero value")

        weights = {asset: Price.of(amount / total) for asset, amount in converted.items()}
        return Price.of(total), weights

    def get_weight(self, asset: ReadOnlyAsset) -> Price:
        """
        Weight of a single asset, a valid 0.0 if it isn't held.

        Raises:
            ZeroPortfolioValueError: If the portfolio is worth exactly zero
        """
        valid, total, converted = self._valuation()
        if not valid:
            return NULL_PRICE
        if total == 0.0:
            raise ZeroPortfolioValueError("cannot calculate weights for portfolio with zero value")
        return Price.of((converted.get(asset) or 0.0) / total)

    def take_snapshot(self, timestamp: datetime) -> PortfolioSnapshot:
        """
        Record value, weights and units at a point in time.

        A portfolio worth exactly zero is recorded with its value and
        invalid weights rather than failing the snapshot.
        """
        valid, total, converted = self._valuation()
        if valid and converted and total != 0.0:
            value, weights = self.get_value_and_weights()
        elif valid:
            value, weights = Price.of(total), {asset: NULL_PRICE for asset in converted}
        else:
            value, weights = NULL_PRICE, {asset: NULL_PRICE for asset in converted}

        holdings = {asset: position.units for asset, position in self.positions.items()}
        snapshot = PortfolioSnapshot(
            timestamp=timestamp,
            value=value,
            weights=weights,
            holdings=holdings
        )
        self.history[timestamp] = snapshot
        return snapshot

    def get_history(self) -> Dict[datetime, PortfolioSnapshot]:
        return self.history

    def add_compliance_rule(self, rule: "ComplianceRule") -> None:
        """Attach a compliance rule; adding the same rule twice does nothing."""
        if not self.has_compliance_rule(rule):
            self.compliance_rules.append(rule)

    def remove_compliance_rule(self, rule: "ComplianceRule") -> None:
        """Detach a compliance rule if attached."""
        self.compliance_rules = [r for r in self.compliance_rules if r is not rule]

    def has_compliance_rule(self, rule: "ComplianceRule") -> bool:
        return any(r is rule for r in self.compliance_rules)

    def num_compliance_rules(self) -> int:
        return len(self.compliance_rules)

    def passes_compliance(self) -> bool:
        """
        Evaluate every attached rule against this portfolio.

        Errors raised by a rule propagate.
        """
        all_pass = True
        for rule in self.compliance_rules:
            if not rule.passes(self):
                all_pass = False
        return all_pass

    def copy(self) -> "Portfolio":
        """
        Copy positions, rules, FX table and broker into a new portfolio.

        Positions are new objects so the copy can be traded freely; the
        FX table, rules and broker are shared references. History is
        not copied.
        """
        clone = Portfolio(
            self.code,
            self.base_currency,
            fx_rates=self.fx_rates,
            broker=self.broker
        )
        for asset, position in self.positions.items():
            clone.positions[asset] = Position(asset, position.units)
        clone.compliance_rules = list(self.compliance_rules)
        return clone

    def show(self) -> str:
        """Plain text listing of units held, sorted by ticker."""
        lines = [f"---Portfolio('{self.code}')---"]
        for position in sorted(self.positions.values(), key=lambda p: p.get_ticker()):
            lines.append(f"{position.get_ticker():<10} {position.units:.2f}")
        return "\n".join(lines) + "\n"

    def get_positions_summary(self) -> List[Dict]:
        return [pos.to_dict() for pos in self.positions.values() if pos.units != 0]

    def to_dict(self) -> Dict:
        """Convert portfolio to dictionary."""
        return {
            'code': self.code,
            'base_currency': self.base_currency,
            'value': self.get_value().as_float(),
            'positions': self.get_positions_summary(),
            'num_compliance_rules': self.num_compliance_rules()
        }

    def __repr__(self) -> str:
        return f"Portfolio({self.code!r}, {self.base_currency!r})"
