# portfolio_backtest/models/price.py
"""
Price and price snapshot models.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Protocol

from pydantic import BaseModel, ConfigDict, Field


class Price(BaseModel):
    """
    An optional price or value.

    ``valid`` separates "no data yet" from a genuine ``0.0``. Anything
    computed from an invalid price must itself be invalid.
    """
    model_config = ConfigDict(frozen=True)

    value: float = Field(default=0.0, description="Price or value amount")
    valid: bool = Field(default=False, description="False until real data is available")

    @classmethod
    def of(cls, value: float) -> "Price":
        """Create a valid price."""
        return cls(value=value, valid=True)

    def as_float(self) -> Optional[float]:
        """Return the amount, or None when invalid."""
        return self.value if self.valid else None

    def __str__(self) -> str:
        return f"{self.value:.2f}" if self.valid else "NA"

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            'value': self.value,
            'valid': self.valid
        }


NULL_PRICE = Price(value=0.0, valid=False)
UNIT_PRICE = Price(value=1.0, valid=True)


class HasPrice(Protocol):
    def get_price(self) -> Price: ...

    def get_value(self) -> Price: ...


@dataclass(frozen=True)
class PriceSnapshot:
    """Point-in-time record of an asset's price and value."""
    timestamp: datetime
    price: Price
    value: Price

    @classmethod
    def capture(cls, timestamp: datetime, source: HasPrice) -> "PriceSnapshot":
        return cls(
            timestamp=timestamp,
            price=source.get_price(),
            value=source.get_value()
        )

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            'timestamp': self.timestamp.isoformat(),
            'price': self.price.as_float(),
            'value': self.value.as_float()
        }
