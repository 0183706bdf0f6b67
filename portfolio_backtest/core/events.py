# portfolio_backtest/core/events.py
"""
Event system for backtesting engine.
"""

from abc import ABC, abstractmethod
import heapq
from datetime import datetime
from typing import Any, Dict, List, Optional
import logging

from .fx import FxRate
from .trade import Trade
from ..errors import EmptyQueueError
from ..models.assets import WritableAsset
from ..models.price import Price


logger = logging.getLogger(__name__)


class Event(ABC):
    """Base event class."""

    def __init__(self, timestamp: datetime):
        self.timestamp = timestamp
        self.processed = False
        self.type = self.__class__.__name__

    def get_time(self) -> datetime:
        return self.timestamp

    def is_processed(self) -> bool:
        return self.processed

    @abstractmethod
    def process(self) -> None:
        """Apply the event. Sets ``processed`` on success."""
        pass

    @abstractmethod
    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary."""
        pass


class AssetPriceEvent(Event):
    """New price for an asset (or anything else with ``set_price``)."""

    def __init__(self, target: WritableAsset, timestamp: datetime, price: Price):
        super().__init__(timestamp)
        self.target = target
        self.price = price

    def get_price(self) -> Price:
        return self.price

    def process(self) -> None:
        self.target.set_price(self.price)
        self.processed = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            'type': self.type,
            'timestamp': self.timestamp.isoformat(),
            'target': getattr(self.target, 'get_ticker', lambda: repr(self.target))(),
            'price': self.price.as_float()
        }


class FxRateEvent(AssetPriceEvent):
    """New rate for an FX pair."""

    def __init__(self, rate: FxRate, timestamp: datetime, price: Price):
        super().__init__(rate, timestamp, price)

    def get_fx_rate(self) -> FxRate:
        return self.target

    def to_dict(self) -> Dict[str, Any]:
        return {
            'type': self.type,
            'timestamp': self.timestamp.isoformat(),
            'pair': self.target.get_pair(),
            'price': self.price.as_float()
        }


class TradeEvent(Event):
    """Scheduled trade, executed subject to compliance."""

    def __init__(self, trade: Trade, timestamp: datetime):
        super().__init__(timestamp)
        self.trade = trade
        self.executed: Optional[bool] = None

    def get_trade(self) -> Trade:
        return self.trade

    def process(self) -> None:
        """
        Execute the trade.

        A trade rejected by compliance still counts as processed; errors
        from execution propagate and leave the event unprocessed.
        """
        self.executed = self.trade.execute()
        self.processed = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            'type': self.type,
            'timestamp': self.timestamp.isoformat(),
            'trade': self.trade.to_dict(),
            'executed': self.executed
        }


class EventQueue:
    """
    Time-ordered event queue.

    Events are bucketed by timestamp, with a heap of the distinct times.
    Events sharing a timestamp keep the order in which they were added.
    The same event object is only ever queued once.
    """

    def __init__(self):
        self.buckets: Dict[datetime, List[Event]] = {}
        self.times: List[datetime] = []
        self.size = 0

    def __len__(self) -> int:
        return self.size

    def __contains__(self, event: Event) -> bool:
        bucket = self.buckets.get(event.timestamp, [])
        return any(queued is event for queued in bucket)

    def add(self, event: Event) -> None:
        """Add event to queue."""
        bucket = self.buckets.get(event.timestamp)
        if bucket is None:
            bucket = self.buckets[event.timestamp] = []
            heapq.heappush(self.times, event.timestamp)
        elif any(queued is event for queued in bucket):
            logger.debug(f"{event.type} at {event.timestamp} already queued")
            return
        bucket.append(event)
        self.size += 1

    def is_empty(self) -> bool:
        """Check if queue is empty."""
        return self.size == 0

    def get(self) -> Event:
        """
        Remove and return the earliest event.

        Raises:
            EmptyQueueError: If the queue is empty
        """
        if self.is_empty():
            raise EmptyQueueError("the events list is empty")
        next_time = self.times[0]
        bucket = self.buckets[next_time]
        event = bucket.pop(0)
        if not bucket:
            heapq.heappop(self.times)
            del self.buckets[next_time]
        self.size -= 1
        return event

    def fetch_next_group(self) -> List[Event]:
        """
        Remove and return every event sharing the earliest timestamp.

        Raises:
            EmptyQueueError: If the queue is empty
        """
        if self.is_empty():
            raise EmptyQueueError("the events list is empty")
        next_time = heapq.heappop(self.times)
        group = self.buckets.pop(next_time)
        self.size -= len(group)
        return group

    def num_times(self) -> int:
        """Number of distinct timestamps still queued."""
        return len(self.times)

    def clear(self) -> None:
        """Clear all events."""
        self.buckets.clear()
        self.times.clear()
        self.size = 0
