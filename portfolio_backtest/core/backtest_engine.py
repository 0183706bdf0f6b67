# portfolio_backtest/core/backtest_engine.py
"""
Main backtesting engine with event-driven architecture.
"""

import time
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional
import logging
from tqdm import tqdm

from .broker import Broker
from .events import Event, EventQueue
from .portfolio import Portfolio
from ..errors import BacktestStateError, DuplicateCodeError
from ..models.assets import Asset
from ..utils import history as history_export
from ..utils.helpers import clean_string

if TYPE_CHECKING:
    import pandas as pd
    from ..strategies.base_strategy import BaseStrategy


logger = logging.getLogger(__name__)


class BacktestState(str, Enum):
    """Backtest lifecycle state."""
    IDLE = "idle"
    RUNNING = "running"
    DONE = "done"


class Backtest:
    """
    Event-driven backtest over registered portfolios and assets.

    Each distinct event time is one step: the events for that time are
    applied, the strategy proposes trades, the trades are executed and
    every registered asset and portfolio is snapshotted. The first error
    aborts the run; completed steps are not rolled back.
    """

    def __init__(self, strategy: Optional["BaseStrategy"] = None, show_progress: bool = False):
        """
        Initialize backtest.

        Args:
            strategy: Strategy asked for trades after each time step
            show_progress: Show a tqdm progress bar over time steps
        """
        self.portfolios: List[Portfolio] = []
        self.assets: List[Asset] = []
        self.event_queue = EventQueue()
        self.snapshot_times: List[datetime] = []
        self.show_progress = show_progress
        self.state = BacktestState.IDLE
        self.current_time: Optional[datetime] = None

        self.strategy: Optional["BaseStrategy"] = None
        if strategy is not None:
            self.set_strategy(strategy)

        logger.info("Backtest initialized")

    def set_strategy(self, strategy: "BaseStrategy") -> None:
        """
        Set the trading strategy.

        Args:
            strategy: Anything with ``generate_trades()``; strategies that
                accept a context are given this backtest
        """
        self.strategy = strategy
        if hasattr(strategy, 'set_context'):
            strategy.set_context(self)
        logger.info(f"Strategy registered: {getattr(strategy, 'name', type(strategy).__name__)}")

    def get_strategy(self) -> Optional["BaseStrategy"]:
        return self.strategy

    def _code_registered(self, code: str) -> bool:
        code = clean_string(code)
        if any(code == clean_string(p.get_code()) for p in self.portfolios):
            return True
        return any(code == clean_string(a.get_ticker()) for a in self.assets)

    def register_portfolio(self, portfolio: Portfolio) -> None:
        """
        Register a portfolio to be snapshotted.

        Portfolios without a broker are given one with no charges that
        fills at the last price. Registering the same portfolio twice
        does nothing.

        Raises:
            DuplicateCodeError: If the code clashes with a registered
                portfolio code or asset ticker
        """
        if self.has_portfolio(portfolio):
            return

        code = portfolio.get_code()
        if self._code_registered(code):
            raise DuplicateCodeError(f"portfolio code '{code}' is already in use and needs to be unique")

        if portfolio.get_broker() is None:
            portfolio.set_broker(Broker.default())

        self.portfolios.append(portfolio)
        logger.debug(f"Registered portfolio '{code}'")

    def register_asset(self, asset: Asset) -> None:
        """
        Register an asset to be snapshotted.

        Raises:
            DuplicateCodeError: If the ticker clashes with a registered
                portfolio code or asset ticker
        """
        if self.has_asset(asset):
            return

        ticker = asset.get_ticker()
        if self._code_registered(ticker):
            raise DuplicateCodeError(f"asset ticker '{ticker}' is already in use and needs to be unique")

        self.assets.append(asset)
        logger.debug(f"Registered asset '{ticker}'")

    def has_portfolio(self, portfolio: Portfolio) -> bool:
        return any(p is portfolio for p in self.portfolios)

    def has_asset(self, asset: Asset) -> bool:
        return any(a is asset for a in self.assets)

    def get_portfolios(self) -> List[Portfolio]:
        return list(self.portfolios)

    def get_assets(self) -> List[Asset]:
        return list(self.assets)

    def add_event(self, event: Event) -> None:
        """Queue an event."""
        self.event_queue.add(event)

    def add_events(self, events: Iterable[Event]) -> None:
        """Queue several events."""
        for event in events:
            self.add_event(event)

    def get_snapshot_times(self) -> List[datetime]:
        return self.snapshot_times

    def run(self) -> None:
        """
        Run the backtest until the event queue is empty.

        Raises:
            BacktestStateError: If the backtest is already running or has
                no strategy
            BacktestError: Any error raised while processing an event,
                generating or executing trades, or taking snapshots
        """
        if self.state == BacktestState.RUNNING:
            raise BacktestStateError("backtest is already running")
        if self.strategy is None:
            raise BacktestStateError("no strategy set")

        self.state = BacktestState.RUNNING
        self.snapshot_times = []
        start_time = time.time()
        num_steps = self.event_queue.num_times()

        logger.info(
            f"Starting backtest: {len(self.event_queue)} events over {num_steps} time steps, "
            f"{len(self.portfolios)} portfolios, {len(self.assets)} assets"
        )

        try:
            with tqdm(total=num_steps, desc="Backtesting", disable=not self.show_progress) as pbar:
                while not self.event_queue.is_empty():
                    self._process_step()
                    pbar.update(1)
        except Exception as e:
            logger.error(f"Backtest aborted at {self.current_time}: {e}")
            raise
        finally:
            self.state = BacktestState.DONE

        execution_time = time.time() - start_time
        logger.info(f"Backtest completed in {execution_time:.2f}s ({len(self.snapshot_times)} snapshots)")

    def _process_step(self) -> None:
        """Process every event for the next time, then trade and snapshot."""
        group = self.event_queue.fetch_next_group()
        self.current_time = group[0].timestamp

        logger.debug(f"Processing {len(group)} events at {self.current_time}")
        for event in group:
            event.process()

        trades = self.strategy.generate_trades() or []
        for trade in trades:
            trade.execute()

        self.snapshot_times.append(self.current_time)
        for asset in self.assets:
            asset.take_snapshot(self.current_time)
        for portfolio in self.portfolios:
            portfolio.take_snapshot(self.current_time)

    def history_frame(self) -> "pd.DataFrame":
        """Snapshot history as a DataFrame, one row per snapshot time."""
        return history_export.history_frame(self)

    def history_to_csv(self, file_path: str) -> str:
        """
        Write snapshot history to CSV.

        Returns:
            Path written, with ``.csv`` appended if it was missing
        """
        return history_export.history_to_csv(self, file_path)

    def get_status(self) -> Dict[str, Any]:
        """
        Get current backtest status.

        Returns:
            Status dictionary
        """
        return {
            'state': self.state.value,
            'current_time': self.current_time.isoformat() if self.current_time else None,
            'queued_events': len(self.event_queue),
            'snapshots': len(self.snapshot_times),
            'portfolios': [p.get_code() for p in self.portfolios],
            'assets': [a.get_ticker() for a in self.assets]
        }
