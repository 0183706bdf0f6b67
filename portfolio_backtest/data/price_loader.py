# portfolio_backtest/data/price_loader.py
"""
Load asset price and FX rate events from CSV.
"""

from typing import Dict, Iterable, List, Optional
import logging

import pandas as pd

from ..core.events import AssetPriceEvent, FxRateEvent
from ..core.fx import FxRates
from ..models.assets import Asset
from ..models.price import NULL_PRICE, Price
from ..utils.helpers import clean_string


logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ["timestamp", "code", "price"]


def load_price_events(
    path: str,
    assets: Iterable[Asset],
    fx_rates: Optional[FxRates] = None
) -> List[AssetPriceEvent]:
    """
    Read a ``timestamp,code,price`` CSV into price events.

    ``code`` is matched against asset tickers first and then against
    registered FX pairs. An empty price becomes an invalid price, so the
    target is marked as having no data at that time. Rows whose code
    matches nothing are skipped with a warning.

    Args:
        path: CSV file path
        assets: Assets that rows may target
        fx_rates: FX table whose rates rows may target

    Returns:
        Events in file order

    Raises:
        ValueError: If a required column is missing
    """
    frame = pd.read_csv(path, dtype={'code': str})
    missing = [col for col in REQUIRED_COLUMNS if col not in frame.columns]
    if missing:
        raise ValueError(f"Price file {path} is missing columns: {missing}")

    frame['timestamp'] = pd.to_datetime(frame['timestamp'])

    by_ticker: Dict[str, Asset] = {clean_string(a.get_ticker()): a for a in assets}

    events: List[AssetPriceEvent] = []
    skipped = 0
    for _, row in frame.iterrows():
        code = clean_string(str(row['code']))
        timestamp = row['timestamp'].to_pydatetime()
        price = NULL_PRICE if pd.isna(row['price']) else Price.of(float(row['price']))

        if code in by_ticker:
            events.append(AssetPriceEvent(by_ticker[code], timestamp, price))
            continue

        fx_rate = fx_rates.get_fx_rate(code) if fx_rates is not None and len(code) == 6 else None
        if fx_rate is not None:
            events.append(FxRateEvent(fx_rate, timestamp, price))
            continue

        skipped += 1
        logger.warning(f"No asset or FX rate for code '{code}', row skipped")

    logger.info(f"Loaded {len(events)} price events from {path} ({skipped} skipped)")
    return events
