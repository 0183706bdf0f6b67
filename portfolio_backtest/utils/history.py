# portfolio_backtest/utils/history.py
"""
Export backtest snapshot history as a table.
"""

from typing import TYPE_CHECKING, List, Optional
import logging

import pandas as pd

from .helpers import clean_code

if TYPE_CHECKING:
    from ..core.backtest_engine import Backtest
    from ..models.price import Price


logger = logging.getLogger(__name__)

MISSING = "NA"
TIMESTAMP_COLUMN = "TimeStamp"


def _format(value: Optional[float]) -> str:
    if value is None:
        return MISSING
    return f"{value:.2f}"


def _price_cell(price: Optional["Price"]) -> str:
    if price is None or not price.valid:
        return MISSING
    return _format(price.value)


def history_columns(backtest: "Backtest") -> List[str]:
    """
    Column names for a backtest's history table.

    Portfolio values first, then asset prices, then the units each
    portfolio holds in each asset.
    """
    portfolios = backtest.get_portfolios()
    assets = backtest.get_assets()

    columns = [TIMESTAMP_COLUMN]
    columns += [f"PORTFOLIO_{clean_code(p.get_code())}_VALUE" for p in portfolios]
    columns += [f"{clean_code(a.get_ticker())}_PRICE" for a in assets]
    for portfolio in portfolios:
        code = clean_code(portfolio.get_code())
        columns += [f"{code}_{clean_code(a.get_ticker())}_UNITS" for a in assets]
    return columns


def history_frame(backtest: "Backtest") -> pd.DataFrame:
    """
    Build a DataFrame with one row per snapshot time.

    Values are formatted to two decimal places; invalid or missing
    values are rendered as ``NA``.
    """
    portfolios = backtest.get_portfolios()
    assets = backtest.get_assets()

    rows = []
    for snapshot_time in backtest.get_snapshot_times():
        row = [str(snapshot_time)]

        portfolio_snapshots = [p.get_history().get(snapshot_time) for p in portfolios]
        for snapshot in portfolio_snapshots:
            row.append(_price_cell(snapshot.value if snapshot else None))

        for asset in assets:
            snapshot = asset.get_history().get(snapshot_time)
            row.append(_price_cell(snapshot.price if snapshot else None))

        for snapshot in portfolio_snapshots:
            for asset in assets:
                row.append(_format(snapshot.get_units(asset)) if snapshot else MISSING)

        rows.append(row)

    return pd.DataFrame(rows, columns=history_columns(backtest), dtype=str)


def history_to_csv(backtest: "Backtest", file_path: str) -> str:
    """
    Write a backtest's history table to CSV.

    Args:
        backtest: Backtest that has been run
        file_path: Output path; ``.csv`` is appended if missing

    Returns:
        Path written
    """
    if not file_path.endswith(".csv"):
        file_path = file_path + ".csv"

    frame = history_frame(backtest)
    frame.to_csv(file_path, index=False)

    logger.info(f"History written to {file_path} ({len(frame)} rows)")
    return file_path
