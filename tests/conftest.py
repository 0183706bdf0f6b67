from datetime import datetime, timezone

import pytest

from portfolio_backtest.core.broker import Broker
from portfolio_backtest.core.charges import NoCharges
from portfolio_backtest.core.execution import FillAtLast
from portfolio_backtest.core.fx import FxRate, FxRates
from portfolio_backtest.core.portfolio import Portfolio
from portfolio_backtest.models.assets import Cash, Stock
from portfolio_backtest.models.price import Price


@pytest.fixture()
def portfolio() -> Portfolio:
    return Portfolio("XXX", "AUD")


@pytest.fixture()
def stock() -> Stock:
    return Stock("ZZB AU", "AUD")


@pytest.fixture()
def aud() -> Cash:
    return Cash("AUD")


@pytest.fixture()
def usd() -> Cash:
    return Cash("USD")


@pytest.fixture()
def broker() -> Broker:
    return Broker(NoCharges(), FillAtLast())


@pytest.fixture()
def funded_portfolio(portfolio: Portfolio, aud: Cash, broker: Broker) -> Portfolio:
    """AUD portfolio with 1000 AUD and a no-charge broker."""
    portfolio.transfer(aud, 1000.0)
    portfolio.set_broker(broker)
    return portfolio


@pytest.fixture()
def audusd() -> FxRate:
    return FxRate("AUDUSD", Price.of(0.75))


@pytest.fixture()
def fx_rates(audusd: FxRate) -> FxRates:
    return FxRates([audusd])


@pytest.fixture()
def times() -> list[datetime]:
    return [
        datetime(2021, 3, 13, tzinfo=timezone.utc),
        datetime(2021, 3, 14, tzinfo=timezone.utc),
        datetime(2021, 3, 15, tzinfo=timezone.utc),
    ]
