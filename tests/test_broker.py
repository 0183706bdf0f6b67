import logging

import pytest

from portfolio_backtest.core.broker import Broker
from portfolio_backtest.core.charges import FixedRatePlusPercentageCharges, NoCharges
from portfolio_backtest.core.execution import FillAtLast, FillAtLastWithSlippage
from portfolio_backtest.core.fx import FxRates
from portfolio_backtest.core.portfolio import Portfolio
from portfolio_backtest.core.trade import Trade
from portfolio_backtest.errors import InvalidConsiderationError, InvalidCurrencyError, InvalidTradeValueError
from portfolio_backtest.models.assets import Cash, Stock
from portfolio_backtest.models.price import Price


@pytest.fixture()
def seeded(portfolio: Portfolio, aud: Cash) -> Portfolio:
    portfolio.transfer(aud, 1000.0)
    return portfolio


def test_fill_at_last(seeded: Portfolio, stock: Stock, aud: Cash):
    buy = Trade(seeded, stock, +100.0)
    sell = Trade(seeded, stock, -100.0)
    fill_at_last = FillAtLast()
    with_slippage = FillAtLastWithSlippage(0.02)

    for execution in (fill_at_last, with_slippage):
        with pytest.raises(InvalidConsiderationError, match="'ZZB AU' cannot execute a trade with invalid consideration"):
            execution.execute(buy)

    stock.set_price(Price.of(2.5))
    fill_at_last.execute(buy)
    assert seeded.get_units(stock) == 100
    assert seeded.get_units(aud) == 750

    # $250 of stock sold with 2% slippage loses $5
    with_slippage.execute(sell)
    assert seeded.get_units(stock) == 0
    assert seeded.get_units(aud) == pytest.approx(995.0)


def test_slippage_on_buys(seeded: Portfolio, stock: Stock, aud: Cash):
    stock.set_price(Price.of(2.5))
    FillAtLastWithSlippage(0.02).execute(Trade(seeded, stock, 100))

    assert seeded.get_units(stock) == 100
    assert 1000 - seeded.get_units(aud) == pytest.approx(255.0)


def test_slippage_from_bps():
    assert FillAtLastWithSlippage.from_bps(200).get_slippage() == pytest.approx(0.02)


def test_no_charges(seeded: Portfolio, stock: Stock, aud: Cash):
    charges = NoCharges()
    charges.charge(Trade(seeded, stock, +100))
    charges.charge(Trade(seeded, stock, -100))
    assert seeded.get_units(aud) == 1000


def test_fixed_rate_plus_percentage(seeded: Portfolio, stock: Stock, aud: Cash):
    buy = Trade(seeded, stock, +100.0)
    sell = Trade(seeded, stock, -100.0)
    charges = FixedRatePlusPercentageCharges(20, 0.01, "AUD")
    assert charges.get_currency_code() == "AUD"

    for trade in (buy, sell):
        with pytest.raises(InvalidTradeValueError, match="cannot apply charges to a trade with invalid value"):
            charges.charge(trade)

    # 20 + 2.50 * 100 * 1% = 22.50 per trade
    stock.set_price(Price.of(2.5))
    charges.charge(buy)
    assert seeded.get_units(aud) == pytest.approx(977.5)
    charges.charge(sell)
    assert seeded.get_units(aud) == pytest.approx(955.0)


def test_charges_in_another_currency(seeded: Portfolio, stock: Stock, aud: Cash, usd: Cash, fx_rates: FxRates):
    seeded.set_fx_rates(fx_rates)
    stock.set_price(Price.of(2.5))
    charges = FixedRatePlusPercentageCharges(20, 0.01, "USD")

    # 20 + 2.50 * 100 * 1% * 0.75 = USD 21.875
    charges.charge(Trade(seeded, stock, +100))
    assert seeded.get_units(aud) == 1000
    assert seeded.get_units(usd) == pytest.approx(-21.875)

    charges.charge(Trade(seeded, stock, -100))
    assert seeded.get_units(usd) == pytest.approx(-43.75)


def test_percentage_skipped_without_fx_rate(seeded: Portfolio, stock: Stock, usd: Cash, caplog):
    stock.set_price(Price.of(2.5))
    charges = FixedRatePlusPercentageCharges(20, 0.01, "USD")

    with caplog.at_level(logging.WARNING):
        charges.charge(Trade(seeded, stock, +100))

    assert seeded.get_units(usd) == -20
    assert "AUDUSD" in caplog.text


def test_charges_reject_bad_currency():
    with pytest.raises(InvalidCurrencyError):
        FixedRatePlusPercentageCharges(20, 0.01, "US")


def test_broker_fills_then_charges(seeded: Portfolio, stock: Stock, aud: Cash):
    broker = Broker(FixedRatePlusPercentageCharges(10, 0.0, "AUD"), FillAtLast())
    stock.set_price(Price.of(2.5))

    broker.execute(Trade(seeded, stock, 100))
    assert seeded.get_units(stock) == 100
    assert seeded.get_units(aud) == pytest.approx(740.0)


def test_broker_skips_charges_when_fill_fails(seeded: Portfolio, stock: Stock, aud: Cash):
    broker = Broker(FixedRatePlusPercentageCharges(10, 0.0, "AUD"), FillAtLast())

    with pytest.raises(InvalidConsiderationError):
        broker.execute(Trade(seeded, stock, 100))
    assert seeded.get_units(aud) == 1000
    assert not seeded.has_asset(stock)


def test_default_broker():
    broker = Broker.default()
    assert isinstance(broker.get_charges(), NoCharges)
    assert isinstance(broker.get_execution(), FillAtLast)
    assert repr(Broker()) == "Broker(NoCharges(), FillAtLast())"
