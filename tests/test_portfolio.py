from datetime import datetime

import pytest

from portfolio_backtest.core.fx import FxRate, FxRates
from portfolio_backtest.core.portfolio import Portfolio, PortfolioSnapshot, Position
from portfolio_backtest.errors import (
    InvalidCurrencyError,
    InvalidTradeValueError,
    ZeroPortfolioValueError,
    ZeroRateError,
)
from portfolio_backtest.models.assets import Cash, Stock
from portfolio_backtest.models.price import NULL_PRICE, Price


def test_new_portfolio(portfolio: Portfolio):
    assert portfolio.get_code() == "XXX"
    assert portfolio.get_base_currency() == "AUD"
    assert portfolio.num_positions() == 0
    assert portfolio.get_broker() is None
    assert len(portfolio.get_fx_rates()) == 0


def test_new_portfolio_rejects_bad_currency():
    with pytest.raises(InvalidCurrencyError):
        Portfolio("XXX", "AU")


def test_position_value(stock: Stock):
    position = Position(stock, 100.0)
    assert position.get_value() == NULL_PRICE
    stock.set_price(Price.of(2.5))
    assert position.get_value() == Price.of(250.0)
    position.increment(10)
    position.decrement(20)
    assert position.units == 90


def test_empty_portfolio_is_worth_zero(portfolio: Portfolio):
    value = portfolio.get_value()
    assert value.valid
    assert value.value == 0.0


def test_portfolio_valuation(portfolio: Portfolio, stock: Stock, aud: Cash):
    portfolio.modify_positions(stock, 100)
    portfolio.modify_positions(aud, 250)

    # no stock price yet
    assert not portfolio.get_value().valid

    stock.set_price(Price.of(2.5))
    assert portfolio.get_value() == Price.of(500.0)


def test_get_weight(portfolio: Portfolio, stock: Stock, aud: Cash):
    other = Stock("AAA AU", "AUD")
    with pytest.raises(ZeroPortfolioValueError, match="cannot calculate weights for portfolio with zero value"):
        portfolio.get_weight(other)

    stock.set_price(Price.of(10.0))
    portfolio.modify_positions(stock, 100)
    assert portfolio.get_weight(stock) == Price.of(1.0)
    assert portfolio.get_weight(aud) == Price.of(0.0)

    portfolio.modify_positions(aud, 150)
    portfolio.modify_positions(Cash("AUD"), 50)
    stock.set_price(Price.of(8.0))

    # 800 in stock, 200 in cash
    assert portfolio.get_weight(stock).value == pytest.approx(0.8)
    assert portfolio.get_weight(aud).value == pytest.approx(0.2)
    assert portfolio.show() == "---Portfolio('XXX')---\nAUD        200.00\nZZB AU     100.00\n"


def test_weights_sum_to_one(portfolio: Portfolio, stock: Stock, aud: Cash):
    stock.set_price(Price.of(3.0))
    portfolio.modify_positions(stock, 10)
    portfolio.modify_positions(aud, 70)

    value, weights = portfolio.get_value_and_weights()
    assert value == Price.of(100.0)
    assert sum(w.value for w in weights.values()) == pytest.approx(1.0)


def test_invalid_price_invalidates_every_weight(portfolio: Portfolio, stock: Stock, aud: Cash):
    portfolio.modify_positions(stock, 10)
    portfolio.modify_positions(aud, 70)

    value, weights = portfolio.get_value_and_weights()
    assert not value.valid
    assert set(weights) == {stock, aud}
    assert all(not w.valid for w in weights.values())


def test_zero_unit_positions_are_ignored(portfolio: Portfolio, stock: Stock, aud: Cash):
    portfolio.modify_positions(aud, 100)
    portfolio.modify_positions(stock, 10)
    portfolio.modify_positions(stock, -10)

    # stock has no price but holds no units
    value, weights = portfolio.get_value_and_weights()
    assert value == Price.of(100.0)
    assert list(weights) == [aud]


def test_held_positions_summing_to_zero_raise(portfolio: Portfolio, aud: Cash):
    portfolio.modify_positions(aud, 100)
    portfolio.modify_positions(aud, -100)
    portfolio.modify_positions(Cash("AUD"), 50)
    portfolio.modify_positions(Cash("AUD"), -50)
    assert portfolio.get_value_and_weights() == (Price.of(0.0), {})

    stock = Stock("ZZB AU", "AUD")
    stock.set_price(Price.of(1.0))
    portfolio.modify_positions(stock, 100)
    portfolio.modify_positions(aud, -100)
    with pytest.raises(ZeroPortfolioValueError):
        portfolio.get_value_and_weights()


def test_valuation_currency(stock: Stock, aud: Cash, fx_rates: FxRates):
    p1 = Portfolio("XXX", "AUD", fx_rates=fx_rates)
    p2 = Portfolio("YYY", "USD", fx_rates=fx_rates)
    for p in (p1, p2):
        p.modify_positions(stock, 200)
        p.modify_positions(aud, 100)

    stock.set_price(Price.of(2.5))

    assert p1.get_value() == Price.of(600.0)
    assert p2.get_value().value == pytest.approx(450.0)


def test_valuation_without_fx_rate_is_invalid(aud: Cash, usd: Cash):
    portfolio = Portfolio("XXX", "AUD")
    portfolio.transfer(aud, 100)
    portfolio.transfer(usd, 100)
    assert not portfolio.get_value().valid


def test_inverse_rate_used_for_valuation(audusd: FxRate):
    portfolio = Portfolio("XXX", "AUD", fx_rates=FxRates([audusd]))
    portfolio.transfer(Cash("USD"), 75)
    assert portfolio.get_value().value == pytest.approx(100.0)


def test_zero_fx_rate_raises_during_valuation():
    portfolio = Portfolio("XXX", "AUD", fx_rates=FxRates([FxRate("AUDUSD", Price.of(0.0))]))
    portfolio.transfer(Cash("USD"), 75)
    with pytest.raises(ZeroRateError):
        portfolio.get_value()


def test_value_grows_with_price(portfolio: Portfolio, stock: Stock, aud: Cash):
    portfolio.modify_positions(stock, 100)
    portfolio.modify_positions(aud, 100)
    stock.set_price(Price.of(1.0))
    before = portfolio.get_value().value
    stock.set_price(Price.of(1.5))
    assert portfolio.get_value().value > before


def test_fx_table_is_shared_by_reference(portfolio: Portfolio, aud: Cash):
    fx_rates = FxRates()
    portfolio.set_fx_rates(fx_rates)
    portfolio.transfer(Cash("USD"), 75)
    assert not portfolio.get_value().valid

    fx_rates.register(FxRate("AUDUSD", Price.of(0.75)))
    assert portfolio.get_value().value == pytest.approx(100.0)


def test_trade_moves_asset_and_cash(portfolio: Portfolio, stock: Stock, aud: Cash):
    portfolio.transfer(aud, 1000)
    stock.set_price(Price.of(2.5))

    portfolio.trade(stock, 100)
    assert portfolio.get_units(stock) == 100
    assert portfolio.get_units(aud) == 750

    portfolio.trade(stock, -50, Price.of(130.0))
    assert portfolio.get_units(stock) == 50
    assert portfolio.get_units(aud) == 880


def test_trade_without_value_raises(portfolio: Portfolio, stock: Stock):
    with pytest.raises(InvalidTradeValueError):
        portfolio.trade(stock, 100)
    with pytest.raises(InvalidTradeValueError):
        portfolio.trade(stock, 100, NULL_PRICE)
    assert portfolio.num_positions() == 0


def test_units_may_go_negative(portfolio: Portfolio, stock: Stock):
    portfolio.transfer(stock, -10)
    assert portfolio.get_units(stock) == -10


def test_take_snapshot(portfolio: Portfolio, stock: Stock, aud: Cash):
    ts = datetime(2021, 3, 13)
    portfolio.transfer(aud, 200)
    portfolio.transfer(stock, 100)
    stock.set_price(Price.of(8.0))

    snapshot = portfolio.take_snapshot(ts)
    assert isinstance(snapshot, PortfolioSnapshot)
    assert portfolio.get_history()[ts] is snapshot
    assert snapshot.value == Price.of(1000.0)
    assert snapshot.weights[stock].value == pytest.approx(0.8)
    assert snapshot.get_units(stock) == 100
    assert snapshot.get_units(Stock("OTHER", "AUD")) == 0.0

    with pytest.raises(TypeError):
        snapshot.weights[stock] = Price.of(0.5)

    # later changes don't leak into the snapshot
    portfolio.transfer(stock, 10)
    assert snapshot.get_units(stock) == 100


def test_take_snapshot_of_zero_value_portfolio(portfolio: Portfolio, aud: Cash, stock: Stock):
    ts = datetime(2021, 3, 13)
    stock.set_price(Price.of(1.0))
    portfolio.transfer(aud, -100)
    portfolio.transfer(stock, 100)

    snapshot = portfolio.take_snapshot(ts)
    assert snapshot.value == Price.of(0.0)
    assert all(not w.valid for w in snapshot.weights.values())


def test_copy_is_independent(portfolio: Portfolio, stock: Stock, aud: Cash, broker):
    portfolio.set_broker(broker)
    portfolio.transfer(aud, 100)
    rule = object()
    portfolio.compliance_rules.append(rule)

    clone = portfolio.copy()
    clone.transfer(aud, 50)
    clone.transfer(stock, 10)

    assert portfolio.get_units(aud) == 100
    assert not portfolio.has_asset(stock)
    assert clone.get_units(aud) == 150
    assert clone.get_broker() is broker
    assert clone.get_fx_rates() is portfolio.get_fx_rates()
    assert clone.has_compliance_rule(rule)
    assert clone.get_history() == {}


def test_to_dict(portfolio: Portfolio, aud: Cash):
    portfolio.transfer(aud, 100)
    data = portfolio.to_dict()
    assert data['code'] == "XXX"
    assert data['value'] == 100.0
    assert data['positions'] == [{'ticker': 'AUD', 'currency': 'AUD', 'units': 100, 'value': 100.0}]
