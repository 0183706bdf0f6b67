# scripts/backtest.py
"""
CLI script for running backtests.
"""

import sys
from pathlib import Path

# Add parent directory to path
sys.path.append(str(Path(__file__).parent.parent))

import click
from portfolio_backtest.core.backtest_engine import Backtest
from portfolio_backtest.core.events import TradeEvent
from portfolio_backtest.core.fx import FxRate, FxRates
from portfolio_backtest.core.trade import Trade
from portfolio_backtest.data.price_loader import load_price_events
from portfolio_backtest.errors import BacktestError
from portfolio_backtest.models.assets import Stock
from portfolio_backtest.strategies.base_strategy import NoTradeStrategy
from portfolio_backtest.utils.config_loader import build_portfolios, get_default_config, load_config
from portfolio_backtest.utils.logging_config import setup_logging_from_config


def _parse_pairs(values, option):
    parsed = []
    for value in values:
        if ':' not in value:
            raise click.BadParameter(f"expected NAME:VALUE, got '{value}'", param_hint=option)
        name, _, rest = value.partition(':')
        parsed.append((name.strip(), rest.strip()))
    return parsed


@click.command()
@click.option('--config', '-c', default=None, help='Configuration file path')
@click.option('--prices', '-p', required=True, type=click.Path(exists=True), help='CSV of timestamp,code,price rows')
@click.option('--asset', '-a', 'assets', multiple=True, help='Stock as TICKER:CURRENCY, repeatable')
@click.option('--fx', 'fx_pairs', multiple=True, help='FX pair priced in the prices file, e.g. AUDUSD')
@click.option('--buy', 'buys', multiple=True, help='Units to buy at the first price time as TICKER:UNITS')
@click.option('--output', '-o', default=None, help='History CSV path, overrides the config')
@click.option('--verbose', '-v', is_flag=True, help='Verbose logging')
def main(config, prices, assets, fx_pairs, buys, output, verbose):
    """Run backtest from command line."""

    try:
        # Load configuration
        if config:
            click.echo(f"Loading configuration from {config}")
            app_config = load_config(config)
        else:
            app_config = get_default_config()

        if verbose:
            app_config.logging.level = "DEBUG"
        setup_logging_from_config(app_config.logging)

        fx_rates = FxRates([FxRate(pair) for pair in fx_pairs])
        stocks = [Stock(ticker, currency) for ticker, currency in _parse_pairs(assets, '--asset')]
        portfolios = build_portfolios(app_config, fx_rates)
        if not portfolios:
            click.echo("ERROR: No portfolios configured", err=True)
            sys.exit(1)

        backtest = Backtest(NoTradeStrategy(), show_progress=app_config.backtest.show_progress)
        for portfolio in portfolios:
            backtest.register_portfolio(portfolio)
        for stock in stocks:
            backtest.register_asset(stock)

        price_events = load_price_events(prices, stocks, fx_rates)
        if not price_events:
            click.echo("ERROR: No price data available", err=True)
            sys.exit(1)
        backtest.add_events(price_events)
        click.echo(f"Loaded {len(price_events)} price events")

        # Initial purchases happen after the first prices are applied
        first_time = min(event.timestamp for event in price_events)
        by_ticker = {stock.get_ticker(): stock for stock in stocks}
        for ticker, units in _parse_pairs(buys, '--buy'):
            stock = by_ticker.get(ticker.upper())
            if stock is None:
                raise click.BadParameter(f"unknown asset '{ticker}'", param_hint='--buy')
            for portfolio in portfolios:
                backtest.add_event(TradeEvent(Trade(portfolio, stock, float(units)), first_time))

        # Run backtest
        click.echo("Running backtest...")
        backtest.run()

        # Display results
        click.echo("\n" + "="*50)
        click.echo("BACKTEST RESULTS")
        click.echo("="*50)
        for portfolio in portfolios:
            click.echo(f"Portfolio {portfolio.get_code()}: {portfolio.get_value()} {portfolio.get_base_currency()}")
            click.echo(portfolio.show())

        history_path = output or app_config.output.history_csv
        if history_path:
            Path(history_path).parent.mkdir(parents=True, exist_ok=True)
            written = backtest.history_to_csv(history_path)
            click.echo(f"History saved to: {written}")

        click.echo("Backtest completed successfully!")

    except (BacktestError, ValueError, FileNotFoundError) as e:
        click.echo(f"ERROR: {e}", err=True)
        sys.exit(1)


if __name__ == '__main__':
    main()
