import importlib.util
from pathlib import Path

import pandas as pd
import pytest
from click.testing import CliRunner


SCRIPT_PATH = Path(__file__).resolve().parent.parent / "scripts" / "backtest.py"


@pytest.fixture()
def cli(monkeypatch):
    spec = importlib.util.spec_from_file_location("backtest_cli", SCRIPT_PATH)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    # leave pytest's log capture alone
    monkeypatch.setattr(module, "setup_logging_from_config", lambda *args, **kwargs: None)
    return module


@pytest.fixture()
def run_files(tmp_path):
    config = tmp_path / "config.yaml"
    config.write_text(
        "portfolios:\n"
        "  - code: MAIN\n"
        "    base_currency: USD\n"
        "    initial_cash:\n"
        "      AUD: 1000\n"
        "backtest:\n"
        "  show_progress: false\n"
    )
    prices = tmp_path / "prices.csv"
    prices.write_text(
        "timestamp,code,price\n"
        "2021-03-13,ZZB AU,2.00\n"
        "2021-03-13,AUDUSD,0.75\n"
        "2021-03-14,ZZB AU,2.50\n"
    )
    return str(config), str(prices)


def test_buy_and_hold_run(cli, run_files, tmp_path):
    config, prices = run_files
    output = tmp_path / "out" / "history"

    result = CliRunner().invoke(cli.main, [
        "--config", config,
        "--prices", prices,
        "--asset", "ZZB AU:AUD",
        "--fx", "AUDUSD",
        "--buy", "ZZB AU:100",
        "--output", str(output),
    ])

    assert result.exit_code == 0, result.output
    assert "Backtest completed successfully!" in result.output

    history = pd.read_csv(f"{output}.csv", dtype=str, keep_default_na=False)
    assert list(history["MAIN_ZZB_AU_UNITS"]) == ["100.00", "100.00"]
    # 800 AUD + 100 ZZB AU at 2.50 AUD, converted at 0.75
    assert history.iloc[-1]["PORTFOLIO_MAIN_VALUE"] == "787.50"


def test_unknown_buy_asset(cli, run_files):
    config, prices = run_files
    result = CliRunner().invoke(cli.main, [
        "--config", config,
        "--prices", prices,
        "--buy", "NOPE:1",
    ])
    assert result.exit_code != 0


def test_bad_config_exits_with_error(cli, run_files, tmp_path):
    _, prices = run_files
    bad = tmp_path / "bad.yaml"
    bad.write_text("broker:\n  charges: flat\n")

    result = CliRunner().invoke(cli.main, ["--config", str(bad), "--prices", prices])
    assert result.exit_code == 1
    assert "ERROR" in result.output
