# portfolio_backtest/utils/config_loader.py
"""
Configuration loading utilities with environment variable support.
"""

import os
import re
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from ..core.broker import Broker
from ..core.charges import FixedRatePlusPercentageCharges, NoCharges
from ..core.execution import FillAtLast, FillAtLastWithSlippage
from ..core.fx import FxRates
from ..core.portfolio import Portfolio
from ..models.assets import Cash
from ..models.config import AppConfig, BrokerConfig


DEFAULT_CONFIG_PATH = "configs/config.yaml"


def substitute_env_vars(config_str: str) -> str:
    """
    Substitute environment variables in config string.

    Args:
        config_str: Configuration string with ${VAR_NAME} placeholders

    Returns:
        Configuration string with environment variables substituted
    """
    pattern = r'\$\{([^}]+)\}'

    def replacer(match):
        var_name = match.group(1)
        # Get default value if specified (VAR_NAME:default_value)
        if ':' in var_name:
            var_name, default_value = var_name.split(':', 1)
            return os.getenv(var_name, default_value)
        else:
            return os.getenv(var_name, match.group(0))  # Keep original if not found

    return re.sub(pattern, replacer, config_str)


def _read_yaml_mapping(config_path: str) -> Dict[str, Any]:
    """Read YAML file into a mapping with environment substitution."""
    config_file = Path(config_path)

    if not config_file.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_file, 'r', encoding='utf-8') as f:
        config_content = f.read()

    substituted_content = substitute_env_vars(config_content)
    config_data = yaml.safe_load(substituted_content)

    if config_data is None:
        return {}
    if not isinstance(config_data, dict):
        raise ValueError("Configuration file must contain a YAML mapping")

    return config_data


def _merge_dicts(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge two dictionaries where override wins."""
    merged = dict(base)
    for key, value in override.items():
        if (
            key in merged
            and isinstance(merged[key], dict)
            and isinstance(value, dict)
        ):
            merged[key] = _merge_dicts(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(
    config_path: Optional[str] = None,
    base_config_path: Optional[str] = None,
) -> AppConfig:
    """
    Load configuration from YAML file with environment variable substitution.

    Args:
        config_path: Path to configuration file, DEFAULT_CONFIG_PATH if omitted
        base_config_path: Optional file whose values the config overrides

    Returns:
        Parsed configuration object

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If config file is invalid YAML
        ValueError: If configuration is invalid
    """
    config_path = config_path or DEFAULT_CONFIG_PATH
    try:
        config_data = _read_yaml_mapping(config_path)

        if base_config_path and Path(base_config_path).exists():
            base_data = _read_yaml_mapping(base_config_path)
            config_data = _merge_dicts(base_data, config_data)

        # Create and validate configuration
        return AppConfig(**config_data)

    except yaml.YAMLError as e:
        raise yaml.YAMLError(f"Invalid YAML in configuration file: {e}")
    except FileNotFoundError:
        raise
    except Exception as e:
        raise ValueError(f"Error loading configuration: {e}")


def save_config(config: AppConfig, config_path: Optional[str] = None) -> None:
    """
    Save configuration to YAML file.

    Args:
        config: Configuration object to save
        config_path: Optional path to save configuration file
    """
    path_obj = Path(config_path or DEFAULT_CONFIG_PATH)
    path_obj.parent.mkdir(parents=True, exist_ok=True)

    config_data = config.to_dict()

    with open(path_obj, 'w', encoding='utf-8') as f:
        yaml.dump(config_data, f, default_flow_style=False, indent=2)


def get_default_config() -> AppConfig:
    """
    Get default configuration for development/testing.

    Returns:
        Default configuration object
    """
    default_config = {
        "broker": {
            "charges": "none",
            "execution": "fill_at_last"
        },
        "portfolios": [
            {
                "code": "MAIN",
                "base_currency": "USD",
                "initial_cash": {"USD": 100000.0}
            }
        ],
        "backtest": {
            "show_progress": True
        },
        "output": {
            "history_csv": "results/history.csv"
        },
        "logging": {
            "level": "INFO",
            "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            "file": None
        }
    }

    return AppConfig(**default_config)


def build_broker(config: BrokerConfig) -> Broker:
    """
    Construct the executing broker described by a config.

    Args:
        config: Broker configuration

    Returns:
        Broker with the configured charges and execution strategies
    """
    if config.charges == "fixed_plus_percentage":
        charges = FixedRatePlusPercentageCharges(
            config.fixed_amount,
            config.percentage,
            config.charges_currency
        )
    else:
        charges = NoCharges()

    if config.execution == "fill_at_last_with_slippage":
        execution = FillAtLastWithSlippage(config.slippage)
    else:
        execution = FillAtLast()

    return Broker(charges, execution)


def build_portfolios(config: AppConfig, fx_rates: Optional[FxRates] = None) -> List[Portfolio]:
    """
    Create the configured portfolios, seeded with their opening cash.

    Every portfolio gets its own broker built from ``config.broker``
    and shares ``fx_rates``.
    """
    fx_rates = fx_rates if fx_rates is not None else FxRates()
    portfolios = []
    for portfolio_config in config.portfolios:
        portfolio = Portfolio(
            portfolio_config.code,
            portfolio_config.base_currency,
            fx_rates=fx_rates,
            broker=build_broker(config.broker)
        )
        for currency, amount in portfolio_config.initial_cash.items():
            portfolio.transfer(Cash(currency), amount)
        portfolios.append(portfolio)
    return portfolios
