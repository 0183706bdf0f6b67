# portfolio_backtest/models/config.py
"""
Configuration models for the backtesting engine.
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from .currency import validate_currency


ChargesType = Literal["none", "fixed_plus_percentage"]
ExecutionType = Literal["fill_at_last", "fill_at_last_with_slippage"]


class BrokerConfig(BaseModel):
    """Executing broker configuration."""
    charges: ChargesType = Field(default="none", description="Charges strategy")
    fixed_amount: float = Field(default=0.0, description="Fixed charge per trade")
    percentage: float = Field(default=0.0, ge=0.0, description="Charge as a fraction of trade value")
    charges_currency: Optional[str] = Field(default=None, description="Currency charges are paid in")
    execution: ExecutionType = Field(default="fill_at_last", description="Execution strategy")
    slippage: float = Field(default=0.0, ge=0.0, description="Slippage as a fraction of trade value")

    @field_validator("charges", "execution", mode="before")
    @classmethod
    def normalize_choice(cls, value: str) -> str:
        return str(value).strip().lower()

    @field_validator("charges_currency")
    @classmethod
    def validate_charges_currency(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return validate_currency(value)

    @model_validator(mode="after")
    def validate_charges(self) -> "BrokerConfig":
        if self.charges == "fixed_plus_percentage" and self.charges_currency is None:
            raise ValueError("charges_currency is required for fixed_plus_percentage charges")
        return self


class PortfolioConfig(BaseModel):
    """Portfolio to create at the start of a run."""
    code: str = Field(..., min_length=1, description="Portfolio code")
    base_currency: str = Field(..., description="Reporting currency")
    initial_cash: Dict[str, float] = Field(default_factory=dict, description="Opening cash by currency")

    @field_validator("base_currency")
    @classmethod
    def validate_base_currency(cls, value: str) -> str:
        return validate_currency(value)

    @field_validator("initial_cash")
    @classmethod
    def validate_cash_currencies(cls, value: Dict[str, float]) -> Dict[str, float]:
        return {validate_currency(currency): amount for currency, amount in value.items()}


class BacktestConfig(BaseModel):
    """Backtest execution configuration."""
    show_progress: bool = Field(default=True, description="Show a progress bar while running")


class OutputConfig(BaseModel):
    """Output configuration."""
    history_csv: Optional[str] = Field(default="results/history.csv", description="History CSV path")


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: str = Field(default="INFO", description="Logging level")
    format: str = Field(default="%(asctime)s - %(name)s - %(levelname)s - %(message)s", description="Log format")
    file: Optional[str] = Field(default=None, description="Log file path")


class AppConfig(BaseModel):
    """Main application configuration."""
    broker: BrokerConfig = Field(default_factory=BrokerConfig)
    portfolios: List[PortfolioConfig] = Field(default_factory=list)
    backtest: BacktestConfig = Field(default_factory=BacktestConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @model_validator(mode="after")
    def validate_unique_codes(self) -> "AppConfig":
        codes = [p.code.strip().upper() for p in self.portfolios]
        if len(codes) != len(set(codes)):
            raise ValueError("portfolio codes must be unique")
        return self

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return self.model_dump(mode='python')

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> 'AppConfig':
        """Create from dictionary."""
        return cls(**config_dict)
