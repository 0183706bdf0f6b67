# portfolio_backtest/models/currency.py
"""
Currency code and currency pair validation.
"""

from typing import Tuple

from ..errors import InvalidCurrencyError, InvalidPairError
from ..utils.helpers import clean_string


def validate_currency(code: str) -> str:
    """
    Clean and validate a currency code.

    Args:
        code: Currency code, e.g. ' aud '

    Returns:
        Cleaned code, e.g. 'AUD'

    Raises:
        InvalidCurrencyError: If the cleaned code is not three characters
    """
    code = clean_string(code)
    if len(code) != 3:
        raise InvalidCurrencyError(f"'{code}' is not a valid currency code")
    return code


def validate_pair(pair: str) -> str:
    """
    Clean and validate a currency pair such as 'AUDUSD'.

    Raises:
        InvalidPairError: If the cleaned pair is not six characters
    """
    pair = clean_string(pair)
    if len(pair) != 6:
        raise InvalidPairError(f"expecting a six character currency pair, got '{pair}'")
    return pair


def split_pair(pair: str) -> Tuple[str, str]:
    """Split a pair into its two currency codes."""
    pair = validate_pair(pair)
    return pair[:3], pair[3:]


def is_equivalent_pair(pair: str) -> bool:
    """True where both sides are the same currency, e.g. 'USDUSD'."""
    ccy1, ccy2 = split_pair(pair)
    return ccy1 == ccy2


def get_inverse_pair(pair: str) -> str:
    """'AUDUSD' -> 'USDAUD'."""
    ccy1, ccy2 = split_pair(pair)
    return ccy2 + ccy1
