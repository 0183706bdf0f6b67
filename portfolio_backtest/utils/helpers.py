# portfolio_backtest/utils/helpers.py
"""
Small string and number helpers.
"""


def clean_string(value: str) -> str:
    """Trim whitespace and upper-case."""
    return value.strip().upper()


def clean_code(code: str) -> str:
    """Format a code for use in column headers, e.g. 'zzb au' -> 'ZZB_AU'."""
    return code.upper().replace(" ", "_")


def sgn(value: float) -> float:
    """Sign of a number as -1.0, 0.0 or 1.0."""
    if value > 0:
        return 1.0
    if value < 0:
        return -1.0
    return 0.0
