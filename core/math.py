# PATH: core/math.py
"""
Math utilities for HAWK.

Safe Decimal conversions (no float money, no float risk scores).
"""

from decimal import Decimal, InvalidOperation
from typing import Union, Optional

from core.constants import ADA_DECIMALS


def safe_decimal(value: Union[str, int, float, Decimal, None], default: Decimal = Decimal("0")) -> Decimal:
    """
    Safely convert value to Decimal.

    Floats go through str() so 0.3 stays 0.3 rather than its binary
    expansion.

    Args:
        value: Value to convert
        default: Default if conversion fails

    Returns:
        Decimal value
    """
    if value is None:
        return default

    try:
        if isinstance(value, Decimal):
            return value
        return Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        return default


def safe_int(value: Union[str, int, None], default: int = 0) -> int:
    """Convert an on-chain quantity (usually a numeric string) to int."""
    if value is None:
        return default
    try:
        return int(value)
    except (ValueError, TypeError):
        return default


def normalize_to_decimals(
    amount: Union[str, int, Decimal],
    decimals: int,
) -> Decimal:
    """
    Normalize amount to token decimals (smallest unit to token units).

    Args:
        amount: Amount in smallest unit
        decimals: Token decimals

    Returns:
        Normalized amount
    """
    amt = safe_decimal(amount)
    divisor = Decimal(10) ** decimals
    return amt / divisor


def lovelace_to_ada(lovelace: Union[str, int, Decimal]) -> Decimal:
    """Convert lovelace to ADA."""
    return normalize_to_decimals(lovelace, ADA_DECIMALS)


def quantity_ratio(amount_a: int, amount_b: int) -> Optional[Decimal]:
    """
    Ratio of the larger to the smaller raw quantity.

    Returns None when the smaller side is zero (the ratio is unbounded).
    """
    larger = max(amount_a, amount_b)
    smaller = min(amount_a, amount_b)
    if smaller <= 0:
        return None
    return Decimal(larger) / Decimal(smaller)
