"""Formatting utilities for currency and text display."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union

from ....config import CURRENCY_SYMBOL

Amount = Union[Decimal, float, int]

_CENTS = Decimal("0.01")


def _quantize(amount: Amount) -> Decimal:
    value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
    return value.quantize(_CENTS, rounding=ROUND_HALF_UP)


def format_currency(amount: Optional[Amount], include_sign: bool = True, symbol: Optional[str] = None) -> str:
    """Format a currency amount with two decimals and thousands separators.

    Args:
        amount: The amount to format; ``None`` renders as an empty string
        include_sign: Whether to include the currency symbol
        symbol: Override for the configured currency symbol

    Returns:
        Formatted currency string (e.g., "RM 1,234.56" or "1,234.56")

    Example:
        >>> format_currency(Decimal("1234.5"))
        'RM 1,234.50'
        >>> format_currency(-20, include_sign=False)
        '-20.00'
    """
    if amount is None:
        return ''
    value = _quantize(amount)
    formatted = f"{abs(value):,.2f}"
    prefix = '-' if value < 0 else ''
    if not include_sign:
        return f"{prefix}{formatted}"
    return f"{prefix}{symbol or CURRENCY_SYMBOL} {formatted}"


def format_variance(variance: Optional[Amount]) -> str:
    """Format a planned-minus-actual variance with an explicit sign.

    Example:
        >>> format_variance(Decimal("50"))
        '+50.00'
    """
    if variance is None:
        return ''
    value = _quantize(variance)
    return f"{value:+,.2f}"
