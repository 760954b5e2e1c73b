"""Presentation helpers."""

from decimal import ROUND_HALF_UP, Decimal
from typing import Union


def format_currency(amount: Union[Decimal, int, str], symbol: str = "R") -> str:
    """
    Render an amount for display, e.g. ``-R1,234.50``.

    Args:
        amount: Amount to render; negative values get a leading minus
        symbol: Currency symbol placed before the digits

    Returns:
        Formatted string with two decimal places and thousands separators
    """
    value = Decimal(str(amount)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    return f"{sign}{symbol}{abs(value):,.2f}"
