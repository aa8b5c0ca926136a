"""
Fixed-point money helpers.

Amounts stay exact ``Decimal`` values through every computation and are
rounded to cents only here, when they leave the system for display or
the wire.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Union

CENT = Decimal("0.01")

Amount = Union[Decimal, int, str]


def to_decimal(value: Amount) -> Decimal:
    """Coerce ints and strings to Decimal; floats are rejected."""
    if isinstance(value, float):
        raise TypeError("monetary amounts must not be floats")
    return value if isinstance(value, Decimal) else Decimal(value)


def quantize_money(amount: Amount) -> Decimal:
    """Round to cents."""
    return to_decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)


def format_money(amount: Amount, symbol: str = "$") -> str:
    """Format an amount for display, e.g. ``$25.00``."""
    return f"{symbol}{quantize_money(amount):,.2f}"
