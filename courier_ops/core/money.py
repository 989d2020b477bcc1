# courier_ops/core/money.py

"""
Minor-unit -> display currency conversion.

Fees and revenue arrive as integer minor units of the source currency and
are divided by a fixed constant before being shown as a two-decimal
display amount. The divisor is part of the reporting contract and is
not read from configuration.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Union

DISPLAY_CURRENCY_DIVISOR = 25000
DISPLAY_CURRENCY_SYMBOL = "$"

_CENT = Decimal("0.01")


def to_display_amount(minor_units: Optional[Union[int, float]]) -> Decimal:
    """Convert minor units to the display currency, rounded to cents."""
    if not minor_units:
        return Decimal("0.00")
    value = Decimal(str(minor_units)) / Decimal(DISPLAY_CURRENCY_DIVISOR)
    return value.quantize(_CENT, rounding=ROUND_HALF_UP)


def format_display_currency(minor_units: Optional[Union[int, float]]) -> str:
    """Format minor units as e.g. "$1,234.56"."""
    amount = to_display_amount(minor_units)
    sign = "-" if amount < 0 else ""
    return f"{sign}{DISPLAY_CURRENCY_SYMBOL}{abs(amount):,.2f}"
