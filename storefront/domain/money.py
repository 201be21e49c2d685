"""
Decimal helpers shared by the models and the price resolver.
"""
import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional

CENTS = Decimal("100")

_CENT = Decimal("0.01")
_NUMBER = re.compile(r"(\d+\.?\d*)")


def round_money(amount: Decimal) -> Decimal:
    """Round an amount to whole cents, halves away from zero."""
    return Decimal(amount).quantize(_CENT, rounding=ROUND_HALF_UP)


def to_decimal(value) -> Optional[Decimal]:
    """Coerce a number or numeric string into a Decimal, or None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value
    try:
        text = str(value).strip()
        if not text:
            return None
        result = Decimal(text)
    except (InvalidOperation, ValueError):
        return None
    if not result.is_finite():
        return None
    return result


def parse_quantity(label) -> Optional[Decimal]:
    """
    Extract the first decimal number from an option label.

    "10 ft" gives 10, "6dBi" gives 6 and "N/A" gives None. Zero is not a
    usable quantity and also gives None.
    """
    if label is None:
        return None
    match = _NUMBER.search(str(label))
    if match is None:
        return None
    quantity = Decimal(match.group(1))
    return quantity if quantity > 0 else None
