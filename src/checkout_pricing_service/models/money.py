"""Fixed-point currency helpers.

All monetary amounts are Decimals with two fraction digits. Percentages stay in
the 0-100 range until they are applied.
"""

from decimal import ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")
ZERO = Decimal("0.00")
HUNDRED = Decimal("100")


def to_money(value: Decimal | int | float | str) -> Decimal:
    """Quantize a value to whole cents, rounding half up.

    Floats are converted through ``str`` so that ``0.1`` becomes ``Decimal("0.1")``
    rather than its binary expansion.
    """
    if isinstance(value, float):
        value = str(value)
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def apply_percentage(amount: Decimal, percentage: Decimal) -> Decimal:
    """Return ``amount * percentage / 100`` rounded to cents."""
    return to_money(amount * percentage / HUNDRED)
