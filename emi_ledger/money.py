"""Fixed-point currency helpers.

Money is carried as ``Decimal`` quantized to two places. Nothing in the
ledger converts amounts to ``float``.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_money(value: Decimal | int | str) -> Decimal:
    """Quantize a value to currency precision (half-up).

    Floats are refused because their binary representation already carries
    drift by the time they reach the ledger.
    """
    if isinstance(value, float):
        raise TypeError("to_money: pass Decimal, int or str, not float")
    try:
        amount = Decimal(value)
    except InvalidOperation:
        raise ValueError(f"to_money: not a number: {value!r}") from None
    if not amount.is_finite():
        raise ValueError(f"to_money: not a finite amount: {value!r}")
    try:
        return amount.quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        # Cents would need more digits than the decimal context carries
        raise ValueError(f"to_money: amount too large: {value!r}") from None


def to_minor_units(amount: Decimal) -> int:
    """Convert an amount to an integer count of minor units (paise, cents)."""
    return int(to_money(amount) * 100)


def from_minor_units(minor: int) -> Decimal:
    return (Decimal(minor) / 100).quantize(CENT)


def monthly_rate(annual_rate_percent: Decimal) -> Decimal:
    """Monthly rate as a fraction, unrounded (12% -> 0.01)."""
    return Decimal(annual_rate_percent) / Decimal(100) / Decimal(12)
