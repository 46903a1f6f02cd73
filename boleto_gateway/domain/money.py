"""Conversion between major currency units (reais) and cents at the protocol boundary"""

from decimal import Decimal, ROUND_HALF_UP

CENT = Decimal("0.01")


def to_decimal(value: Decimal | float | int | str) -> Decimal:
    """Coerce a currency amount to Decimal without binary float artifacts"""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def major_to_cents(value: Decimal | float | int | str) -> int:
    """
    Convert a face value in reais to integer cents.

    Rounds half-up to the nearest cent: 60.505 -> 6051, 60.50 -> 6050.
    """
    cents = (to_decimal(value) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return int(cents)


def cents_to_major(cents: int) -> Decimal:
    """Convert integer cents back to a two-decimal Decimal amount"""
    return (Decimal(cents) / 100).quantize(CENT)


def quantize_major(value: Decimal | float | int | str) -> Decimal:
    """Normalize a face value to two decimal places"""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)
