"""Ratio and rounding helpers shared by the report and attendance services.

All rates and averages are rounded to two decimals, half away from zero,
on the decimal representation of the value (0.125 -> 0.13, not 0.12).
A zero denominator always yields 0.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Union

Number = Union[int, float]

_TWO_PLACES = Decimal("0.01")


def round2(value: Number) -> float:
    """Round to 2 decimal places, half away from zero."""
    return float(Decimal(str(value)).quantize(_TWO_PLACES, rounding=ROUND_HALF_UP))


def percentage(part: int, whole: int) -> float:
    """part / whole * 100, rounded; 0 when whole is 0."""
    if not whole:
        return 0.0
    return round2(part * 100 / whole)


def average(values: Iterable[Number]) -> float:
    """Arithmetic mean, rounded; 0 for an empty input."""
    values = list(values)
    if not values:
        return 0.0
    return round2(sum(values) / len(values))
