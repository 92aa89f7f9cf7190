"""Numeric coercion for user-entered and imported values.

Invalid numeric input never raises: it becomes zero at the point of entry.
"""

import math
import sys
from collections.abc import Iterable
from typing import Any

from finmaster.domain.models import Money


def coerce_amount(value: Any) -> Money:
    """Coerce any input to a finite money amount.

    Accepts ints, floats, and numeric strings (a single decimal comma is
    accepted as in "12,50"). Anything else, including None, NaN and
    infinities, becomes 0.

    Args:
        value: Raw value.

    Returns:
        Finite float amount.
    """
    if value is None or isinstance(value, bool):
        return Money(0.0)

    if isinstance(value, str):
        text = value.strip()
        if text.count(",") == 1 and "." not in text:
            text = text.replace(",", ".")
        value = text

    try:
        number = float(value)
    except (TypeError, ValueError):
        return Money(0.0)

    if not math.isfinite(number):
        return Money(0.0)
    return Money(number)


def coerce_count(value: Any) -> int:
    """Coerce any input to an integer count (installments, year).

    Fractional values are truncated toward zero, like parseInt.
    """
    return int(coerce_amount(value))


def clamp_amount(value: float) -> Money:
    """Keep a computed amount finite.

    Sums of very large amounts can overflow to infinity; they are clamped to
    the largest finite float with the same sign. NaN becomes 0.
    """
    if math.isnan(value):
        return Money(0.0)
    if math.isinf(value):
        return Money(math.copysign(sys.float_info.max, value))
    return Money(value)


def sum_amounts(values: Iterable[float]) -> Money:
    """Sum amounts, clamping an overflowed result."""
    return clamp_amount(sum(values, 0.0))
