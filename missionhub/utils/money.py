"""Helpers for fixed-point currency amounts."""

from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Union

CENT = Decimal("0.01")
ZERO = Decimal("0.00")

AmountLike = Union[Decimal, int, float, str]


def to_decimal(value: AmountLike) -> Decimal:
    """Convert ``value`` to a :class:`~decimal.Decimal` with two decimal places."""

    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, bool):
        raise TypeError("Booleans are not amounts.")
    elif isinstance(value, (int, float)):
        # str() keeps floats like 0.1 from dragging binary noise along
        result = Decimal(str(value))
    elif isinstance(value, str):
        result = Decimal(value)
    else:
        raise TypeError(f"Unsupported amount type: {type(value)!r}")

    return result.quantize(CENT, rounding=ROUND_HALF_UP)


def sum_amounts(amounts: Iterable[AmountLike]) -> Decimal:
    """Exact sum of ``amounts``; an empty iterable sums to ``0.00``."""

    total = ZERO
    for amount in amounts:
        total += to_decimal(amount)
    return total
