"""Derived mission figures computed from plain field values."""

from __future__ import annotations

from datetime import date
from decimal import Decimal, ROUND_HALF_UP

from missionhub.utils.money import AmountLike, ZERO, to_decimal


def progress_percent(current_amount: AmountLike, goal_amount: AmountLike) -> int:
    """Whole percentage of ``goal_amount`` reached, capped at 100 (0 for a zero goal)."""

    goal = to_decimal(goal_amount)
    if goal <= ZERO:
        return 0
    ratio = to_decimal(current_amount) / goal * Decimal(100)
    return min(100, int(ratio.quantize(Decimal("1"), rounding=ROUND_HALF_UP)))


def remaining_amount(current_amount: AmountLike, goal_amount: AmountLike) -> Decimal:
    """Amount still required to reach the goal, never negative."""

    remainder = to_decimal(goal_amount) - to_decimal(current_amount)
    return remainder if remainder > ZERO else ZERO


def days_remaining(due_date: date | None, today: date) -> int:
    """Days left until ``due_date``; 0 once it has passed or when there is none."""

    if due_date is None:
        return 0
    return max(0, (due_date - today).days)


def overall_progress(total_current: AmountLike, total_goal: AmountLike) -> int:
    """Progress across several missions; same rounding and cap as :func:`progress_percent`."""

    return progress_percent(total_current, total_goal)
