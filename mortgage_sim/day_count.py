"""Day-count calculation for monthly interest accrual."""

from __future__ import annotations

import calendar
from dataclasses import dataclass

from .utils import parse_period_key


@dataclass(frozen=True)
class DayCount:
    days: int
    day_basis: int


def day_count(period_key: str, day_basis: int) -> DayCount:
    """Return the accrual days for ``period_key`` against ``day_basis``.

    The day count is the number of calendar days in the month, so February
    gives 28 or 29 and interest is ``balance * rate/100 * days/day_basis``.

    Raises
    ------
    InvalidPeriod
        If ``period_key`` is not a valid ``YYYY-MM`` key.
    ValueError
        If ``day_basis`` is not a positive integer.
    """
    start = parse_period_key(period_key)
    if isinstance(day_basis, bool) or not isinstance(day_basis, int) or day_basis <= 0:
        raise ValueError(f"Day basis must be a positive integer; got {day_basis!r}")
    return DayCount(days=calendar.monthrange(start.year, start.month)[1], day_basis=day_basis)
