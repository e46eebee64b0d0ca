"""Utility functions for the mortgage simulator.

This module provides helpers for parsing and validating ``YYYY-MM`` period
keys, for walking calendar months and for converting user input into
``Decimal`` amounts rounded to the currency's minor unit. It uses Python's
``datetime`` and ``calendar`` modules for month arithmetic.
"""

from __future__ import annotations

import calendar
import re
from datetime import date
from decimal import ROUND_HALF_EVEN, Decimal, InvalidOperation, getcontext
from typing import Iterator, Type

from .errors import InvalidPeriod

getcontext().prec = 28  # increase decimal precision to avoid rounding errors

PERIOD_KEY_RE = re.compile(r"^\d{4}-\d{2}$")
CENT = Decimal("0.01")
ZERO = Decimal("0")


def parse_period_key(key: str, error: Type[InvalidPeriod] = InvalidPeriod) -> date:
    """Parse a ``YYYY-MM`` period key into a ``date`` (first day of month).

    Parameters
    ----------
    key: str
        A string in the exact form ``"YYYY-MM"``.
    error: type
        The exception class raised on failure. Scenario input uses
        ``InvalidPeriodKey`` so callers can tell bad scenarios from bad
        requests.

    Raises
    ------
    InvalidPeriod
        If the string is not a valid calendar year-month.
    """
    text = key.strip() if isinstance(key, str) else ""
    if not PERIOD_KEY_RE.match(text):
        raise error(key)
    year, month = int(text[:4]), int(text[5:])
    if year < 1 or not 1 <= month <= 12:
        raise error(key)
    return date(year, month, 1)


def normalize_period_key(key: str, error: Type[InvalidPeriod] = InvalidPeriod) -> str:
    """Validate ``key`` and return it in canonical ``YYYY-MM`` form.

    Keys read from callers go through here before they are stored, since the
    engine matches periods by exact string.
    """
    return format_period_key(parse_period_key(key, error))


def format_period_key(dt: date) -> str:
    return f"{dt.year:04d}-{dt.month:02d}"


def add_months(dt: date, months: int) -> date:
    """Return a new date a number of months after ``dt``.

    The day of the month is clamped to the last valid day if needed (e.g.,
    adding one month to Jan 31 yields Feb 28 or 29).
    """
    year = dt.year + (dt.month - 1 + months) // 12
    month = (dt.month - 1 + months) % 12 + 1
    day = min(dt.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def months_between(start: str, end: str) -> int:
    """Number of whole months from ``start`` to ``end`` (negative if earlier)."""
    a = parse_period_key(start)
    b = parse_period_key(end)
    return (b.year - a.year) * 12 + (b.month - a.month)


def iter_periods(start: str, count: int) -> Iterator[str]:
    """Yield ``count`` contiguous period keys beginning at ``start``."""
    first = parse_period_key(start)
    for i in range(count):
        yield format_period_key(add_months(first, i))


def round_money(value: Decimal) -> Decimal:
    """Round to the minor unit (cents) using round-half-to-even."""
    return value.quantize(CENT, rounding=ROUND_HALF_EVEN)


def decimal_from_str(value: object) -> Decimal:
    """Convert a numeric string (or number) into a ``Decimal``.

    The function strips any commas and handles both integer and float-like
    input. Floats go through ``str`` so ``0.1`` stays ``Decimal("0.1")``. It
    raises ``ValueError`` if conversion fails.
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise ValueError(f"Invalid numeric value: {value}")
    try:
        cleaned = str(value).replace(",", "").strip()
        result = Decimal(cleaned)
    except (InvalidOperation, TypeError) as exc:
        raise ValueError(f"Invalid numeric value: {value}") from exc
    if not result.is_finite():
        raise ValueError(f"Invalid numeric value: {value}")
    return result
