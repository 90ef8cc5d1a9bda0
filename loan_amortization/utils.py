"""Utility functions for the amortization engine.

This module provides helpers for parsing user input into Python data types,
for calendar month arithmetic and for rounding monetary amounts. Month offsets
are computed with Python's ``calendar`` module so that due dates follow the
calendar rather than fixed day counts.
"""

from __future__ import annotations

import calendar
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from . import config

CENTS = Decimal(config.MONEY_QUANTUM)


def parse_date(value: str) -> date:
    """Parse a ``YYYY-MM-DD`` (or ``YYYY-MM``) string into a ``date``.

    A bare year-month is normalized to the first day of the month.

    Raises
    ------
    ValueError
        If the string is not a valid date.
    """
    try:
        parts = value.strip().split("-")
        if len(parts) == 2:
            return date(int(parts[0]), int(parts[1]), 1)
        if len(parts) == 3:
            return date(int(parts[0]), int(parts[1]), int(parts[2]))
    except (AttributeError, ValueError) as exc:
        raise ValueError(f"Invalid date string: {value}") from exc
    raise ValueError(f"Invalid date string: {value}")


def add_months(dt: date, months: int) -> date:
    """Return a new date a number of months after ``dt``.

    The day of the month is clamped to the last valid day if needed (e.g.,
    adding one month to Jan 31 yields Feb 28 or 29).
    """
    year = dt.year + (dt.month - 1 + months) // 12
    month = (dt.month - 1 + months) % 12 + 1
    day = min(dt.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def to_decimal(value: Any) -> Decimal:
    """Convert a user-supplied number into a ``Decimal``.

    Strings may contain thousands separators (``"10,000"``) and a trailing
    percent sign. Floats go through ``str`` so ``0.1`` stays ``0.1``.
    Booleans are rejected even though they are ``int`` subclasses, and so are
    NaN and infinities whatever their type.
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid numeric value: {value!r}")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float)):
        result = Decimal(str(value))
    elif isinstance(value, str):
        cleaned = value.strip().replace(",", "").replace("_", "")
        if cleaned.endswith("%"):
            cleaned = cleaned[:-1].strip()
        try:
            result = Decimal(cleaned)
        except InvalidOperation as exc:
            raise ValueError(f"Invalid numeric value: {value!r}") from exc
    else:
        raise ValueError(f"Invalid numeric value: {value!r}")
    if not result.is_finite():
        raise ValueError(f"Invalid numeric value: {value!r}")
    return result


def round_money(value: Decimal) -> Decimal:
    """Round to cents, half away from zero."""
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def ceil_div(numerator: int, denominator: int) -> int:
    return -(-numerator // denominator)
