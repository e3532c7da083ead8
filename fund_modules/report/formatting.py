"""Scalar formatting for report XML: amounts and Wareki dates."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any

from fund_modules.report.amounts import round_half_up

# (era start, era prefix, offset subtracted from the Gregorian year)
_ERAS: tuple[tuple[date, str, int], ...] = (
    (date(2019, 5, 1), "R", 2018),
    (date(1989, 1, 8), "H", 1988),
    (date(1926, 12, 25), "S", 1925),
)


def format_amount(value: int | float | Decimal | None) -> str:
    """Plain decimal integer string; "0" for None and non-finite values."""
    return str(round_half_up(value))


def format_wareki_date(value: Any) -> str:
    """
    Format a date as ``{era}{year}/{month}/{day}`` without zero padding.

    ``date(2025, 1, 15)`` becomes ``"R7/1/15"``. Dates before Showa fall
    back to ``{year}/{month}/{day}``. Anything that is not a date yields "".
    """
    if isinstance(value, datetime):
        value = value.date()
    if not isinstance(value, date):
        return ""
    for start, era, offset in _ERAS:
        if value >= start:
            return f"{era}{value.year - offset}/{value.month}/{value.day}"
    return f"{value.year}/{value.month}/{value.day}"
