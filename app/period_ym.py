# app/period_ym.py
"""
Helpers for working with accounting periods.

Definitions
- month filter: "all" / None (full year) or a month 1..12 ("3", "03", 3)

Public API:
- previous_month(year, month) -> (year, month)
- month_bounds(year, month) -> (first_day, first_day_of_next_month)
- year_bounds(year) -> (jan_1, next_jan_1)
- parse_month_filter(value) -> int | None
- period_bounds(year, month_filter) -> (start, end)
"""

from __future__ import annotations

from datetime import date
from typing import Optional, Tuple, Union

__all__ = [
    "previous_month",
    "month_bounds",
    "year_bounds",
    "parse_month_filter",
    "period_bounds",
]


# ---------- Conversions ----------


def _check_month(month: int) -> None:
    if month < 1 or month > 12:
        raise ValueError("Month must be 01–12")


def previous_month(year: int, month: int) -> Tuple[int, int]:
    """
    Month before (year, month), rolling January back to December of year-1.
    Example: (2025, 1) -> (2024, 12).
    """
    _check_month(month)
    if month == 1:
        return year - 1, 12
    return year, month - 1


def next_month(year: int, month: int) -> Tuple[int, int]:
    _check_month(month)
    if month == 12:
        return year + 1, 1
    return year, month + 1


# ---------- Ranges ----------


def month_bounds(year: int, month: int) -> Tuple[date, date]:
    """
    Half-open date range [first day, first day of next month).
    Same rows as a 'YYYY-MM-%' prefix match on ISO dates.
    """
    ny, nm = next_month(year, month)
    return date(year, month, 1), date(ny, nm, 1)


def year_bounds(year: int) -> Tuple[date, date]:
    return date(year, 1, 1), date(year + 1, 1, 1)


def parse_month_filter(value: Union[str, int, None]) -> Optional[int]:
    """
    Normalize a month filter.
    - None, "" or "all" -> None (full year)
    - "3", "03", 3      -> 3
    """
    if value is None:
        return None
    if isinstance(value, int):
        _check_month(value)
        return value
    s = value.strip().lower()
    if s in ("", "all"):
        return None
    if not s.isdigit() or len(s) > 2:
        raise ValueError("month must be 'all' or 01–12")
    m = int(s)
    _check_month(m)
    return m


def period_bounds(year: int, month: Union[str, int, None] = None) -> Tuple[date, date]:
    """Date range for a dashboard filter: whole year or a single month."""
    m = parse_month_filter(month)
    if m is None:
        return year_bounds(year)
    return month_bounds(year, m)
