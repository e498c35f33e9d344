"""
KSA Core Time — Calendar Helpers
==================================
Pure functions for calendar-month arithmetic used by proration and
revenue recognition. All functions take explicit arguments; no hidden
clock access.

Booking dates arrive from collaborators as date, datetime or ISO text.
They are reduced to calendar dates (the booking's local day) before any
month arithmetic.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Iterator, Optional


# ══════════════════════════════════════════════════════════════
# PARSING
# ══════════════════════════════════════════════════════════════

def to_date(value: Any) -> Optional[date]:
    """
    Reduce date / datetime / ISO string to a calendar date.

    Strings are read by their leading YYYY-MM-DD part, so both
    "2025-03-05" and "2025-03-05T00:00:00.000Z" give 5 March 2025.
    Unparseable input returns None.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if len(text) < 10:
            return None
        try:
            return date.fromisoformat(text[:10])
        except ValueError:
            return None
    return None


# ══════════════════════════════════════════════════════════════
# MONTH ARITHMETIC
# ══════════════════════════════════════════════════════════════

def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def month_start(day: date) -> date:
    return day.replace(day=1)


def month_end(day: date) -> date:
    return day.replace(day=days_in_month(day.year, day.month))


def next_month_start(day: date) -> date:
    if day.month == 12:
        return date(day.year + 1, 1, 1)
    return date(day.year, day.month + 1, 1)


def same_year_month(a: Any, b: Any) -> bool:
    """True when both values parse and fall into the same calendar month."""
    first = to_date(a)
    second = to_date(b)
    if first is None or second is None:
        return False
    return (first.year, first.month) == (second.year, second.month)


def month_index(value: Any) -> Optional[int]:
    """Zero-based month index (January = 0), None if unparseable."""
    day = to_date(value)
    return None if day is None else day.month - 1


def in_year(value: Any, year: int) -> bool:
    day = to_date(value)
    return day is not None and day.year == year


# ══════════════════════════════════════════════════════════════
# MONTH WINDOW (closed interval [first day, last day])
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class MonthWindow:
    """
    One calendar month as a closed date interval.

    Invariant: start is the 1st, end is the last day of the same month.
    """

    year: int
    month: int

    def __post_init__(self) -> None:
        if not 1 <= self.month <= 12:
            raise ValueError(f"month must be 1..12, got {self.month}.")

    @property
    def start(self) -> date:
        return date(self.year, self.month, 1)

    @property
    def end(self) -> date:
        return date(self.year, self.month, days_in_month(self.year, self.month))

    @property
    def index(self) -> int:
        return self.month - 1

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end

    def overlaps(self, start: date, end: date) -> bool:
        """Check overlap with the closed interval [start, end]."""
        return self.start <= end and start <= self.end


def months_of_year(year: int) -> Iterator[MonthWindow]:
    for month in range(1, 13):
        yield MonthWindow(year=year, month=month)
