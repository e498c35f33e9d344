"""
KSA Core Time — Public API
============================
Explicit clock protocol and calendar helpers.
Doctrine: NO datetime.now() in billing logic.
"""

from core.time.clock import (
    Clock,
    FixedClock,
    SystemClock,
    get_default_clock,
    now_utc,
    set_default_clock,
    today,
)
from core.time.temporal import (
    MonthWindow,
    days_in_month,
    in_year,
    month_end,
    month_index,
    month_start,
    months_of_year,
    next_month_start,
    same_year_month,
    to_date,
)

__all__ = [
    "Clock",
    "FixedClock",
    "SystemClock",
    "get_default_clock",
    "set_default_clock",
    "now_utc",
    "today",
    "MonthWindow",
    "days_in_month",
    "in_year",
    "month_end",
    "month_index",
    "month_start",
    "months_of_year",
    "next_month_start",
    "same_year_month",
    "to_date",
]
