"""
KSA Billing Engine — First-Month Proration
=============================================
A subscription that starts mid-month pays only for the days left in
that month, start day included:

    days_remaining = days_in_month - start_day + 1
    factor         = clamp(days_remaining / days_in_month, 0, 1)
    first_month    = round2(monthly_price * factor)        (half-up)

Example: start 2025-01-20, monthly 100.00 → 12/31 → 38.71.

Missing or unparseable input yields None ("cannot prorate"), never
zero. Callers leave the first-month amount unset in that case.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Optional

from core.primitives.money import round2, to_decimal
from core.time.temporal import days_in_month, next_month_start, to_date


@dataclass(frozen=True)
class Proration:
    start_date: date
    days_in_month: int
    days_remaining: int
    factor: Decimal
    first_month_price: Decimal

    def to_dict(self) -> dict:
        return {
            "start_date": self.start_date.isoformat(),
            "days_in_month": self.days_in_month,
            "days_remaining": self.days_remaining,
            "factor": str(self.factor),
            "first_month_price": str(self.first_month_price),
        }


def prorate_for_start(start_date: Any, monthly_price: Any) -> Optional[Proration]:
    """Full breakdown of the first-month charge, or None if not computable."""
    start = to_date(start_date)
    monthly = to_decimal(monthly_price)
    if start is None or monthly is None:
        return None
    if monthly < 0:
        raise ValueError(f"monthly_price must be >= 0, got {monthly}.")

    total_days = days_in_month(start.year, start.month)
    remaining = max(0, total_days - start.day + 1)
    factor = min(Decimal(1), max(Decimal(0), Decimal(remaining) / Decimal(total_days)))

    return Proration(
        start_date=start,
        days_in_month=total_days,
        days_remaining=remaining,
        factor=factor,
        # divide last so exact half-cent products round half-up
        first_month_price=round2(monthly * remaining / total_days),
    )


def first_month_price(start_date: Any, monthly_price: Any) -> Optional[Decimal]:
    proration = prorate_for_start(start_date, monthly_price)
    return None if proration is None else proration.first_month_price


def next_period_start(start_date: Any) -> Optional[date]:
    """First day of the month after start_date's month."""
    start = to_date(start_date)
    return None if start is None else next_month_start(start)
