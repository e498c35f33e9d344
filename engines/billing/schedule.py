"""
KSA Billing Engine — Subscription Billing Schedule
=====================================================
The two charges cut when a recurring booking starts: the prorated
first month, due on the start date, and the first full monthly charge,
due on the first day of the following month.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional, Tuple

from core.primitives.money import format_amount
from engines.billing.proration import first_month_price, next_period_start
from engines.billing.records import BookingRecord, OfferRecord

CHARGE_FIRST_MONTH = "first-month"
CHARGE_RECURRING = "recurring"


@dataclass(frozen=True)
class ScheduledCharge:
    kind: str
    due_date: date
    amount: Decimal
    currency: str

    def to_dict(self) -> dict:
        return {
            "kind": self.kind,
            "due_date": self.due_date.isoformat(),
            "amount": format_amount(self.amount),
            "currency": self.currency,
        }


def billing_schedule(
    booking: BookingRecord,
    offer: Optional[OfferRecord] = None,
) -> Tuple[ScheduledCharge, ...]:
    """Empty when the booking has no start date or no monthly price."""
    monthly = booking.monthly_amount
    if monthly is None and offer is not None:
        monthly = offer.price
    start = booking.start_date
    if start is None or monthly is None:
        return ()

    first = booking.first_month_amount
    if first is None:
        first = first_month_price(start, monthly)

    charges = []
    if first is not None:
        charges.append(ScheduledCharge(CHARGE_FIRST_MONTH, start, first, booking.currency))
    charges.append(ScheduledCharge(CHARGE_RECURRING, next_period_start(start), monthly, booking.currency))
    return tuple(charges)
