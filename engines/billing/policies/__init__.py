"""KSA Billing Engine - booking lifecycle policies."""

from __future__ import annotations

from typing import Any, Optional

from core.commands.rejection import ReasonCode, RejectionReason
from core.primitives.money import to_decimal
from engines.billing.records import BOOKING_ACTIVE, BOOKING_CANCELLED, BookingRecord

CANCELLABLE_STATUSES = frozenset({BOOKING_ACTIVE, BOOKING_CANCELLED})


def booking_must_be_cancellable_policy(booking: BookingRecord) -> RejectionReason | None:
    if booking.status not in CANCELLABLE_STATUSES:
        return RejectionReason(
            code=ReasonCode.INVALID_STATUS_TRANSITION,
            message=f"Booking '{booking.booking_id}' in status '{booking.status}' cannot be cancelled.",
            policy_name="booking_must_be_cancellable_policy",
        )
    return None


def resolve_reference_invoice_no(
    booking: BookingRecord,
    reference_invoice_no: Optional[str] = None,
) -> str:
    """Client-supplied reference first, then the booking's own invoice number."""
    explicit = str(reference_invoice_no or "").strip()
    return explicit or (booking.invoice_number or "")


def storno_requires_invoice_reference_policy(
    booking: BookingRecord,
    reference_invoice_no: Optional[str] = None,
) -> RejectionReason | None:
    if not resolve_reference_invoice_no(booking, reference_invoice_no):
        return RejectionReason(
            code=ReasonCode.MISSING_INVOICE,
            message=f"Booking '{booking.booking_id}' has no invoice to reverse.",
            policy_name="storno_requires_invoice_reference_policy",
        )
    return None


def storno_amount_must_be_non_negative_policy(amount: Any) -> RejectionReason | None:
    if amount is None:
        return None
    value = to_decimal(amount)
    if value is None or value < 0:
        return RejectionReason(
            code=ReasonCode.NEGATIVE_AMOUNT,
            message=f"storno amount must be a number >= 0, got {amount!r}.",
            policy_name="storno_amount_must_be_non_negative_policy",
        )
    return None
