"""KSA Billing Engine - event types and payload builders."""

from __future__ import annotations

from typing import Optional

from core.primitives.money import format_amount
from engines.billing.records import BookingRecord

BILLING_BOOKING_CANCELLED_V1 = "billing.booking.cancelled.v1"
BILLING_BOOKING_STORNOED_V1 = "billing.booking.stornoed.v1"
BILLING_INVOICE_ISSUED_V1 = "billing.invoice.issued.v1"
BILLING_DOCUMENT_NUMBERS_BACKFILLED_V1 = "billing.document_numbers.backfilled.v1"

BILLING_EVENT_TYPES = (
    BILLING_BOOKING_CANCELLED_V1,
    BILLING_BOOKING_STORNOED_V1,
    BILLING_INVOICE_ISSUED_V1,
    BILLING_DOCUMENT_NUMBERS_BACKFILLED_V1,
)


def _iso(value) -> Optional[str]:
    return None if value is None else value.isoformat()


def _amount(value) -> Optional[str]:
    return None if value is None else format_amount(value)


def _base_payload(booking: BookingRecord) -> dict:
    return {
        "booking_id": booking.booking_id,
        "owner_id": booking.owner_id,
        "offer_id": booking.offer_id,
        "currency": booking.currency,
    }


def build_booking_cancelled_payload(booking: BookingRecord) -> dict:
    payload = _base_payload(booking)
    payload.update({
        "cancellation_number": booking.cancellation_number,
        "cancellation_date": _iso(booking.cancellation_date),
        "cancel_reason": booking.cancel_reason or "",
        "invoice_number": booking.invoice_number,
    })
    return payload


def build_booking_stornoed_payload(booking: BookingRecord, reference_invoice_no: str) -> dict:
    payload = _base_payload(booking)
    payload.update({
        "storno_number": booking.storno_number,
        "storno_date": _iso(booking.storno_date),
        "storno_amount": _amount(booking.storno_amount),
        "reference_invoice_no": reference_invoice_no,
        "offer_title": booking.offer_title,
    })
    return payload


def build_invoice_issued_payload(booking: BookingRecord) -> dict:
    payload = _base_payload(booking)
    payload.update({
        "invoice_number": booking.invoice_number,
        "invoice_date": _iso(booking.invoice_date),
        "start_date": _iso(booking.start_date),
        "price_at_booking": _amount(booking.price_at_booking),
        "monthly_amount": _amount(booking.monthly_amount),
        "first_month_amount": _amount(booking.first_month_amount),
    })
    return payload


def build_document_numbers_backfilled_payload(booking: BookingRecord, assigned: tuple) -> dict:
    payload = _base_payload(booking)
    payload.update({
        "assigned": list(assigned),
        "invoice_number": booking.invoice_number,
        "cancellation_number": booking.cancellation_number,
        "storno_number": booking.storno_number,
    })
    return payload
