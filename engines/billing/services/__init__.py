"""
KSA Billing Engine — Booking Lifecycle Service
=================================================
The only code that mutates a booking's commercial state.

Transitions:
    cancel         active → cancelled, cancellation number once
    storno         reverse an issued invoice, storno number once
    issue_invoice  invoice number + date once, price snapshots
    backfill       assign missing numbers on historic rows

Bookings are frozen; every transition returns a BillingTransitionResult
holding the new record, an event type and the payload downstream PDF and
e-mail collaborators render from. Persisting the record is the caller's
job. A rejected transition raises before any number is allocated.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, List, Optional

from core.config.billing import BillingConfig, get_billing_config
from core.documents.numbering import (
    EntropySource,
    format_cancellation_no,
    format_short,
    format_storno_no,
    normalize_invoice_no,
    random_hex,
    type_code_for_offer,
)
from core.primitives.money import round2
from core.sequences import SequenceAllocator, allocate_with_retry, invoice_key
from core.time.clock import Clock, today
from core.time.temporal import to_date
from engines.billing.classification import classify
from engines.billing.errors import InvalidTransition, MissingInvoiceReference
from engines.billing.events import (
    BILLING_BOOKING_CANCELLED_V1,
    BILLING_BOOKING_STORNOED_V1,
    BILLING_DOCUMENT_NUMBERS_BACKFILLED_V1,
    BILLING_INVOICE_ISSUED_V1,
    build_booking_cancelled_payload,
    build_booking_stornoed_payload,
    build_document_numbers_backfilled_payload,
    build_invoice_issued_payload,
)
from engines.billing.policies import (
    booking_must_be_cancellable_policy,
    resolve_reference_invoice_no,
    storno_amount_must_be_non_negative_policy,
    storno_requires_invoice_reference_policy,
)
from engines.billing.proration import first_month_price
from engines.billing.records import BOOKING_CANCELLED, BookingRecord, OfferRecord

logger = logging.getLogger("ksa.billing")


@dataclass(frozen=True)
class BillingTransitionResult:
    event_type: str
    booking: BookingRecord
    payload: dict
    changed: bool


def _explicit_date(value: Any, field_name: str) -> Optional[date]:
    if value is None:
        return None
    parsed = to_date(value)
    if parsed is None:
        raise ValueError(f"{field_name} must be a date, datetime or ISO date string, got {value!r}.")
    return parsed


class BookingLifecycle:
    def __init__(
        self,
        *,
        allocator: SequenceAllocator,
        clock: Clock | None = None,
        config: BillingConfig | None = None,
        entropy: EntropySource = random_hex,
    ):
        self._allocator = allocator
        self._clock = clock
        self._config = config or get_billing_config()
        self._entropy = entropy

    @property
    def config(self) -> BillingConfig:
        return self._config

    def _today(self) -> date:
        return today(self._clock)

    # ── type codes / sequences ────────────────────────────────

    def resolve_type_code(self, offer: Optional[OfferRecord]) -> str:
        if offer is None:
            return self._config.default_type_code
        if offer.code:
            return offer.code.strip().upper()
        return type_code_for_offer(
            offer,
            type_codes=self._config.type_codes,
            subtype_codes=self._config.subtype_codes,
        )

    def _next_invoice_number(self, offer: Optional[OfferRecord], issued_on: date) -> str:
        code = self.resolve_type_code(offer)
        seq = allocate_with_retry(
            self._allocator,
            invoice_key(code, issued_on.year),
            max_attempts=self._config.sequence_max_attempts,
        )
        return format_short(code, seq, issued_on)

    # ── cancel ────────────────────────────────────────────────

    def cancel(
        self,
        booking: BookingRecord,
        *,
        date: Any = None,
        reason: Optional[str] = None,
    ) -> BillingTransitionResult:
        rejection = booking_must_be_cancellable_policy(booking)
        if rejection is not None:
            logger.warning(rejection.message)
            raise InvalidTransition(booking.booking_id, booking.status, "cancel")

        if booking.status == BOOKING_CANCELLED:
            logger.info(f"Booking {booking.booking_id} already cancelled; nothing to do")
            return BillingTransitionResult(
                event_type=BILLING_BOOKING_CANCELLED_V1,
                booking=booking,
                payload=build_booking_cancelled_payload(booking),
                changed=False,
            )

        cancelled_on = _explicit_date(date, "date") or self._today()
        number = booking.cancellation_number or format_cancellation_no(self._entropy)
        updated = booking.with_changes(
            status=BOOKING_CANCELLED,
            cancellation_date=cancelled_on,
            cancel_reason=reason if reason is not None else "",
            cancellation_number=number,
        )
        logger.info(f"Cancelled booking {booking.booking_id} on {cancelled_on} as {number}")
        return BillingTransitionResult(
            event_type=BILLING_BOOKING_CANCELLED_V1,
            booking=updated,
            payload=build_booking_cancelled_payload(updated),
            changed=True,
        )

    # ── storno ────────────────────────────────────────────────

    def storno(
        self,
        booking: BookingRecord,
        *,
        offer: Optional[OfferRecord] = None,
        amount: Any = None,
        date: Any = None,
        reference_invoice_no: Optional[str] = None,
    ) -> BillingTransitionResult:
        rejection = storno_requires_invoice_reference_policy(booking, reference_invoice_no)
        if rejection is not None:
            logger.warning(rejection.message)
            raise MissingInvoiceReference(booking.booking_id)

        rejection = storno_amount_must_be_non_negative_policy(amount)
        if rejection is not None:
            raise ValueError(rejection.message)

        reference = resolve_reference_invoice_no(booking, reference_invoice_no)
        storno_on = _explicit_date(date, "date") or booking.storno_date or self._today()

        if amount is not None:
            storno_amount = round2(amount)
        elif booking.storno_amount is not None:
            storno_amount = booking.storno_amount
        elif booking.price_at_booking is not None:
            storno_amount = booking.price_at_booking
        elif offer is not None and offer.price is not None:
            storno_amount = offer.price
        else:
            storno_amount = None

        updated = booking.with_changes(
            storno_date=storno_on,
            storno_number=booking.storno_number or format_storno_no(self._entropy),
            storno_amount=storno_amount,
            offer_title=booking.offer_title or (offer.title if offer is not None else None),
            offer_type=booking.offer_type or (offer.type if offer is not None else None),
        )
        changed = updated != booking
        if changed:
            logger.info(
                f"Storno {updated.storno_number} for booking {booking.booking_id} "
                f"(ref {reference}, amount {storno_amount})"
            )
        return BillingTransitionResult(
            event_type=BILLING_BOOKING_STORNOED_V1,
            booking=updated,
            payload=build_booking_stornoed_payload(updated, reference),
            changed=changed,
        )

    # ── invoice ───────────────────────────────────────────────

    def issue_invoice(
        self,
        booking: BookingRecord,
        offer: Optional[OfferRecord] = None,
        *,
        invoice_no: Optional[str] = None,
        invoice_date: Any = None,
    ) -> BillingTransitionResult:
        if booking.invoice_number:
            return BillingTransitionResult(
                event_type=BILLING_INVOICE_ISSUED_V1,
                booking=booking,
                payload=build_invoice_issued_payload(booking),
                changed=False,
            )

        now = self._today()
        issued_on = _explicit_date(invoice_date, "invoice_date") or now

        supplied = normalize_invoice_no(invoice_no)
        number = supplied or self._next_invoice_number(offer, now)

        changes: dict = {"invoice_number": number, "invoice_date": issued_on}
        if offer is not None:
            if booking.price_at_booking is None:
                changes["price_at_booking"] = offer.price
            if not booking.offer_title:
                changes["offer_title"] = offer.title
            if not booking.offer_type:
                changes["offer_type"] = offer.type
            if classify(offer, booking).recurring:
                monthly = booking.monthly_amount if booking.monthly_amount is not None else offer.price
                changes["monthly_amount"] = monthly
                if booking.first_month_amount is None:
                    changes["first_month_amount"] = first_month_price(booking.start_date, monthly)

        updated = booking.with_changes(**changes)
        logger.info(
            f"Issued invoice {number} for booking {booking.booking_id} "
            f"({'client-supplied' if supplied else 'allocated'})"
        )
        return BillingTransitionResult(
            event_type=BILLING_INVOICE_ISSUED_V1,
            booking=updated,
            payload=build_invoice_issued_payload(updated),
            changed=True,
        )

    # ── backfill ──────────────────────────────────────────────

    def backfill_document_numbers(
        self,
        booking: BookingRecord,
        offer: Optional[OfferRecord] = None,
    ) -> BillingTransitionResult:
        """
        Assign numbers a historic booking should already carry.

        Invoice: keyed by the year of invoice_date, else start_date, else
        today; the date is filled in when missing. A numbered invoice
        without a date is dated start_date, else today. Cancellation and
        storno numbers only where the matching date exists.
        """
        changes: dict = {}
        assigned: List[str] = []

        if not booking.invoice_number:
            issued_on = booking.invoice_date or booking.start_date or self._today()
            changes["invoice_number"] = self._next_invoice_number(offer, issued_on)
            changes["invoice_date"] = issued_on
            assigned.append("invoice")
        elif booking.invoice_date is None:
            changes["invoice_date"] = booking.start_date or self._today()
            assigned.append("invoice_date")

        if booking.cancellation_date is not None and not booking.cancellation_number:
            changes["cancellation_number"] = format_cancellation_no(self._entropy)
            assigned.append("cancellation")

        if booking.storno_date is not None and not booking.storno_number:
            changes["storno_number"] = format_storno_no(self._entropy)
            assigned.append("storno")

        updated = booking.with_changes(**changes) if changes else booking
        if assigned:
            logger.info(f"Backfilled {', '.join(assigned)} number(s) on booking {booking.booking_id}")
        return BillingTransitionResult(
            event_type=BILLING_DOCUMENT_NUMBERS_BACKFILLED_V1,
            booking=updated,
            payload=build_document_numbers_backfilled_payload(updated, tuple(assigned)),
            changed=bool(assigned),
        )
