"""
KSA Billing Engine — Booking and Offer Records
=================================================
Frozen DTOs the billing and reporting engines compute on, plus the
ingestion step that builds them from raw collaborator dicts.

Raw rows come from several generations of the booking store and spell
the same field differently (invoiceNumber / invoiceNo, cancelDate /
cancellationDate, ...). Every spelling is resolved HERE, once, through
the alias tables below: first non-empty alias wins. Engine code only
ever sees canonical field names.

RULES:
- Unparseable dates and amounts become None; ingestion never raises on them
- Amounts are Decimal rounded half-up to 0.01 and must be >= 0
- Currency is upper-case, default from BillingConfig
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Mapping, Optional, Tuple

from core.primitives.money import DEFAULT_CURRENCY, normalize_currency, round2
from core.time.temporal import to_date

BOOKING_ACTIVE = "active"
BOOKING_CANCELLED = "cancelled"
BOOKING_PENDING = "pending"
BOOKING_COMPLETED = "completed"

VALID_BOOKING_STATUSES = frozenset({
    BOOKING_ACTIVE,
    BOOKING_CANCELLED,
    BOOKING_PENDING,
    BOOKING_COMPLETED,
})


# ══════════════════════════════════════════════════════════════
# ALIAS TABLES (canonical field → raw keys, priority order)
# ══════════════════════════════════════════════════════════════

OFFER_ALIASES: Dict[str, Tuple[str, ...]] = {
    "offer_id": ("id", "_id", "offerId", "offer_id"),
    "owner_id": ("owner", "ownerId", "owner_id"),
    "category": ("category",),
    "type": ("legacy_type", "type"),
    "sub_type": ("sub_type", "subType"),
    "price": ("price",),
    "location": ("location",),
    "title": ("title",),
    "code": ("code",),
}

BOOKING_ALIASES: Dict[str, Tuple[str, ...]] = {
    "booking_id": ("id", "_id", "bookingId", "booking_id"),
    "offer_id": ("offerId", "offer_id"),
    "owner_id": ("ownerId", "owner_id", "owner"),
    "start_date": ("startDate", "start_date", "date"),
    "end_date": ("endDate", "end_date"),
    "status": ("status",),
    "price_at_booking": ("priceAtBooking", "price_at_booking"),
    "monthly_amount": ("monthlyAmount", "priceMonthly", "monthly_amount"),
    "first_month_amount": (
        "invoiceAmount",
        "priceFirstMonth",
        "firstMonthAmount",
        "first_month_amount",
    ),
    "currency": ("currency",),
    "invoice_number": ("invoiceNumber", "invoice_number", "invoiceNo"),
    "invoice_date": ("invoiceDate", "invoice_date"),
    "cancellation_number": ("cancellationNumber", "cancellation_number", "cancellationNo"),
    "cancellation_date": ("cancellationDate", "cancellation_date", "cancelDate"),
    "cancel_reason": ("cancelReason", "cancel_reason", "cancellationReason"),
    "storno_number": ("stornoNumber", "storno_number", "stornoNo"),
    "storno_date": ("stornoDate", "storno_date"),
    "storno_amount": ("stornoAmount", "storno_amount"),
    "offer_type": ("offerType", "offer_type"),
    "offer_title": ("offerTitle", "offer_title"),
    "customer_name": ("customerName", "customer_name"),
}


def _is_empty(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def resolve_alias(raw: Mapping[str, Any], aliases: Tuple[str, ...]) -> Any:
    """First non-empty value among aliases, or None. Zero counts as a value."""
    for key in aliases:
        value = raw.get(key)
        if not _is_empty(value):
            return value
    return None


def _text(value: Any) -> Optional[str]:
    if _is_empty(value):
        return None
    return str(value).strip()


def _check_amount(field_name: str, value: Optional[Decimal]) -> None:
    if value is not None and value < 0:
        raise ValueError(f"{field_name} must be >= 0, got {value}.")


# ══════════════════════════════════════════════════════════════
# OFFER
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class OfferRecord:
    """
    A bookable course offer.

    type is the legacy type (legacy_type wins over type on ingestion);
    category is the current classification source.
    """

    offer_id: str
    owner_id: Optional[str] = None
    category: Optional[str] = None
    type: Optional[str] = None
    sub_type: Optional[str] = None
    price: Optional[Decimal] = None
    location: Optional[str] = None
    title: Optional[str] = None
    code: Optional[str] = None

    def __post_init__(self):
        if not self.offer_id or not isinstance(self.offer_id, str):
            raise ValueError("offer_id must be a non-empty string.")
        _check_amount("price", self.price)


def normalize_offer(raw: Mapping[str, Any]) -> OfferRecord:
    def pick(name: str) -> Any:
        return resolve_alias(raw, OFFER_ALIASES[name])

    return OfferRecord(
        offer_id=_text(pick("offer_id")) or "",
        owner_id=_text(pick("owner_id")),
        category=_text(pick("category")),
        type=_text(pick("type")),
        sub_type=_text(pick("sub_type")),
        price=round2(pick("price")),
        location=_text(pick("location")),
        title=_text(pick("title")),
        code=_text(pick("code")),
    )


# ══════════════════════════════════════════════════════════════
# BOOKING
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class BookingRecord:
    """
    One booking of one offer by one customer of one tenant.

    Immutable: BookingLifecycle returns a new record per transition
    (with_changes), it never edits one in place.
    """

    booking_id: str
    offer_id: Optional[str] = None
    owner_id: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: str = BOOKING_ACTIVE
    price_at_booking: Optional[Decimal] = None
    monthly_amount: Optional[Decimal] = None
    first_month_amount: Optional[Decimal] = None
    currency: str = DEFAULT_CURRENCY
    invoice_number: Optional[str] = None
    invoice_date: Optional[date] = None
    cancellation_number: Optional[str] = None
    cancellation_date: Optional[date] = None
    cancel_reason: Optional[str] = None
    storno_number: Optional[str] = None
    storno_date: Optional[date] = None
    storno_amount: Optional[Decimal] = None
    offer_type: Optional[str] = None
    offer_title: Optional[str] = None
    customer_name: Optional[str] = None

    def __post_init__(self):
        if not self.booking_id or not isinstance(self.booking_id, str):
            raise ValueError("booking_id must be a non-empty string.")
        if self.status not in VALID_BOOKING_STATUSES:
            raise ValueError(
                f"status '{self.status}' not valid. "
                f"Must be one of: {sorted(VALID_BOOKING_STATUSES)}"
            )
        if not self.currency or len(self.currency) != 3:
            raise ValueError("currency must be a 3-letter ISO 4217 code.")
        _check_amount("price_at_booking", self.price_at_booking)
        _check_amount("monthly_amount", self.monthly_amount)
        _check_amount("first_month_amount", self.first_month_amount)
        _check_amount("storno_amount", self.storno_amount)

    @property
    def monthly_candidate(self) -> Optional[Decimal]:
        """Recurring monthly price: monthly_amount, else price_at_booking."""
        if self.monthly_amount is not None:
            return self.monthly_amount
        return self.price_at_booking

    def with_changes(self, **changes: Any) -> "BookingRecord":
        return replace(self, **changes)

    def to_dict(self) -> dict:
        """Canonical JSON-ready dict (ISO dates, amounts as strings)."""
        result: Dict[str, Any] = {}
        for name in self.__dataclass_fields__:
            value = getattr(self, name)
            if isinstance(value, date):
                value = value.isoformat()
            elif isinstance(value, Decimal):
                value = str(value)
            result[name] = value
        return result


def normalize_booking(
    raw: Mapping[str, Any],
    *,
    default_currency: str = DEFAULT_CURRENCY,
) -> BookingRecord:
    """Build a BookingRecord from a raw row in any legacy spelling."""

    def pick(name: str) -> Any:
        return resolve_alias(raw, BOOKING_ALIASES[name])

    status = (_text(pick("status")) or BOOKING_ACTIVE).lower()

    return BookingRecord(
        booking_id=_text(pick("booking_id")) or "",
        offer_id=_text(pick("offer_id")),
        owner_id=_text(pick("owner_id")),
        start_date=to_date(pick("start_date")),
        end_date=to_date(pick("end_date")),
        status=status,
        price_at_booking=round2(pick("price_at_booking")),
        monthly_amount=round2(pick("monthly_amount")),
        first_month_amount=round2(pick("first_month_amount")),
        currency=normalize_currency(pick("currency"), default_currency),
        invoice_number=_text(pick("invoice_number")),
        invoice_date=to_date(pick("invoice_date")),
        cancellation_number=_text(pick("cancellation_number")),
        cancellation_date=to_date(pick("cancellation_date")),
        cancel_reason=_text(pick("cancel_reason")),
        storno_number=_text(pick("storno_number")),
        storno_date=to_date(pick("storno_date")),
        storno_amount=round2(pick("storno_amount")),
        offer_type=_text(pick("offer_type")),
        offer_title=_text(pick("offer_title")),
        customer_name=_text(pick("customer_name")),
    )
