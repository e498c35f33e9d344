"""
KSA Billing Engine — Issued Documents
========================================
Read-only view of the documents a booking has produced, for admin
listings and exports.

One booking yields up to three documents:
    participation   invoice number or invoice date present
    cancellation    cancellation number/date present, or status cancelled
    storno          storno number or storno date present

list_documents() filters (type set, free text, inclusive date range),
sorts and pages over all documents of a set of bookings.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Iterable, List, Optional, Tuple

from core.primitives.money import format_amount
from core.time.temporal import to_date
from engines.billing.records import BOOKING_CANCELLED, BookingRecord

DOC_PARTICIPATION = "participation"
DOC_CANCELLATION = "cancellation"
DOC_STORNO = "storno"

ALL_DOCUMENT_TYPES = (DOC_PARTICIPATION, DOC_CANCELLATION, DOC_STORNO)

SORT_FIELDS = frozenset({"issued_at", "type", "number", "booking_id", "title", "amount"})
DEFAULT_SORT = ("issued_at", True)

MAX_PAGE = 10_000
MAX_LIMIT = 200
DEFAULT_LIMIT = 50

_TITLE_SUFFIX = {
    DOC_PARTICIPATION: "Participation confirmation",
    DOC_CANCELLATION: "Cancellation confirmation",
    DOC_STORNO: "Storno invoice",
}


@dataclass(frozen=True)
class IssuedDocument:
    document_id: str
    booking_id: str
    type: str
    title: str
    number: Optional[str]
    issued_at: Optional[date]
    offer_title: Optional[str]
    offer_type: Optional[str]
    amount: Optional[Decimal]
    currency: str
    customer_name: Optional[str] = None

    def search_text(self) -> str:
        parts = (
            self.customer_name,
            self.title,
            self.offer_title,
            self.offer_type,
            self.booking_id,
            self.number,
        )
        return " ".join(part for part in parts if part).lower()

    def to_dict(self) -> dict:
        return {
            "id": self.document_id,
            "booking_id": self.booking_id,
            "type": self.type,
            "title": self.title,
            "number": self.number,
            "issued_at": None if self.issued_at is None else self.issued_at.isoformat(),
            "offer_title": self.offer_title,
            "offer_type": self.offer_type,
            "amount": None if self.amount is None else format_amount(self.amount),
            "currency": self.currency,
            "customer_name": self.customer_name,
        }


@dataclass(frozen=True)
class DocumentPage:
    items: Tuple[IssuedDocument, ...]
    total: int
    page: int
    limit: int

    def to_dict(self) -> dict:
        return {
            "items": [item.to_dict() for item in self.items],
            "total": self.total,
            "page": self.page,
            "limit": self.limit,
        }


def _document(
    booking: BookingRecord,
    doc_type: str,
    prefix: str,
    number: Optional[str],
    issued_at: Optional[date],
    amount: Optional[Decimal],
) -> IssuedDocument:
    base_title = booking.offer_title or booking.offer_type or "Booking"
    return IssuedDocument(
        document_id=f"{prefix}:{booking.booking_id}",
        booking_id=booking.booking_id,
        type=doc_type,
        title=f"{base_title} - {_TITLE_SUFFIX[doc_type]}",
        number=number,
        issued_at=issued_at,
        offer_title=booking.offer_title,
        offer_type=booking.offer_type,
        amount=amount,
        currency=booking.currency,
        customer_name=booking.customer_name,
    )


def documents_for_booking(booking: BookingRecord) -> Tuple[IssuedDocument, ...]:
    documents: List[IssuedDocument] = []

    if booking.invoice_number or booking.invoice_date:
        documents.append(_document(
            booking, DOC_PARTICIPATION, "inv",
            number=booking.invoice_number,
            issued_at=booking.invoice_date or booking.start_date,
            amount=booking.price_at_booking,
        ))

    if booking.cancellation_number or booking.cancellation_date or booking.status == BOOKING_CANCELLED:
        documents.append(_document(
            booking, DOC_CANCELLATION, "can",
            number=booking.cancellation_number,
            issued_at=booking.cancellation_date,
            amount=None,
        ))

    if booking.storno_number or booking.storno_date:
        documents.append(_document(
            booking, DOC_STORNO, "sto",
            number=booking.storno_number,
            issued_at=booking.storno_date or booking.cancellation_date,
            amount=booking.storno_amount,
        ))

    return tuple(documents)


# ══════════════════════════════════════════════════════════════
# LISTING
# ══════════════════════════════════════════════════════════════

def clamp(value: Any, low: int, high: int) -> int:
    """Integer clamp; non-numeric input falls back to low."""
    try:
        number = int(value)
    except (TypeError, ValueError):
        return low
    return max(low, min(high, number))


def parse_sort(sort: Optional[str]) -> Tuple[str, bool]:
    """"field:asc" / "field:desc" → (field, descending). Default issued_at desc."""
    if not sort:
        return DEFAULT_SORT
    field_name, _, direction = str(sort).partition(":")
    field_name = field_name.strip() or DEFAULT_SORT[0]
    if field_name not in SORT_FIELDS:
        field_name = DEFAULT_SORT[0]
    direction = direction.strip().lower()
    if direction == "asc":
        return field_name, False
    if direction == "desc":
        return field_name, True
    return field_name, DEFAULT_SORT[1]


def parse_types(types: Any) -> frozenset:
    """Comma string or iterable of type names; empty → all types."""
    if types is None:
        return frozenset(ALL_DOCUMENT_TYPES)
    if isinstance(types, str):
        types = types.split(",")
    selected = frozenset(str(t).strip().lower() for t in types if str(t).strip())
    return selected or frozenset(ALL_DOCUMENT_TYPES)


def list_documents(
    bookings: Iterable[BookingRecord],
    *,
    types: Any = None,
    query: Optional[str] = None,
    date_from: Any = None,
    date_to: Any = None,
    sort: Optional[str] = None,
    page: Any = 1,
    limit: Any = DEFAULT_LIMIT,
) -> DocumentPage:
    """
    Documents without an issue date are never excluded by the date
    range. date_from and date_to are both inclusive calendar days.
    """
    type_set = parse_types(types)
    needle = str(query or "").strip().lower()
    start = to_date(date_from)
    end = to_date(date_to)
    page = clamp(page, 1, MAX_PAGE)
    limit = clamp(limit, 1, MAX_LIMIT)

    matched: List[IssuedDocument] = []
    for booking in bookings:
        for document in documents_for_booking(booking):
            if document.type not in type_set:
                continue
            if needle and needle not in document.search_text():
                continue
            if document.issued_at is not None:
                if start is not None and document.issued_at < start:
                    continue
                if end is not None and document.issued_at > end:
                    continue
            matched.append(document)

    field_name, descending = parse_sort(sort)
    def sort_key(document: IssuedDocument):
        value = getattr(document, field_name)
        return (False, "") if value is None else (True, value)

    matched.sort(key=sort_key, reverse=descending)

    offset = (page - 1) * limit
    return DocumentPage(
        items=tuple(matched[offset:offset + limit]),
        total=len(matched),
        page=page,
        limit=limit,
    )
