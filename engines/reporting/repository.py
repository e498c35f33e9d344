"""
KSA Reporting Engine — Booking Repository
============================================
Read access to one tenant's bookings and the offers they reference.

Doctrine:
- Repository is a dependency injection point (testable, swappable).
- Raw rows are normalized on ingestion; reads return frozen records.
- Every read is scoped by owner (tenant isolation).
"""

from __future__ import annotations

import threading
from typing import Any, Dict, Iterable, List, Mapping, Optional, Protocol, Union

from core.primitives.money import DEFAULT_CURRENCY
from engines.billing.records import (
    BookingRecord,
    OfferRecord,
    normalize_booking,
    normalize_offer,
)


class BookingRepository(Protocol):
    def list_bookings(self, owner_id: str) -> List[BookingRecord]:
        """All bookings of one tenant, in insertion order."""
        ...

    def get_offers(
        self,
        offer_ids: Iterable[str],
        *,
        owner_id: Optional[str] = None,
    ) -> Dict[str, OfferRecord]:
        """
        Offers by id. With owner_id, offers owned by another tenant are
        left out; offers without an owner are visible to every tenant.
        """
        ...


class InMemoryBookingRepository:
    """Thread-safe in-memory repository for tests and batch tooling."""

    def __init__(self, *, default_currency: str = DEFAULT_CURRENCY):
        self._lock = threading.Lock()
        self._default_currency = default_currency
        self._bookings: Dict[str, BookingRecord] = {}
        self._offers: Dict[str, OfferRecord] = {}

    def add_offer(self, offer: Union[OfferRecord, Mapping[str, Any]]) -> OfferRecord:
        record = offer if isinstance(offer, OfferRecord) else normalize_offer(offer)
        with self._lock:
            self._offers[record.offer_id] = record
        return record

    def add_booking(
        self,
        booking: Union[BookingRecord, Mapping[str, Any]],
        *,
        owner_id: Optional[str] = None,
    ) -> BookingRecord:
        if isinstance(booking, BookingRecord):
            record = booking
        else:
            record = normalize_booking(booking, default_currency=self._default_currency)
        if owner_id is not None:
            record = record.with_changes(owner_id=str(owner_id))
        if not record.owner_id:
            raise ValueError(f"Booking '{record.booking_id}' has no owner.")
        with self._lock:
            self._bookings[record.booking_id] = record
        return record

    def save_booking(self, booking: BookingRecord) -> None:
        """Replace the stored record with the result of a transition."""
        with self._lock:
            stored = self._bookings.get(booking.booking_id)
            if stored is None:
                raise KeyError(f"Booking '{booking.booking_id}' not found.")
            if stored.owner_id != booking.owner_id:
                raise ValueError(f"Booking '{booking.booking_id}' cannot change owner.")
            self._bookings[booking.booking_id] = booking

    def get_booking(self, owner_id: str, booking_id: str) -> Optional[BookingRecord]:
        with self._lock:
            record = self._bookings.get(booking_id)
        if record is None or record.owner_id != str(owner_id):
            return None
        return record

    def list_bookings(self, owner_id: str) -> List[BookingRecord]:
        owner = str(owner_id)
        with self._lock:
            return [record for record in self._bookings.values() if record.owner_id == owner]

    def get_offers(
        self,
        offer_ids: Iterable[str],
        *,
        owner_id: Optional[str] = None,
    ) -> Dict[str, OfferRecord]:
        wanted = {str(offer_id) for offer_id in offer_ids if offer_id}
        with self._lock:
            found = {oid: self._offers[oid] for oid in wanted if oid in self._offers}
        if owner_id is None:
            return found
        owner = str(owner_id)
        return {
            oid: offer for oid, offer in found.items()
            if offer.owner_id is None or offer.owner_id == owner
        }
