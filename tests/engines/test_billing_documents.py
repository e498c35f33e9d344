"""
Tests for engines.billing.schedule and engines.billing.documents.
"""

from datetime import date
from decimal import Decimal

import pytest

from engines.billing.documents import (
    DOC_CANCELLATION,
    DOC_PARTICIPATION,
    DOC_STORNO,
    MAX_LIMIT,
    clamp,
    documents_for_booking,
    list_documents,
    parse_sort,
    parse_types,
)
from engines.billing.records import BookingRecord, OfferRecord
from engines.billing.schedule import (
    CHARGE_FIRST_MONTH,
    CHARGE_RECURRING,
    billing_schedule,
)


def booking(booking_id="b1", **fields):
    return BookingRecord(booking_id=booking_id, **fields)


# ── Schedule ─────────────────────────────────────────────────

class TestBillingSchedule:
    def test_prorated_first_month_then_recurring(self):
        charges = billing_schedule(booking(start_date=date(2025, 1, 20), monthly_amount=Decimal("100.00")))

        assert [c.kind for c in charges] == [CHARGE_FIRST_MONTH, CHARGE_RECURRING]
        assert charges[0].due_date == date(2025, 1, 20)
        assert charges[0].amount == Decimal("38.71")
        assert charges[1].due_date == date(2025, 2, 1)
        assert charges[1].amount == Decimal("100.00")

    def test_stored_first_month_wins(self):
        charges = billing_schedule(booking(
            start_date=date(2025, 1, 20),
            monthly_amount=Decimal("100.00"),
            first_month_amount=Decimal("40.00"),
        ))
        assert charges[0].amount == Decimal("40.00")

    def test_offer_price_as_monthly(self):
        offer = OfferRecord(offer_id="o1", category="Weekly", price=Decimal("80.00"))
        charges = billing_schedule(booking(start_date=date(2025, 12, 17)), offer)
        assert charges[0].amount == Decimal("38.71")
        assert charges[1].due_date == date(2026, 1, 1)

    def test_to_dict(self):
        charge = billing_schedule(booking(start_date=date(2025, 3, 1), monthly_amount=Decimal("80")))[0]
        assert charge.to_dict() == {
            "kind": CHARGE_FIRST_MONTH,
            "due_date": "2025-03-01",
            "amount": "80.00",
            "currency": "EUR",
        }

    @pytest.mark.parametrize("fields", [
        {"monthly_amount": Decimal("80.00")},
        {"start_date": date(2025, 3, 1)},
    ])
    def test_empty_without_start_or_price(self, fields):
        assert billing_schedule(booking(**fields)) == ()


# ── Documents of one booking ─────────────────────────────────

class TestDocumentsForBooking:
    def test_no_documents_for_plain_booking(self):
        assert documents_for_booking(booking(start_date=date(2025, 3, 1))) == ()

    def test_participation_confirmation(self):
        (doc,) = documents_for_booking(booking(
            invoice_number="FO-25-0001",
            start_date=date(2025, 3, 5),
            price_at_booking=Decimal("80.00"),
            offer_title="Fußball Förder",
        ))
        assert doc.type == DOC_PARTICIPATION
        assert doc.document_id == "inv:b1"
        assert doc.issued_at == date(2025, 3, 5)
        assert doc.title == "Fußball Förder - Participation confirmation"
        assert doc.amount == Decimal("80.00")

    def test_cancelled_status_alone_yields_cancellation(self):
        docs = documents_for_booking(booking(status="cancelled"))
        assert [d.type for d in docs] == [DOC_CANCELLATION]
        assert docs[0].number is None
        assert docs[0].title == "Booking - Cancellation confirmation"

    def test_storno_falls_back_to_cancellation_date(self):
        docs = documents_for_booking(booking(
            invoice_number="FO-25-0001",
            invoice_date=date(2025, 3, 5),
            status="cancelled",
            cancellation_number="KND-925B67",
            cancellation_date=date(2025, 4, 1),
            storno_number="STORNO-925CF4",
            storno_amount=Decimal("80.00"),
            offer_type="Foerdertraining",
        ))
        assert [d.type for d in docs] == [DOC_PARTICIPATION, DOC_CANCELLATION, DOC_STORNO]
        storno = docs[2]
        assert storno.document_id == "sto:b1"
        assert storno.issued_at == date(2025, 4, 1)
        assert storno.title == "Foerdertraining - Storno invoice"
        assert storno.to_dict()["amount"] == "80.00"


# ── Listing ──────────────────────────────────────────────────

def _bookings():
    return [
        booking(
            "b1",
            invoice_number="FO-25-0001",
            invoice_date=date(2025, 1, 10),
            customer_name="Anna Keller",
            offer_title="Fußball Förder",
        ),
        booking(
            "b2",
            invoice_number="PW-25-0002",
            invoice_date=date(2025, 2, 10),
            status="cancelled",
            cancellation_number="KND-AAAAAA",
            cancellation_date=date(2025, 3, 1),
            customer_name="Ben Roth",
            offer_title="Powertraining",
        ),
        booking("b3", status="cancelled", customer_name="Cara Vogt"),
    ]


class TestListDocuments:
    def test_default_sort_newest_first_undated_last(self):
        result = list_documents(_bookings())
        assert result.total == 4
        assert [d.document_id for d in result.items] == ["can:b2", "inv:b2", "inv:b1", "can:b3"]

    def test_ascending_sort(self):
        result = list_documents(_bookings(), sort="issued_at:asc")
        assert [d.document_id for d in result.items] == ["can:b3", "inv:b1", "inv:b2", "can:b2"]

    def test_type_filter(self):
        result = list_documents(_bookings(), types="cancellation")
        assert {d.booking_id for d in result.items} == {"b2", "b3"}

    def test_query_matches_customer_and_number(self):
        assert list_documents(_bookings(), query="anna").total == 1
        assert list_documents(_bookings(), query="knd-aaaaaa").items[0].document_id == "can:b2"

    def test_date_range_inclusive_keeps_undated(self):
        result = list_documents(_bookings(), date_from="2025-02-10", date_to="2025-03-01")
        assert {d.document_id for d in result.items} == {"inv:b2", "can:b2", "can:b3"}

    def test_paging(self):
        result = list_documents(_bookings(), sort="booking_id:asc", page=2, limit=2)
        assert result.total == 4
        assert result.page == 2
        assert [d.booking_id for d in result.items] == ["b2", "b3"]

    def test_to_dict(self):
        data = list_documents(_bookings(), limit=1).to_dict()
        assert data["total"] == 4
        assert data["limit"] == 1
        assert data["items"][0]["id"] == "can:b2"


class TestListingHelpers:
    def test_clamp(self):
        assert clamp("5", 1, 10) == 5
        assert clamp(0, 1, 10) == 1
        assert clamp(10_000, 1, MAX_LIMIT) == MAX_LIMIT
        assert clamp("abc", 1, 10) == 1

    def test_parse_sort(self):
        assert parse_sort(None) == ("issued_at", True)
        assert parse_sort("number:asc") == ("number", False)
        assert parse_sort("bogus:asc") == ("issued_at", False)
        assert parse_sort("amount") == ("amount", True)

    def test_parse_types(self):
        assert parse_types("storno, participation") == {DOC_STORNO, DOC_PARTICIPATION}
        assert parse_types("") == {DOC_PARTICIPATION, DOC_CANCELLATION, DOC_STORNO}
        assert parse_types(["CANCELLATION"]) == {DOC_CANCELLATION}
