"""
Tests for scripts/backfill_document_numbers.py (in-memory counter only).
"""

import json
from datetime import datetime, timezone

from core.config.billing import BillingConfig
from core.sequences import InMemoryKeyedCounter, SequenceAllocator
from core.time.clock import FixedClock
from engines.billing.services import BookingLifecycle
from scripts.backfill_document_numbers import backfill_rows


def make_lifecycle(counter):
    tokens = iter(["AAAAAA", "BBBBBB", "CCCCCC"])
    return BookingLifecycle(
        allocator=SequenceAllocator(counter),
        clock=FixedClock(datetime(2025, 3, 5, tzinfo=timezone.utc)),
        config=BillingConfig(),
        entropy=lambda length: next(tokens)[:length],
    )


EXPORT = {
    "offers": [
        {"_id": "o1", "legacy_type": "Foerdertraining", "category": "Weekly", "price": 80},
        {"_id": "o2", "type": "Camp", "subType": "Powertraining", "price": 199},
    ],
    "bookings": [
        {"_id": "b1", "offerId": "o1", "startDate": "2024-09-01", "status": "cancelled", "cancelDate": "2024-11-15"},
        {"_id": "b2", "offerId": "o2", "invoiceDate": "2025-02-01T10:00:00Z"},
        {"_id": "b3", "offerId": "o1", "invoiceNo": "FO-24-0007", "stornoDate": "2024-12-01"},
    ],
}


class TestBackfillRows:
    def test_assigns_and_summarizes(self):
        counter = InMemoryKeyedCounter()
        result = backfill_rows(EXPORT, make_lifecycle(counter))

        assert result["summary"] == {"bookings": 3, "invoice": 2, "invoice_date": 1, "cancellation": 1, "storno": 1}
        b1, b2, b3 = result["bookings"]
        assert b1["invoice_number"] == "FO-24-0001"
        assert b1["invoice_date"] == "2024-09-01"
        assert b1["cancellation_number"] == "KND-AAAAAA"
        assert b2["invoice_number"] == "PW-25-0001"
        assert b2["invoice_date"] == "2025-02-01"
        assert b3["invoice_number"] == "FO-24-0007"
        assert b3["invoice_date"] == "2025-03-05"
        assert b3["storno_number"] == "STORNO-BBBBBB"
        assert counter.peek("invoice:FO:2024") == 1

    def test_plain_list_without_offers(self):
        result = backfill_rows([{"id": "b9", "date": "2025-01-10"}], make_lifecycle(InMemoryKeyedCounter()))
        assert result["bookings"][0]["invoice_number"] == "INV-25-0001"

    def test_output_is_json_serializable(self):
        result = backfill_rows(EXPORT, make_lifecycle(InMemoryKeyedCounter()))
        assert json.loads(json.dumps(result))["summary"]["bookings"] == 3
