"""
Assign missing invoice / cancellation / storno numbers to historic bookings.

Reads a JSON export, writes the normalized bookings back out as JSON.
Invoice numbers come from the Django counter table unless --dry-run is
given, in which case an in-memory counter starting at zero is used and
nothing is persisted.

Input: either a list of raw booking rows, or
    {"offers": [...], "bookings": [...]}

Usage:
    python scripts/backfill_document_numbers.py export.json
    python scripts/backfill_document_numbers.py export.json --out fixed.json
    python scripts/backfill_document_numbers.py export.json --dry-run
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from typing import Any

logger = logging.getLogger("ksa.billing.backfill")


def backfill_rows(data: Any, lifecycle) -> dict:
    """Run BookingLifecycle.backfill_document_numbers over every booking row."""
    from engines.billing.records import normalize_booking, normalize_offer

    if isinstance(data, list):
        raw_offers, raw_bookings = [], data
    else:
        raw_offers = data.get("offers") or []
        raw_bookings = data.get("bookings") or []

    currency = lifecycle.config.default_currency
    offers = {offer.offer_id: offer for offer in (normalize_offer(row) for row in raw_offers)}

    bookings_out = []
    summary = {"bookings": 0, "invoice": 0, "invoice_date": 0, "cancellation": 0, "storno": 0}
    for row in raw_bookings:
        booking = normalize_booking(row, default_currency=currency)
        offer = offers.get(booking.offer_id) if booking.offer_id else None
        result = lifecycle.backfill_document_numbers(booking, offer)
        for kind in result.payload["assigned"]:
            summary[kind] += 1
        summary["bookings"] += 1
        bookings_out.append(result.booking.to_dict())

    return {"bookings": bookings_out, "summary": summary}


def _build_lifecycle(dry_run: bool):
    from core.sequences import DbKeyedCounter, InMemoryKeyedCounter, SequenceAllocator
    from engines.billing.services import BookingLifecycle

    counter = InMemoryKeyedCounter() if dry_run else DbKeyedCounter()
    return BookingLifecycle(allocator=SequenceAllocator(counter))


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("source", help="JSON export of bookings (and optionally offers)")
    parser.add_argument("--out", help="write result here instead of stdout")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="allocate from an in-memory counter; nothing is persisted",
    )
    args = parser.parse_args()

    os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")
    import django

    django.setup()

    with open(args.source, encoding="utf-8") as handle:
        data = json.load(handle)

    result = backfill_rows(data, _build_lifecycle(args.dry_run))
    logger.info(f"Backfill done (dry_run={args.dry_run}): {result['summary']}")

    encoded = json.dumps(result, indent=2, sort_keys=True)
    if args.out:
        with open(args.out, "w", encoding="utf-8") as handle:
            handle.write(encoded + "\n")
    else:
        sys.stdout.write(encoded + "\n")


if __name__ == "__main__":
    main()
