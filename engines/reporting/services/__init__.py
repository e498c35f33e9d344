"""
KSA Reporting Engine — Revenue Report Service
================================================
Loads one tenant's bookings and offers from a BookingRepository and runs
the requested recognition mode over them.

This service is READ ONLY:
- Reports are computed from stored records, nothing is written back
- Multi-tenant: every read is keyed by owner_id
- Year defaults to the injected clock's current year
"""

from __future__ import annotations

import logging
from typing import Optional

from core.time.clock import Clock, today
from engines.reporting.recognition import (
    MODE_CASH,
    RECOGNIZERS,
    VALID_MODES,
    RevenueReport,
)
from engines.reporting.repository import BookingRepository

logger = logging.getLogger("ksa.reporting")


class RevenueReportingService:
    def __init__(self, *, repository: BookingRepository, clock: Clock | None = None):
        self._repository = repository
        self._clock = clock

    def build_report(
        self,
        owner_id: str,
        *,
        year: Optional[int] = None,
        mode: str = MODE_CASH,
        debug: bool = False,
    ) -> RevenueReport:
        if mode not in VALID_MODES:
            raise ValueError(f"mode '{mode}' not valid. Must be one of: {sorted(VALID_MODES)}")
        if not owner_id or not str(owner_id).strip():
            raise ValueError("owner_id must be non-empty.")
        if year is None:
            year = today(self._clock).year
        if not isinstance(year, int) or isinstance(year, bool) or year < 1:
            raise ValueError("year must be int >= 1.")

        bookings = self._repository.list_bookings(owner_id)
        offers = self._repository.get_offers(
            {booking.offer_id for booking in bookings if booking.offer_id},
            owner_id=owner_id,
        )
        report = RECOGNIZERS[mode](bookings, offers, year, debug=debug)
        logger.info(
            f"Revenue report owner={owner_id} year={year} mode={mode}: "
            f"total={report.total} from {len(bookings)} booking(s)"
        )
        return report
