"""
KSA Reporting Engine — Revenue Recognition
=============================================
Turns one tenant's bookings into a twelve-month revenue series for one
calendar year. Two recognition modes:

CASH (cash basis, "IST")
    Revenue lands in the month an invoice is issued; a storno or
    cancellation takes it back in the month it happens.

ACCRUAL (accrual basis)
    Weekly subscriptions only. Every month the subscription is active
    earns its amount (prorated first month, then the monthly amount)
    until the month of storno, cancellation or end (whichever comes
    first); a storno or cancellation debits its month once.

Amount candidates for recurring bookings:
    first    = first_month_amount, else prorated from monthly + start date
    monthly  = monthly_amount, else price_at_booking
One-off bookings use price_at_booking, else offer price, else 0.

RULES:
- Read-only: bookings and offers are never modified here
- Zero amounts are neither booked nor counted
- total == round2(sum(monthly)) always
- One bad row never aborts a report; it is skipped (and traced when
  debug is on)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from core.primitives.money import ZERO, round2, round2_or_zero, sum2
from core.time.temporal import (
    in_year,
    month_end,
    month_index,
    months_of_year,
    same_year_month,
)
from engines.billing.classification import classify
from engines.billing.proration import first_month_price
from engines.billing.records import BookingRecord, OfferRecord

logger = logging.getLogger("ksa.reporting")

MODE_CASH = "cash"
MODE_ACCRUAL = "accrual"
VALID_MODES = frozenset({MODE_CASH, MODE_ACCRUAL})

MONTHS = 12

SOURCE_FIRST = "first"
SOURCE_COMPUTED_FIRST = "computedFirst"
SOURCE_MONTHLY = "monthly"
SOURCE_ONE_OFF = "oneOff"
SOURCE_EXPLICIT = "explicit"


def _number(value: Optional[Decimal]) -> Optional[float]:
    return None if value is None else float(value)


def _iso(value: Optional[date]) -> Optional[str]:
    return None if value is None else value.isoformat()


# ══════════════════════════════════════════════════════════════
# REPORT
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class RevenueReport:
    year: int
    mode: str
    monthly: Tuple[Decimal, ...]
    positive_counts: Tuple[int, ...]
    negative_counts: Tuple[int, ...]
    debug_lines: Optional[Tuple[dict, ...]] = None

    def __post_init__(self):
        if self.mode not in VALID_MODES:
            raise ValueError(f"mode '{self.mode}' not valid. Must be one of: {sorted(VALID_MODES)}")
        for name in ("monthly", "positive_counts", "negative_counts"):
            if len(getattr(self, name)) != MONTHS:
                raise ValueError(f"{name} must have {MONTHS} entries.")

    @property
    def total(self) -> Decimal:
        return sum2(self.monthly)

    def to_dict(self) -> dict:
        result = {
            "year": self.year,
            "mode": self.mode,
            "total": float(self.total),
            "monthly": [float(amount) for amount in self.monthly],
            "counts": {
                "positive": list(self.positive_counts),
                "negative": list(self.negative_counts),
            },
        }
        if self.debug_lines is not None:
            result["debug"] = {"lines": [dict(line) for line in self.debug_lines]}
        return result


class _MonthlyLedger:
    """Twelve running monthly sums with posting counts."""

    def __init__(self, year: int, mode: str, debug: bool):
        self._year = year
        self._mode = mode
        self._monthly: List[Decimal] = [ZERO] * MONTHS
        self._positive = [0] * MONTHS
        self._negative = [0] * MONTHS
        self._lines: Optional[List[dict]] = [] if debug else None

    @property
    def mode(self) -> str:
        return self._mode

    @property
    def debug(self) -> bool:
        return self._lines is not None

    def credit(self, month: int, amount: Decimal) -> bool:
        if not amount:
            return False
        self._monthly[month] = round2(self._monthly[month] + amount)
        self._positive[month] += 1
        return True

    def debit(self, month: int, amount: Decimal) -> bool:
        if not amount:
            return False
        self._monthly[month] = round2(self._monthly[month] - amount)
        self._negative[month] += 1
        return True

    def trace(self, line: dict) -> None:
        if self._lines is not None:
            self._lines.append(line)

    def report(self) -> RevenueReport:
        return RevenueReport(
            year=self._year,
            mode=self._mode,
            monthly=tuple(self._monthly),
            positive_counts=tuple(self._positive),
            negative_counts=tuple(self._negative),
            debug_lines=None if self._lines is None else tuple(self._lines),
        )


# ══════════════════════════════════════════════════════════════
# AMOUNT CANDIDATES
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class RecurringAmounts:
    first_candidate: Optional[Decimal]
    monthly_candidate: Optional[Decimal]
    computed_first: Optional[Decimal]

    @property
    def first(self) -> Optional[Decimal]:
        if self.first_candidate is not None:
            return self.first_candidate
        return self.computed_first

    @property
    def first_source(self) -> str:
        return SOURCE_FIRST if self.first_candidate is not None else SOURCE_COMPUTED_FIRST

    @property
    def monthly(self) -> Optional[Decimal]:
        return self.monthly_candidate


def recurring_amounts(booking: BookingRecord) -> RecurringAmounts:
    first = booking.first_month_amount
    monthly = booking.monthly_candidate
    computed = None
    if first is None and monthly is not None and booking.start_date is not None:
        computed = first_month_price(booking.start_date, monthly)
    return RecurringAmounts(first_candidate=first, monthly_candidate=monthly, computed_first=computed)


def one_off_price(booking: BookingRecord, offer: Optional[OfferRecord]) -> Decimal:
    if booking.price_at_booking is not None:
        return booking.price_at_booking
    if offer is not None and offer.price is not None:
        return offer.price
    return ZERO


def _skip(ledger: _MonthlyLedger, booking: BookingRecord, reason: str, **extra: Any) -> None:
    logger.debug(f"Skipping booking {booking.booking_id} in {ledger.mode} report: {reason}")
    line = {"type": "SKIP", "booking_id": booking.booking_id, "reason": reason}
    line.update(extra)
    ledger.trace(line)


# ══════════════════════════════════════════════════════════════
# CASH BASIS
# ══════════════════════════════════════════════════════════════

def _is_cash_candidate(booking: BookingRecord, year: int) -> bool:
    return (
        in_year(booking.invoice_date, year)
        or in_year(booking.storno_date, year)
        or in_year(booking.cancellation_date, year)
    )


def _cash_row(
    ledger: _MonthlyLedger,
    booking: BookingRecord,
    offer: Optional[OfferRecord],
    year: int,
) -> None:
    classification = classify(offer, booking)
    recurring = classification.recurring
    amounts = recurring_amounts(booking) if recurring else None
    one_off = None if recurring else one_off_price(booking, offer)
    start = booking.start_date

    # ── positive: invoice month ───────────────────────────────
    add, add_month, add_source = ZERO, None, None
    if in_year(booking.invoice_date, year):
        month = month_index(booking.invoice_date)
        if recurring:
            if start is not None and same_year_month(booking.invoice_date, start) and amounts.first is not None:
                add, add_source = amounts.first, amounts.first_source
            else:
                add, add_source = round2_or_zero(amounts.monthly), SOURCE_MONTHLY
                if not add and amounts.first is not None:
                    add, add_source = amounts.first, amounts.first_source
        else:
            add, add_source = one_off, SOURCE_ONE_OFF
        if ledger.credit(month, add):
            add_month = month

    # ── negative: storno, else cancellation ───────────────────
    is_storno = booking.storno_date is not None
    negative_date = booking.storno_date or booking.cancellation_date
    sub, sub_month, sub_mode = ZERO, None, None
    if in_year(negative_date, year):
        month = month_index(negative_date)
        if is_storno and booking.storno_amount is not None:
            sub, sub_mode = booking.storno_amount, SOURCE_EXPLICIT
        elif recurring:
            treat_as_start = (
                (start is not None and same_year_month(negative_date, start))
                or (booking.invoice_date is not None and same_year_month(negative_date, booking.invoice_date))
            )
            if treat_as_start and amounts.first is not None:
                sub, sub_mode = amounts.first, amounts.first_source
            elif amounts.monthly is not None:
                sub, sub_mode = amounts.monthly, SOURCE_MONTHLY
            elif amounts.first is not None:
                sub, sub_mode = amounts.first, amounts.first_source
        else:
            sub, sub_mode = one_off, SOURCE_ONE_OFF
        if ledger.debit(month, sub):
            sub_month = month

    if ledger.debug:
        ledger.trace({
            "booking_id": booking.booking_id,
            "offer_id": offer.offer_id if offer is not None else None,
            "offer_type": (offer.type if offer is not None else None) or booking.offer_type,
            "offer_sub_type": offer.sub_type if offer is not None else None,
            "offer_category": offer.category if offer is not None else None,
            "recurring": recurring,
            "rule": classification.rule,
            "start_date": _iso(start),
            "invoice_date": _iso(booking.invoice_date),
            "storno_date": _iso(booking.storno_date),
            "cancellation_date": _iso(booking.cancellation_date),
            "one_off_price": _number(one_off),
            "first_candidate": _number(amounts.first_candidate) if amounts else None,
            "monthly_candidate": _number(amounts.monthly_candidate) if amounts else None,
            "computed_first": _number(amounts.computed_first) if amounts else None,
            "add": float(add),
            "add_month": add_month,
            "add_source": add_source,
            "sub": float(sub),
            "sub_month": sub_month,
            "sub_mode": sub_mode,
            "delta": float(round2(add - sub)),
        })


def cash_basis(
    bookings: Iterable[BookingRecord],
    offers_by_id: Mapping[str, OfferRecord],
    year: int,
    *,
    debug: bool = False,
) -> RevenueReport:
    """Cash-basis revenue of one year (invoice month in, reversal month out)."""
    ledger = _MonthlyLedger(year, MODE_CASH, debug)
    for booking in bookings:
        if not _is_cash_candidate(booking, year):
            continue
        offer = offers_by_id.get(booking.offer_id) if booking.offer_id else None
        try:
            _cash_row(ledger, booking, offer, year)
        except (ValueError, ArithmeticError) as exc:
            logger.warning(f"Cash-basis row {booking.booking_id} skipped: {exc}")
            _skip(ledger, booking, "error", error=str(exc))
    return ledger.report()


# ══════════════════════════════════════════════════════════════
# ACCRUAL BASIS
# ══════════════════════════════════════════════════════════════

def _accrual_row(
    ledger: _MonthlyLedger,
    booking: BookingRecord,
    offer: Optional[OfferRecord],
    year: int,
) -> None:
    if not classify(offer, booking, strict=True).recurring:
        _skip(
            ledger, booking, "not-weekly",
            offer_id=booking.offer_id,
            offer_category=offer.category if offer is not None else None,
            offer_type=offer.type if offer is not None else None,
            sub_type=offer.sub_type if offer is not None else None,
        )
        return

    start = booking.start_date
    if start is None:
        _skip(ledger, booking, "no-start-date")
        return

    amounts = recurring_amounts(booking)
    if amounts.first is None and amounts.monthly is None:
        _skip(ledger, booking, "no-amount")
        return

    stops = [d for d in (booking.storno_date, booking.cancellation_date, booking.end_date) if d is not None]
    stop = min(stops) if stops else None
    active_from = max(start, date(year, 1, 1))
    active_to = month_end(stop) if stop is not None else date(year, 12, 31)

    for window in months_of_year(year):
        if not window.overlaps(active_from, active_to):
            continue
        is_first_month = same_year_month(window.start, start)

        if is_first_month and amounts.first is not None:
            add, add_source = amounts.first, amounts.first_source
        elif is_first_month:
            add, add_source = amounts.monthly, "monthly(fallback)"
        elif amounts.monthly is not None:
            add, add_source = amounts.monthly, SOURCE_MONTHLY
        else:
            add, add_source = amounts.first, "first(fallback)"

        if ledger.credit(window.index, add):
            ledger.trace({
                "type": "POS",
                "booking_id": booking.booking_id,
                "month": window.index,
                "add": float(add),
                "add_source": add_source,
                "first": _number(amounts.first_candidate),
                "monthly": _number(amounts.monthly_candidate),
                "computed_first": _number(amounts.computed_first),
                "status": booking.status,
                "stop_at": _iso(stop),
                "offer_category": offer.category if offer is not None else None,
            })

        storno_at = booking.storno_date
        hit = (
            same_year_month(storno_at, window.start)
            if storno_at is not None
            else same_year_month(booking.cancellation_date, window.start)
        )
        if not hit:
            continue

        if storno_at is not None and booking.storno_amount is not None:
            neg, neg_mode = booking.storno_amount, "explicit-stornoAmount"
        elif is_first_month and amounts.first is not None:
            neg, neg_mode = amounts.first, amounts.first_source
        elif amounts.monthly is not None:
            neg, neg_mode = amounts.monthly, SOURCE_MONTHLY
        else:
            neg, neg_mode = amounts.first, amounts.first_source

        if ledger.debit(window.index, neg):
            ledger.trace({
                "type": "NEG",
                "booking_id": booking.booking_id,
                "month": window.index,
                "reason": "storno" if storno_at is not None else "cancellation",
                "amount": float(neg),
                "mode": neg_mode,
            })


def accrual_basis(
    bookings: Iterable[BookingRecord],
    offers_by_id: Mapping[str, OfferRecord],
    year: int,
    *,
    debug: bool = False,
) -> RevenueReport:
    """Accrual-basis revenue of one year (Weekly subscriptions, earned per active month)."""
    ledger = _MonthlyLedger(year, MODE_ACCRUAL, debug)
    for booking in bookings:
        offer = offers_by_id.get(booking.offer_id) if booking.offer_id else None
        try:
            _accrual_row(ledger, booking, offer, year)
        except (ValueError, ArithmeticError) as exc:
            logger.warning(f"Accrual-basis row {booking.booking_id} skipped: {exc}")
            _skip(ledger, booking, "error", error=str(exc))
    return ledger.report()


RECOGNIZERS: Dict[str, Any] = {
    MODE_CASH: cash_basis,
    MODE_ACCRUAL: accrual_basis,
}
