"""
KSA Billing Engine — Offer Classification
============================================
Decides whether a booking is billed as a subscription ("Abo": prorated
first month, then a monthly amount) or as a one-off course.

The decision is an ordered table; the first matching rule wins:

    rule                     strict   result
    ──────────────────────   ──────   ─────────
    category-recurring       yes      recurring   (category Weekly)
    category-one-off         no       one-off     (Holiday, Individual,
                                                   ClubPrograms, RentACoach)
    legacy-type-recurring    no       recurring   (legacy type
                                                   Foerdertraining or
                                                   Kindergarten)
    unclassified             -        one-off

Category values are compared trimmed and case-insensitive. The legacy
type is the offer's type, or the booking's offer_type snapshot when the
offer has none (or is not available at all).

strict=True evaluates only the rows marked strict: accrual-basis
recognition counts Weekly offers and nothing else.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from engines.billing.records import BookingRecord, OfferRecord

logger = logging.getLogger("ksa.billing")

RECURRING_CATEGORIES = frozenset({"weekly"})
ONE_OFF_CATEGORIES = frozenset({"holiday", "individual", "clubprograms", "rentacoach"})
RECURRING_LEGACY_TYPES = frozenset({"foerdertraining", "kindergarten"})

RULE_CATEGORY_RECURRING = "category-recurring"
RULE_CATEGORY_ONE_OFF = "category-one-off"
RULE_LEGACY_TYPE_RECURRING = "legacy-type-recurring"
RULE_UNCLASSIFIED = "unclassified"


def _norm(value: Optional[str]) -> str:
    return str(value or "").strip().lower()


def offer_category(offer: Optional[OfferRecord], booking: Optional[BookingRecord]) -> str:
    return _norm(offer.category if offer is not None else None)


def legacy_type(offer: Optional[OfferRecord], booking: Optional[BookingRecord]) -> str:
    if offer is not None and offer.type:
        return _norm(offer.type)
    return _norm(booking.offer_type if booking is not None else None)


# ══════════════════════════════════════════════════════════════
# DECISION TABLE
# ══════════════════════════════════════════════════════════════

Predicate = Callable[[Optional[OfferRecord], Optional[BookingRecord]], bool]


@dataclass(frozen=True)
class ClassificationRule:
    name: str
    predicate: Predicate
    recurring: bool
    strict: bool = False


@dataclass(frozen=True)
class Classification:
    recurring: bool
    rule: str


DECISION_TABLE: Tuple[ClassificationRule, ...] = (
    ClassificationRule(
        name=RULE_CATEGORY_RECURRING,
        predicate=lambda offer, booking: offer_category(offer, booking) in RECURRING_CATEGORIES,
        recurring=True,
        strict=True,
    ),
    ClassificationRule(
        name=RULE_CATEGORY_ONE_OFF,
        predicate=lambda offer, booking: offer_category(offer, booking) in ONE_OFF_CATEGORIES,
        recurring=False,
    ),
    ClassificationRule(
        name=RULE_LEGACY_TYPE_RECURRING,
        predicate=lambda offer, booking: legacy_type(offer, booking) in RECURRING_LEGACY_TYPES,
        recurring=True,
    ),
)


def classify(
    offer: Optional[OfferRecord],
    booking: Optional[BookingRecord] = None,
    *,
    strict: bool = False,
) -> Classification:
    for rule in DECISION_TABLE:
        if strict and not rule.strict:
            continue
        if rule.predicate(offer, booking):
            return Classification(recurring=rule.recurring, rule=rule.name)

    logger.debug(
        f"Unclassified offer "
        f"'{offer.offer_id if offer is not None else None}' "
        f"(booking '{booking.booking_id if booking is not None else None}', "
        f"strict={strict}); treating as one-off"
    )
    return Classification(recurring=False, rule=RULE_UNCLASSIFIED)


def is_recurring(
    offer: Optional[OfferRecord],
    booking: Optional[BookingRecord] = None,
    *,
    strict: bool = False,
) -> bool:
    return classify(offer, booking, strict=strict).recurring
