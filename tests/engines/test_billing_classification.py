"""
Tests for engines.billing.classification — recurring vs one-off.
"""

import pytest

from engines.billing.classification import (
    RULE_CATEGORY_ONE_OFF,
    RULE_CATEGORY_RECURRING,
    RULE_LEGACY_TYPE_RECURRING,
    RULE_UNCLASSIFIED,
    classify,
    is_recurring,
)
from engines.billing.records import BookingRecord, OfferRecord


def offer(**fields) -> OfferRecord:
    return OfferRecord(offer_id="o1", **fields)


class TestDecisionTable:
    def test_weekly_is_recurring(self):
        result = classify(offer(category="Weekly"))
        assert result.recurring is True
        assert result.rule == RULE_CATEGORY_RECURRING

    @pytest.mark.parametrize("category", ["Holiday", "Individual", "ClubPrograms", "RentACoach"])
    def test_one_off_categories(self, category):
        result = classify(offer(category=category, type="Foerdertraining"))
        assert result.recurring is False
        assert result.rule == RULE_CATEGORY_ONE_OFF

    def test_category_trimmed_and_case_insensitive(self):
        assert is_recurring(offer(category="  weekly "))
        assert not is_recurring(offer(category="HOLIDAY", type="Kindergarten"))

    def test_legacy_type_when_category_missing(self):
        result = classify(offer(category=None, type="Foerdertraining"))
        assert result.recurring is True
        assert result.rule == RULE_LEGACY_TYPE_RECURRING

    def test_unknown_category_falls_through_to_legacy_type(self):
        assert is_recurring(offer(category="Seasonal", type="Kindergarten"))

    def test_camp_is_one_off(self):
        result = classify(offer(type="Camp"))
        assert result.recurring is False
        assert result.rule == RULE_UNCLASSIFIED

    def test_empty_offer_is_one_off(self):
        assert classify(offer()).rule == RULE_UNCLASSIFIED
        assert not is_recurring(None)


class TestBookingFallback:
    def test_booking_offer_type_used_without_offer(self):
        booking = BookingRecord(booking_id="b1", offer_type="Kindergarten")
        assert is_recurring(None, booking)

    def test_booking_offer_type_used_when_offer_has_no_type(self):
        booking = BookingRecord(booking_id="b1", offer_type="Foerdertraining")
        assert is_recurring(offer(), booking)

    def test_offer_type_wins_over_booking(self):
        booking = BookingRecord(booking_id="b1", offer_type="Kindergarten")
        assert not is_recurring(offer(type="Camp"), booking)


class TestStrictMode:
    def test_weekly_only(self):
        assert is_recurring(offer(category="Weekly"), strict=True)

    def test_legacy_type_ignored(self):
        result = classify(offer(type="Foerdertraining"), strict=True)
        assert result.recurring is False
        assert result.rule == RULE_UNCLASSIFIED

    def test_booking_fallback_ignored(self):
        booking = BookingRecord(booking_id="b1", offer_type="Kindergarten")
        assert not is_recurring(None, booking, strict=True)
