"""
Tests for engines.billing.proration — first-month charge of a subscription.
"""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from engines.billing.proration import first_month_price, next_period_start, prorate_for_start


class TestFirstMonthPrice:
    def test_mid_month_start(self):
        assert first_month_price("2025-01-20", 100) == Decimal("38.71")

    def test_first_of_month_is_full_price(self):
        assert first_month_price("2025-02-01", 100) == Decimal("100.00")

    def test_last_day_of_month(self):
        assert first_month_price("2025-01-31", 31) == Decimal("1.00")

    def test_leap_february_uses_29_days(self):
        proration = prorate_for_start("2024-02-15", 100)
        assert proration.days_in_month == 29
        assert proration.days_remaining == 15
        assert proration.first_month_price == Decimal("51.72")

    def test_non_leap_february(self):
        assert first_month_price("2025-02-15", 100) == Decimal("50.00")

    def test_weekly_course_example(self):
        assert first_month_price("2025-03-05", 80) == Decimal("69.68")

    def test_accepts_datetime_and_date(self):
        assert first_month_price(date(2025, 1, 20), "100") == Decimal("38.71")
        assert first_month_price(datetime(2025, 1, 20, 10, tzinfo=timezone.utc), 100.0) == Decimal("38.71")

    @pytest.mark.parametrize("start, price", [
        (None, 100),
        ("2025-01-20", None),
        ("garbage", 100),
        ("2025-01-20", float("nan")),
        ("2025-01-20", "abc"),
    ])
    def test_cannot_prorate_returns_none(self, start, price):
        assert first_month_price(start, price) is None

    def test_negative_price_rejected(self):
        with pytest.raises(ValueError, match="monthly_price"):
            first_month_price("2025-01-20", -1)


class TestProrationBreakdown:
    def test_fields(self):
        proration = prorate_for_start("2025-01-20", 100)
        assert proration.start_date == date(2025, 1, 20)
        assert proration.days_in_month == 31
        assert proration.days_remaining == 12
        assert Decimal(0) < proration.factor < Decimal(1)

    def test_to_dict(self):
        data = prorate_for_start("2025-02-01", 100).to_dict()
        assert data["first_month_price"] == "100.00"
        assert data["days_remaining"] == 28


class TestNextPeriodStart:
    def test_mid_month(self):
        assert next_period_start("2025-01-20") == date(2025, 2, 1)

    def test_december_rolls_year(self):
        assert next_period_start("2025-12-31") == date(2026, 1, 1)

    def test_unparseable(self):
        assert next_period_start(None) is None
