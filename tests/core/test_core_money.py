"""
Tests for core.primitives.money — two-decimal, half-up amounts.
"""

from decimal import Decimal

import pytest

from core.primitives.money import (
    format_amount,
    normalize_currency,
    round2,
    round2_or_zero,
    sum2,
    to_decimal,
)


class TestToDecimal:
    def test_float_keeps_short_repr(self):
        assert to_decimal(38.71) == Decimal("38.71")

    def test_string_with_comma(self):
        assert to_decimal(" 69,68 ") == Decimal("69.68")

    @pytest.mark.parametrize("value", [None, "", "abc", True, float("nan"), float("inf"), [1]])
    def test_unusable_values_are_none(self, value):
        assert to_decimal(value) is None


class TestRounding:
    def test_half_up(self):
        assert round2("2.675") == Decimal("2.68")
        assert round2("0.005") == Decimal("0.01")
        assert round2("-0.005") == Decimal("-0.01")

    def test_none_stays_none(self):
        assert round2(None) is None
        assert round2_or_zero(None) == Decimal("0.00")

    def test_sum_rounds_once(self):
        assert sum2(["0.10", "0.20", None, 0.3]) == Decimal("0.60")

    def test_format_amount(self):
        assert format_amount(100) == "100.00"
        assert format_amount(None) == "0.00"


class TestCurrency:
    def test_upper_cases(self):
        assert normalize_currency(" eur ") == "EUR"

    def test_default(self):
        assert normalize_currency(None) == "EUR"
        assert normalize_currency("", "CHF") == "CHF"
