"""
KSA Core Primitives
====================
Engine-agnostic value helpers shared by billing and reporting.

Primitives:
    money — two-decimal Decimal amounts, half-up rounding, currency codes
"""

from core.primitives.money import (
    CENT,
    DEFAULT_CURRENCY,
    ZERO,
    format_amount,
    normalize_currency,
    round2,
    round2_or_zero,
    sum2,
    to_decimal,
)

__all__ = [
    "CENT",
    "ZERO",
    "DEFAULT_CURRENCY",
    "to_decimal",
    "round2",
    "round2_or_zero",
    "sum2",
    "normalize_currency",
    "format_amount",
]
