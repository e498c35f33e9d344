"""
KSA Money Primitive — Two-Decimal Amounts
===========================================
Engine: Core Primitives
Authority: Billing doctrine — deterministic, replayable arithmetic

All monetary values in the billing and revenue engines are Decimal
amounts quantized to two places with half-up rounding.

RULES (NON-NEGOTIABLE):
- No binary floats in stored or reported amounts
- Rounding is ROUND_HALF_UP to 0.01, applied once per computed value
- Missing or non-finite input resolves to None, never to zero
- Currency is explicit and upper-case (ISO 4217)

This file contains NO persistence logic.
"""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Iterable, Optional

CENT = Decimal("0.01")
ZERO = Decimal("0.00")
DEFAULT_CURRENCY = "EUR"


def to_decimal(value: Any) -> Optional[Decimal]:
    """
    Coerce int / float / str / Decimal into a finite Decimal.

    Returns None for None, empty strings, booleans, NaN and infinities.
    Floats go through repr() so 38.71 stays 38.71 instead of its binary
    expansion.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value if value.is_finite() else None
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        return Decimal(repr(value))
    if isinstance(value, str):
        text = value.strip().replace(",", ".")
        if not text:
            return None
        try:
            parsed = Decimal(text)
        except InvalidOperation:
            return None
        return parsed if parsed.is_finite() else None
    return None


def round2(value: Any) -> Optional[Decimal]:
    """Half-up rounding to two decimal places. None stays None."""
    amount = to_decimal(value)
    if amount is None:
        return None
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def round2_or_zero(value: Any) -> Decimal:
    rounded = round2(value)
    return ZERO if rounded is None else rounded


def sum2(values: Iterable[Any]) -> Decimal:
    """Sum amounts and round the result once."""
    total = Decimal(0)
    for value in values:
        amount = to_decimal(value)
        if amount is not None:
            total += amount
    return total.quantize(CENT, rounding=ROUND_HALF_UP)


def normalize_currency(currency: Any, default: str = DEFAULT_CURRENCY) -> str:
    text = str(currency or "").strip().upper()
    return text or default


def format_amount(value: Any) -> str:
    """Render as a plain two-decimal string, e.g. '38.71'."""
    return f"{round2_or_zero(value):.2f}"
