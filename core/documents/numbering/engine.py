"""
KSA Documents - Numbering Engine
===================================
Turns (type code, sequence, date) or random entropy into document
numbers, and canonicalizes legacy spellings for comparison/display.

Doctrine:
- Structured numbers are pure functions of their inputs.
- Sequence state lives in core.sequences, never here.
- Randomness is injectable (EntropySource) so tests stay deterministic.
"""

from __future__ import annotations

import re
import secrets
from typing import Any, Callable, Mapping, Optional

from core.documents.numbering.models import (
    CANCELLATION_FORMAT,
    INVOICE_FORMAT,
    STORNO_FORMAT,
)
from core.time.temporal import to_date

EntropySource = Callable[[int], str]


def random_hex(length: int) -> str:
    """Uppercase hex string of the given length from the OS CSPRNG."""
    return secrets.token_hex((length + 1) // 2)[:length].upper()


# ---------------------------------------------------------------------------
# Structured numbers
# ---------------------------------------------------------------------------

def format_short(type_code: str, seq: int, issued_on: Any) -> str:
    """
    "{CODE}-{YY}-{SEQ:04d}", e.g. format_short("pw", 29, "2025-06-01")
    -> "PW-25-0029". YY is the calendar year of issued_on.
    """
    day = to_date(issued_on)
    if day is None:
        raise ValueError("issued_on must be a date, datetime or ISO date string.")
    return INVOICE_FORMAT.format_number(type_code, day.year, seq)


def format_long(provider_id: Any, code: str, year: int, seq: int) -> str:
    """Legacy long format kept for old documents, e.g. "1/FO/2025/28"."""
    if not isinstance(seq, int) or seq < 1:
        raise ValueError("sequence must be int >= 1.")
    return f"{provider_id}/{str(code or '').upper()}/{year}/{seq}"


# ---------------------------------------------------------------------------
# Opaque numbers
# ---------------------------------------------------------------------------

def format_cancellation_no(entropy: EntropySource = random_hex) -> str:
    """e.g. "KND-925B67"."""
    return CANCELLATION_FORMAT.format_number(entropy(CANCELLATION_FORMAT.hex_length))


def format_storno_no(entropy: EntropySource = random_hex) -> str:
    """e.g. "STORNO-925CF4"."""
    return STORNO_FORMAT.format_number(entropy(STORNO_FORMAT.hex_length))


# ---------------------------------------------------------------------------
# Legacy normalization
# ---------------------------------------------------------------------------

_TOKEN_SPLIT = re.compile(r"[\\/_\-\s]+")
_CODE = re.compile(r"^[A-Z][A-Z0-9]*$")
_YEAR = re.compile(r"^(\d{2}|\d{4})$")
_SEQ = re.compile(r"^\d+$")


def normalize_invoice_no(value: Any) -> str:
    """
    Best-effort canonicalization to "{CODE}-{YY}-{SEQ:04d}".

    Accepts "CODE/YYYY/SEQ", "code_yyyy_seq", backslash separators, mixed
    case and the long "provider/CODE/YYYY/SEQ" form. Anything that does not
    look like a structured number (opaque KND-/STORNO- numbers, free text)
    comes back trimmed and upper-cased.
    """
    text = str(value or "").strip().upper()
    if not text:
        return ""

    tokens = [token for token in _TOKEN_SPLIT.split(text) if token]
    if len(tokens) == 4:
        tokens = tokens[1:]  # long format: drop provider id
    if len(tokens) != 3:
        return text

    code, year, seq = tokens
    if not (_CODE.match(code) and _YEAR.match(year) and _SEQ.match(seq)):
        return text
    return INVOICE_FORMAT.format_number(code, int(year), int(seq)) if int(seq) > 0 else text


def invoice_numbers_match(a: Any, b: Any) -> bool:
    left = normalize_invoice_no(a)
    return bool(left) and left == normalize_invoice_no(b)


# ---------------------------------------------------------------------------
# Type codes
# ---------------------------------------------------------------------------

def derive_type_code(
    offer_type: Optional[str],
    sub_type: Optional[str],
    *,
    type_codes: Mapping[str, str],
    subtype_codes: Mapping[str, str],
) -> Optional[str]:
    """
    Invoice prefix from offer data.

    sub_type mapping wins (e.g. powertraining → PW), then the legacy type
    mapping (Kindergarten → KIGA), then the first two letters of the type.
    Returns None when nothing can be derived.
    """
    sub = str(sub_type or "").strip().lower()
    if sub and sub in subtype_codes:
        return subtype_codes[sub].upper()

    kind = str(offer_type or "").strip()
    if not kind:
        return None
    if kind in type_codes:
        return type_codes[kind].upper()
    return kind[:2].upper()


def type_code_for_offer(
    offer: Any,
    *,
    type_codes: Optional[Mapping[str, str]] = None,
    subtype_codes: Optional[Mapping[str, str]] = None,
) -> str:
    """
    derive_type_code() for an offer record or raw offer dict, "XX" when the
    offer carries no usable type.
    """
    from core.config.billing import DEFAULT_SUBTYPE_CODES, DEFAULT_TYPE_CODES

    if isinstance(offer, Mapping):
        offer_type = offer.get("legacy_type") or offer.get("type")
        sub_type = offer.get("sub_type") or offer.get("subType")
    else:
        offer_type = getattr(offer, "type", None)
        sub_type = getattr(offer, "sub_type", None)

    code = derive_type_code(
        offer_type,
        sub_type,
        type_codes=DEFAULT_TYPE_CODES if type_codes is None else type_codes,
        subtype_codes=DEFAULT_SUBTYPE_CODES if subtype_codes is None else subtype_codes,
    )
    return code or "XX"
