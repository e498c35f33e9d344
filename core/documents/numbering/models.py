"""
KSA Documents - Numbering Formats
===================================
Declares the two number families that coexist on booking documents.

Structured (sequence-derived):
    "{CODE}-{YY}-{SEQ}"       e.g. "PW-25-0029"
Opaque (random, not sequence-derived):
    "KND-{6 hex}"             cancellation, e.g. "KND-925B67"
    "STORNO-{6 hex}"          storno, e.g. "STORNO-925CF4"

Doctrine:
- Same (code, seq, date) → same structured number (deterministic).
- Opaque numbers are independent draws; collisions in a 16^6 space are
  accepted and not deduplicated here.
"""

from __future__ import annotations

from dataclasses import dataclass

# ---------------------------------------------------------------------------
# Document kinds
# ---------------------------------------------------------------------------

DOC_INVOICE = "invoice"
DOC_CANCELLATION = "cancellation"
DOC_STORNO = "storno"


# ---------------------------------------------------------------------------
# Structured format
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class StructuredNumberFormat:
    """
    Fields:
        separator:    joins code, year and sequence
        padding:      minimum digit width of the sequence (wider values widen)
        year_digits:  trailing digits of the calendar year to keep
        default_code: used when the caller has no type code
    """
    separator: str = "-"
    padding: int = 4
    year_digits: int = 2
    default_code: str = "INV"

    def __post_init__(self):
        if not isinstance(self.padding, int) or self.padding < 1:
            raise ValueError("padding must be int >= 1.")
        if self.year_digits not in (2, 4):
            raise ValueError("year_digits must be 2 or 4.")
        if not self.default_code:
            raise ValueError("default_code must be a non-empty string.")

    def format_number(self, code: str, year: int, sequence: int) -> str:
        if not isinstance(sequence, int) or sequence < 1:
            raise ValueError("sequence must be int >= 1.")
        prefix = (code or self.default_code).strip().upper() or self.default_code
        yy = str(year).zfill(self.year_digits)[-self.year_digits:]
        padded = str(sequence).zfill(self.padding)
        return f"{prefix}{self.separator}{yy}{self.separator}{padded}"


# ---------------------------------------------------------------------------
# Opaque format
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class OpaqueNumberFormat:
    prefix: str
    hex_length: int = 6

    def __post_init__(self):
        if not self.prefix or not isinstance(self.prefix, str):
            raise ValueError("prefix must be a non-empty string.")
        if not isinstance(self.hex_length, int) or self.hex_length < 1:
            raise ValueError("hex_length must be int >= 1.")

    def format_number(self, entropy: str) -> str:
        token = str(entropy or "").upper()
        if len(token) != self.hex_length or any(ch not in "0123456789ABCDEF" for ch in token):
            raise ValueError(f"entropy must be {self.hex_length} hex characters.")
        return f"{self.prefix}{token}"


INVOICE_FORMAT = StructuredNumberFormat()
CANCELLATION_FORMAT = OpaqueNumberFormat(prefix="KND-")
STORNO_FORMAT = OpaqueNumberFormat(prefix="STORNO-")
