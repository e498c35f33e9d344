"""
KSA Sequences — Counter Keys
==============================
Counter keys are plain strings. One key per (document type, type code,
year) or per tenant-scoped running number.
"""

from __future__ import annotations

INVOICE_KEY_PREFIX = "invoice"
CUSTOMER_KEY_PREFIX = "customer"


def invoice_key(type_code: str, year: int) -> str:
    """e.g. invoice_key("pw", 2025) -> "invoice:PW:2025"."""
    code = str(type_code or "").strip().upper()
    if not code:
        raise ValueError("type_code must be a non-empty string.")
    if not isinstance(year, int) or year < 1:
        raise ValueError("year must be int >= 1.")
    return f"{INVOICE_KEY_PREFIX}:{code}:{year}"


def customer_key(owner_id) -> str:
    """Running customer number per tenant, e.g. "customer:<owner>"."""
    owner = str(owner_id or "").strip()
    if not owner:
        raise ValueError("owner_id must be non-empty.")
    return f"{CUSTOMER_KEY_PREFIX}:{owner}"
