"""
KSA Documents - Numbering Public API
======================================
"""

from core.documents.numbering.engine import (
    EntropySource,
    derive_type_code,
    format_cancellation_no,
    format_long,
    format_short,
    format_storno_no,
    invoice_numbers_match,
    normalize_invoice_no,
    random_hex,
    type_code_for_offer,
)
from core.documents.numbering.models import (
    CANCELLATION_FORMAT,
    DOC_CANCELLATION,
    DOC_INVOICE,
    DOC_STORNO,
    INVOICE_FORMAT,
    STORNO_FORMAT,
    OpaqueNumberFormat,
    StructuredNumberFormat,
)

__all__ = [
    "DOC_INVOICE",
    "DOC_CANCELLATION",
    "DOC_STORNO",
    "StructuredNumberFormat",
    "OpaqueNumberFormat",
    "INVOICE_FORMAT",
    "CANCELLATION_FORMAT",
    "STORNO_FORMAT",
    "EntropySource",
    "random_hex",
    "format_short",
    "format_long",
    "format_cancellation_no",
    "format_storno_no",
    "normalize_invoice_no",
    "invoice_numbers_match",
    "derive_type_code",
    "type_code_for_offer",
]
