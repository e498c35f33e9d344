"""
KSA Documents - Public API
==========================
Document numbers for invoices, cancellations and stornos.
"""

from core.documents.numbering import (
    DOC_CANCELLATION,
    DOC_INVOICE,
    DOC_STORNO,
    derive_type_code,
    format_cancellation_no,
    format_long,
    format_short,
    format_storno_no,
    normalize_invoice_no,
    type_code_for_offer,
)

__all__ = [
    "DOC_INVOICE",
    "DOC_CANCELLATION",
    "DOC_STORNO",
    "format_short",
    "format_long",
    "format_cancellation_no",
    "format_storno_no",
    "normalize_invoice_no",
    "derive_type_code",
    "type_code_for_offer",
]
