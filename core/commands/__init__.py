"""
KSA Command Layer — Public API
================================
Rejection reasons shared by billing policies.
"""

from core.commands.rejection import (
    ReasonCode,
    RejectionReason,
)

__all__ = [
    "ReasonCode",
    "RejectionReason",
]
