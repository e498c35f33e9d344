"""
KSA Command Layer — Rejection Model
======================================
Structured rejection reasons for refused billing transitions.

Policies return a RejectionReason (or None); services turn the reason
into the matching typed error. Every rejection is:
- Deterministic (same input → same rejection)
- Machine-readable (code)
- Human-readable (message)
- Attributable (policy_name)
"""

from __future__ import annotations

from dataclasses import dataclass


# ══════════════════════════════════════════════════════════════
# REJECTION REASON (frozen explanation structure)
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class RejectionReason:
    """
    Structured reason for a refused transition.

    Fields:
        code:        Machine-readable rejection code (e.g. 'MISSING_INVOICE').
        message:     Human-readable explanation.
        policy_name: Name of the policy that caused rejection.
    """

    code: str
    message: str
    policy_name: str

    def __post_init__(self):
        if not self.code or not isinstance(self.code, str):
            raise ValueError("code must be a non-empty string.")

        if not self.message or not isinstance(self.message, str):
            raise ValueError("message must be a non-empty string.")

        if not self.policy_name or not isinstance(self.policy_name, str):
            raise ValueError("policy_name must be a non-empty string.")

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "message": self.message,
            "policy_name": self.policy_name,
        }


# ══════════════════════════════════════════════════════════════
# STANDARD REJECTION CODES
# ══════════════════════════════════════════════════════════════

class ReasonCode:
    """
    Known rejection codes.

    Convention: SCREAMING_SNAKE_CASE.
    """

    # ── Booking lifecycle ─────────────────────────────────────
    MISSING_INVOICE = "MISSING_INVOICE"
    INVALID_STATUS_TRANSITION = "INVALID_STATUS_TRANSITION"

    # ── Amounts ───────────────────────────────────────────────
    NEGATIVE_AMOUNT = "NEGATIVE_AMOUNT"
