"""
KSA Core Config — Billing Settings
=====================================
Doctrine: No hardcoded tenant codes in engine logic.
Type codes, default currency and retry limits come from the Django
settings BILLING dict; engines read them through BillingConfig.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping

from django.conf import settings

DEFAULT_TYPE_CODES: Dict[str, str] = {
    "Foerdertraining": "FO",
    "Kindergarten": "KIGA",
    "Athletiktraining": "AT",
    "AthleticTraining": "AT",
}

DEFAULT_SUBTYPE_CODES: Dict[str, str] = {
    "powertraining": "PW",
}


# ══════════════════════════════════════════════════════════════
# BILLING CONFIG
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class BillingConfig:
    """
    Billing tunables.

    Fields:
        default_currency:      currency assumed when a booking has none
        default_type_code:     invoice prefix when no code can be derived
        sequence_max_attempts: retries of one counter key on SequenceConflict
        type_codes:            legacy offer type → invoice prefix
        subtype_codes:         lower-case offer sub_type → invoice prefix
    """

    default_currency: str = "EUR"
    default_type_code: str = "INV"
    sequence_max_attempts: int = 5
    type_codes: Mapping[str, str] = field(default_factory=lambda: dict(DEFAULT_TYPE_CODES))
    subtype_codes: Mapping[str, str] = field(default_factory=lambda: dict(DEFAULT_SUBTYPE_CODES))

    def __post_init__(self) -> None:
        if not isinstance(self.sequence_max_attempts, int) or self.sequence_max_attempts < 1:
            raise ValueError("sequence_max_attempts must be int >= 1.")
        if not self.default_type_code or not isinstance(self.default_type_code, str):
            raise ValueError("default_type_code must be a non-empty string.")
        if not self.default_currency or len(self.default_currency) != 3:
            raise ValueError("default_currency must be a 3-letter ISO 4217 code.")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "BillingConfig":
        defaults = cls()
        return cls(
            default_currency=str(data.get("DEFAULT_CURRENCY", defaults.default_currency)).upper(),
            default_type_code=str(data.get("DEFAULT_TYPE_CODE", defaults.default_type_code)).upper(),
            sequence_max_attempts=int(data.get("SEQUENCE_MAX_ATTEMPTS", defaults.sequence_max_attempts)),
            type_codes=dict(data.get("TYPE_CODES", defaults.type_codes)),
            subtype_codes={
                str(key).lower(): value
                for key, value in dict(data.get("SUBTYPE_CODES", defaults.subtype_codes)).items()
            },
        )


def get_billing_config() -> BillingConfig:
    """
    Read BILLING from Django settings.

    Falls back to defaults when settings are not configured, so pure
    engine code stays usable outside a Django process.
    """
    if not settings.configured:
        return BillingConfig()
    return BillingConfig.from_mapping(getattr(settings, "BILLING", {}) or {})
