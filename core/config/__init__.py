"""
KSA Core Config — Public API
===============================
Billing tunables read from Django settings.
"""

from core.config.billing import (
    DEFAULT_SUBTYPE_CODES,
    DEFAULT_TYPE_CODES,
    BillingConfig,
    get_billing_config,
)

__all__ = [
    "BillingConfig",
    "DEFAULT_SUBTYPE_CODES",
    "DEFAULT_TYPE_CODES",
    "get_billing_config",
]
