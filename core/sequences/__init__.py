"""
KSA Sequences - Public API
==========================
Atomic keyed counters and the allocator built on them.

Models are not imported here; the Django app registry loads them.
"""

from core.sequences.allocator import (
    SequenceAllocator,
    allocate_with_retry,
    next_customer_number,
)
from core.sequences.errors import SequenceConflict, SequenceError
from core.sequences.keys import customer_key, invoice_key
from core.sequences.provider import (
    DbKeyedCounter,
    InMemoryKeyedCounter,
    KeyedCounter,
)

__all__ = [
    "SequenceAllocator",
    "allocate_with_retry",
    "next_customer_number",
    "SequenceError",
    "SequenceConflict",
    "customer_key",
    "invoice_key",
    "KeyedCounter",
    "InMemoryKeyedCounter",
    "DbKeyedCounter",
]
