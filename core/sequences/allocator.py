"""
KSA Sequences — Sequence Allocator
=====================================
Collision-free integer numbers per string key.

Doctrine:
- One atomic increment per call; N concurrent calls for one key return
  exactly {prev+1, ..., prev+N}.
- next() never retries. A SequenceConflict means no value was handed
  out, and the caller retries the same key (allocate_with_retry).
"""

from __future__ import annotations

import logging

from core.sequences.errors import SequenceConflict
from core.sequences.keys import customer_key
from core.sequences.provider import KeyedCounter

logger = logging.getLogger("ksa.sequences")


class SequenceAllocator:
    def __init__(self, counter: KeyedCounter):
        self._counter = counter

    @property
    def counter(self) -> KeyedCounter:
        return self._counter

    def next(self, key: str) -> int:
        if not isinstance(key, str) or not key.strip():
            raise ValueError("key must be a non-empty string.")
        value = self._counter.increment(key)
        logger.debug(f"Allocated {key} -> {value}")
        return value

    def peek(self, key: str) -> int:
        return self._counter.peek(key)


def allocate_with_retry(
    allocator: SequenceAllocator,
    key: str,
    *,
    max_attempts: int,
) -> int:
    """
    Call allocator.next(key), retrying on SequenceConflict.

    The last conflict propagates once max_attempts is exhausted.
    """
    if not isinstance(max_attempts, int) or max_attempts < 1:
        raise ValueError("max_attempts must be int >= 1.")

    for attempt in range(1, max_attempts + 1):
        try:
            return allocator.next(key)
        except SequenceConflict:
            if attempt == max_attempts:
                logger.error(f"Giving up on '{key}' after {attempt} conflicting attempts")
                raise
            logger.warning(f"Retrying '{key}' after conflict (attempt {attempt}/{max_attempts})")
    raise AssertionError("unreachable")


def next_customer_number(
    allocator: SequenceAllocator,
    owner_id,
    *,
    max_attempts: int = 5,
) -> int:
    """Running customer number within one tenant (1, 2, 3, ...)."""
    return allocate_with_retry(allocator, customer_key(owner_id), max_attempts=max_attempts)
