"""
KSA Sequences - Keyed Counter Providers
========================================
Protocol + InMemory and DB implementations of an atomic
increment-and-fetch counter.

Doctrine:
- Provider is a dependency injection point (testable, swappable).
- InMemory provider is guarded by a mutex and used in tests.
- DB provider increments inside the database (UPDATE seq = seq + 1),
  never read-then-write in Python.
"""

from __future__ import annotations

import logging
import threading
from typing import Mapping, Optional, Protocol

from core.sequences.errors import SequenceConflict

logger = logging.getLogger("ksa.sequences")

# Substrings of driver messages that mark a retryable lock/serialization
# failure rather than a broken database.
_TRANSIENT_MARKERS = (
    "database is locked",
    "database table is locked",
    "could not serialize",
    "deadlock detected",
    "lock wait timeout",
    "could not obtain lock",
)


# ---------------------------------------------------------------------------
# Protocol
# ---------------------------------------------------------------------------

class KeyedCounter(Protocol):
    def increment(self, key: str) -> int:
        """
        Atomically add one to the counter for key and return the new value.

        A missing counter starts at 0, so the first call returns 1.
        Raises SequenceConflict on a transient storage conflict.
        """
        ...

    def peek(self, key: str) -> int:
        """Return the current value without advancing (0 if absent)."""
        ...


# ---------------------------------------------------------------------------
# InMemory Provider (thread-safe for tests)
# ---------------------------------------------------------------------------

class InMemoryKeyedCounter:
    """
    Thread-safe in-memory counter store.
    Used in tests and single-process tooling.
    """

    def __init__(self, initial: Optional[Mapping[str, int]] = None):
        self._lock = threading.Lock()
        self._values: dict[str, int] = {}
        for key, value in (initial or {}).items():
            if not isinstance(value, int) or value < 0:
                raise ValueError(f"initial value for '{key}' must be int >= 0.")
            self._values[key] = value

    def increment(self, key: str) -> int:
        with self._lock:
            value = self._values.get(key, 0) + 1
            self._values[key] = value
            return value

    def peek(self, key: str) -> int:
        with self._lock:
            return self._values.get(key, 0)

    def snapshot(self) -> dict[str, int]:
        with self._lock:
            return dict(self._values)


# ---------------------------------------------------------------------------
# DB Provider (Django ORM, storage-level atomic increment)
# ---------------------------------------------------------------------------

def _is_transient(exc: Exception) -> bool:
    text = str(exc).lower()
    return any(marker in text for marker in _TRANSIENT_MARKERS)


class DbKeyedCounter:
    """
    Counter store backed by the core_sequences Counter table.

    increment() runs in one transaction: UPDATE with an F expression
    (takes the row lock), INSERT seq=1 when the row does not exist yet,
    then reads the value back while still holding the lock.
    """

    def __init__(self, using: str = "default"):
        self._using = using

    def increment(self, key: str) -> int:
        from django.db import IntegrityError, OperationalError, transaction
        from django.db.models import F
        from django.db.models.functions import Now

        from core.sequences.models import Counter

        rows = Counter.objects.using(self._using)
        try:
            with transaction.atomic(using=self._using):
                updated = rows.filter(key=key).update(seq=F("seq") + 1, updated_at=Now())
                if not updated:
                    rows.create(key=key, seq=1)
                    return 1
                return rows.filter(key=key).values_list("seq", flat=True).get()
        except IntegrityError as exc:
            # Two writers raced to create the same counter row.
            logger.warning(f"Counter '{key}' insert race: {exc}")
            raise SequenceConflict(key, "Concurrent first insert.") from exc
        except OperationalError as exc:
            if not _is_transient(exc):
                raise
            logger.warning(f"Counter '{key}' transient storage failure: {exc}")
            raise SequenceConflict(key, str(exc)) from exc

    def peek(self, key: str) -> int:
        from core.sequences.models import Counter

        value = (
            Counter.objects.using(self._using)
            .filter(key=key)
            .values_list("seq", flat=True)
            .first()
        )
        return 0 if value is None else int(value)
