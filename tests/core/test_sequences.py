"""
Tests for core.sequences — keyed counters and the allocator.
"""

from __future__ import annotations

import threading

import pytest

from core.sequences import (
    InMemoryKeyedCounter,
    SequenceAllocator,
    SequenceConflict,
    allocate_with_retry,
    customer_key,
    invoice_key,
    next_customer_number,
)


class FlakyCounter:
    """Raises SequenceConflict for the first `failures` increments."""

    def __init__(self, failures: int):
        self._failures = failures
        self._inner = InMemoryKeyedCounter()
        self.calls = 0

    def increment(self, key: str) -> int:
        self.calls += 1
        if self._failures > 0:
            self._failures -= 1
            raise SequenceConflict(key, "simulated lock timeout")
        return self._inner.increment(key)

    def peek(self, key: str) -> int:
        return self._inner.peek(key)


# ── Keys ─────────────────────────────────────────────────────

class TestKeys:
    def test_invoice_key(self):
        assert invoice_key("pw", 2025) == "invoice:PW:2025"

    def test_invoice_key_rejects_empty_code(self):
        with pytest.raises(ValueError, match="type_code"):
            invoice_key("  ", 2025)

    def test_invoice_key_rejects_bad_year(self):
        with pytest.raises(ValueError, match="year"):
            invoice_key("PW", "2025")

    def test_customer_key(self):
        assert customer_key("owner-1") == "customer:owner-1"
        with pytest.raises(ValueError, match="owner_id"):
            customer_key("")


# ── In-memory counter ────────────────────────────────────────

class TestInMemoryKeyedCounter:
    def test_starts_at_one(self):
        counter = InMemoryKeyedCounter()
        assert counter.peek("invoice:PW:2025") == 0
        assert counter.increment("invoice:PW:2025") == 1
        assert counter.increment("invoice:PW:2025") == 2

    def test_keys_are_independent(self):
        counter = InMemoryKeyedCounter()
        counter.increment("invoice:PW:2025")
        assert counter.increment("invoice:PW:2026") == 1
        assert counter.increment("invoice:FO:2025") == 1

    def test_initial_values(self):
        counter = InMemoryKeyedCounter({"invoice:PW:2025": 28})
        assert counter.increment("invoice:PW:2025") == 29

    def test_rejects_negative_initial(self):
        with pytest.raises(ValueError, match="initial value"):
            InMemoryKeyedCounter({"k": -1})

    def test_snapshot_is_copy(self):
        counter = InMemoryKeyedCounter()
        counter.increment("a")
        snap = counter.snapshot()
        snap["a"] = 99
        assert counter.peek("a") == 1


# ── Allocator ────────────────────────────────────────────────

class TestSequenceAllocator:
    def test_next_and_peek(self):
        allocator = SequenceAllocator(InMemoryKeyedCounter({"invoice:PW:2025": 28}))
        assert allocator.next("invoice:PW:2025") == 29
        assert allocator.peek("invoice:PW:2025") == 29

    def test_rejects_empty_key(self):
        allocator = SequenceAllocator(InMemoryKeyedCounter())
        with pytest.raises(ValueError, match="key"):
            allocator.next(" ")

    def test_concurrent_calls_return_contiguous_range(self):
        counter = InMemoryKeyedCounter({"invoice:PW:2025": 100})
        allocator = SequenceAllocator(counter)
        results: list[int] = []
        results_lock = threading.Lock()

        def worker():
            for _ in range(50):
                value = allocator.next("invoice:PW:2025")
                with results_lock:
                    results.append(value)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert sorted(results) == list(range(101, 501))
        assert counter.peek("invoice:PW:2025") == 500

    def test_next_does_not_retry(self):
        allocator = SequenceAllocator(FlakyCounter(failures=1))
        with pytest.raises(SequenceConflict, match="invoice:PW:2025"):
            allocator.next("invoice:PW:2025")


class TestAllocateWithRetry:
    def test_retries_conflicts_without_skipping(self):
        counter = FlakyCounter(failures=2)
        allocator = SequenceAllocator(counter)
        assert allocate_with_retry(allocator, "invoice:PW:2025", max_attempts=3) == 1
        assert counter.calls == 3
        assert allocator.peek("invoice:PW:2025") == 1

    def test_gives_up_after_max_attempts(self):
        counter = FlakyCounter(failures=5)
        allocator = SequenceAllocator(counter)
        with pytest.raises(SequenceConflict) as excinfo:
            allocate_with_retry(allocator, "invoice:PW:2025", max_attempts=3)
        assert excinfo.value.key == "invoice:PW:2025"
        assert counter.calls == 3
        assert allocator.peek("invoice:PW:2025") == 0

    def test_rejects_bad_max_attempts(self):
        allocator = SequenceAllocator(InMemoryKeyedCounter())
        with pytest.raises(ValueError, match="max_attempts"):
            allocate_with_retry(allocator, "k", max_attempts=0)

    def test_next_customer_number_is_per_owner(self):
        allocator = SequenceAllocator(InMemoryKeyedCounter())
        assert next_customer_number(allocator, "owner-a") == 1
        assert next_customer_number(allocator, "owner-a") == 2
        assert next_customer_number(allocator, "owner-b") == 1
