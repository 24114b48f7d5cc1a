# invoice_engine/infrastructure/counters/base.py

from __future__ import annotations

import threading
from abc import ABC, abstractmethod

from invoice_engine.domain.models.sequence import CounterScope


class CounterStore(ABC):
    """Storage primitive behind invoice numbering: atomic increment-and-fetch."""

    @abstractmethod
    async def increment(self, scope: CounterScope) -> int:
        """
        Atomically add 1 to the counter for ``scope`` and return the new value.

        The first call for a scope returns 1. Two concurrent callers must
        never receive the same value. Retryable failures are raised as
        TransientStoreError.
        """
        raise NotImplementedError

    @abstractmethod
    async def current(self, scope: CounterScope) -> int:
        """Last value handed out for ``scope`` (0 if none)."""
        raise NotImplementedError


class InMemoryCounterStore(CounterStore):
    """Process-local counters. For tests and single-process development."""

    def __init__(self) -> None:
        self._counters: dict[str, int] = {}
        self._lock = threading.Lock()

    async def increment(self, scope: CounterScope) -> int:
        with self._lock:
            value = self._counters.get(scope.key, 0) + 1
            self._counters[scope.key] = value
            return value

    async def current(self, scope: CounterScope) -> int:
        with self._lock:
            return self._counters.get(scope.key, 0)
