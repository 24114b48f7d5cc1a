# invoice_engine/infrastructure/counters/factory.py
from __future__ import annotations

from invoice_engine.config.settings import settings
from invoice_engine.infrastructure.counters.base import CounterStore, InMemoryCounterStore


def build_counter_store(backend: str | None = None) -> CounterStore:
    """Counter store for COUNTER_BACKEND ("sql", "redis" or "memory")."""
    backend = (backend or settings.COUNTER_BACKEND or "sql").strip().lower()

    if backend == "sql":
        from invoice_engine.infrastructure.counters.sql_store import SqlCounterStore
        from invoice_engine.infrastructure.db.session import get_sessionmaker

        return SqlCounterStore(get_sessionmaker())

    if backend == "redis":
        from invoice_engine.infrastructure.counters.redis_store import RedisCounterStore

        return RedisCounterStore.from_url(settings.REDIS_URL)

    if backend == "memory":
        return InMemoryCounterStore()

    raise ValueError(f"Unknown COUNTER_BACKEND: {backend!r}")
