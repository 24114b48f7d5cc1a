# invoice_engine/infrastructure/counters/sql_store.py

from __future__ import annotations

import asyncio

from sqlalchemy.exc import DBAPIError, InterfaceError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from invoice_engine.core.errors import TransientStoreError
from invoice_engine.domain.models.sequence import CounterScope
from invoice_engine.infrastructure.counters.base import CounterStore
from invoice_engine.infrastructure.db.repositories.counter_repository import CounterRepository


def _is_transient(exc: Exception) -> bool:
    if isinstance(exc, (OperationalError, InterfaceError)):
        return True
    return isinstance(exc, DBAPIError) and exc.connection_invalidated


class SqlCounterStore(CounterStore):
    """Counters in the ``invoice_counters`` table (PostgreSQL or SQLite)."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def increment(self, scope: CounterScope) -> int:
        try:
            async with self._session_factory() as db:
                value = await CounterRepository(db).increment(scope)
                await db.commit()
                return value
        except (asyncio.TimeoutError, ConnectionError, PoolTimeoutError) as exc:
            raise TransientStoreError(f"{type(exc).__name__}: {exc}") from exc
        except DBAPIError as exc:
            if _is_transient(exc):
                raise TransientStoreError(str(exc.orig or exc)) from exc
            raise

    async def current(self, scope: CounterScope) -> int:
        async with self._session_factory() as db:
            return await CounterRepository(db).get_current(scope)
