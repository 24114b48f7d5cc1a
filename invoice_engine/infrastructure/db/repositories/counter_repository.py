# invoice_engine/infrastructure/db/repositories/counter_repository.py
"""Repository for per-scope invoice sequence counters."""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from invoice_engine.domain.models.sequence import CounterScope
from invoice_engine.infrastructure.db.models import InvoiceCounter

_UPSERT_DIALECTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


class CounterRepository:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    def _insert(self):
        dialect = self.db.get_bind().dialect.name
        insert_fn = _UPSERT_DIALECTS.get(dialect)
        if insert_fn is None:
            raise NotImplementedError(
                f"Atomic counter upsert is not supported on dialect {dialect!r}"
            )
        return insert_fn(InvoiceCounter)

    async def increment(self, scope: CounterScope) -> int:
        """
        Single-statement upsert-and-increment; returns the new sequence.

        INSERT ... ON CONFLICT (scope_key) DO UPDATE SET sequence = sequence + 1
        RETURNING sequence

        The row lock taken by the conflict update serializes concurrent
        callers, so each one gets a distinct value. Caller commits.
        """
        stmt = (
            self._insert()
            .values(
                scope_key=scope.key,
                user_id=scope.user_id,
                year=scope.year,
                month=scope.month,
                sequence=1,
            )
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[InvoiceCounter.scope_key],
            set_={
                "sequence": InvoiceCounter.sequence + 1,
                "updated_at": func.now(),
            },
        ).returning(InvoiceCounter.sequence)

        result = await self.db.execute(stmt)
        return int(result.scalar_one())

    async def get_current(self, scope: CounterScope) -> int:
        stmt = select(InvoiceCounter.sequence).where(InvoiceCounter.scope_key == scope.key)
        result = await self.db.execute(stmt)
        return int(result.scalar_one_or_none() or 0)
