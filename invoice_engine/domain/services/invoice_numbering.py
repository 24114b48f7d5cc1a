# invoice_engine/domain/services/invoice_numbering.py
"""
Invoice number allocation: ``INV-YYYYMM-NNNN`` per (user, month).

Two strategies, deliberately kept apart:

- ``allocate``: atomic increment-and-fetch on a CounterStore. Safe under
  any number of concurrent callers. Transient store failures are retried;
  a retry after an increment that did land may skip a number but can
  never repeat one.

- ``allocate_by_scan``: reads the highest existing invoice number for the
  scope and adds one. Two concurrent callers can both see the same maximum
  and get the SAME number. Only for when the counter store is down and the
  caller has decided availability matters more than uniqueness; it is
  never used automatically.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date
from typing import Protocol

from invoice_engine.core.errors import AllocationError, TransientStoreError
from invoice_engine.domain.models.sequence import (
    DEFAULT_PREFIX,
    CounterScope,
    format_invoice_number,
    parse_invoice_number,
)

logger = logging.getLogger("invoice_numbering")


class CounterBackend(Protocol):
    async def increment(self, scope: CounterScope) -> int: ...


class InvoiceNumberSource(Protocol):
    async def list_invoice_numbers(self, user_id: str, prefix: str) -> list[str]: ...


class SequenceAllocator:
    def __init__(
        self,
        store: CounterBackend,
        *,
        scan_source: InvoiceNumberSource | None = None,
        prefix: str = DEFAULT_PREFIX,
        max_attempts: int = 3,
        retry_delay: float = 0.05,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.store = store
        self.scan_source = scan_source
        self.prefix = prefix
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay

    @classmethod
    def from_settings(
        cls,
        store: CounterBackend,
        scan_source: InvoiceNumberSource | None = None,
    ) -> SequenceAllocator:
        from invoice_engine.config.settings import settings

        return cls(
            store,
            scan_source=scan_source,
            prefix=settings.INVOICE_NUMBER_PREFIX,
            max_attempts=settings.ALLOCATION_MAX_ATTEMPTS,
            retry_delay=settings.ALLOCATION_RETRY_DELAY_SECONDS,
        )

    # ---- atomic path ----

    async def allocate(self, user_id: str, on: date | None = None) -> str:
        """Next invoice number for ``user_id`` in the month of ``on`` (default today)."""
        scope = CounterScope.for_date(user_id, on or date.today())

        attempt = 0
        while True:
            attempt += 1
            try:
                sequence = await self.store.increment(scope)
                break
            except TransientStoreError as exc:
                if attempt >= self.max_attempts:
                    logger.error(
                        "Invoice number allocation failed for scope %s after %d attempts: %s",
                        scope.key, attempt, exc,
                    )
                    raise AllocationError(
                        f"Counter store unavailable for scope {scope.key}: {exc}",
                        scope_key=scope.key,
                        attempts=attempt,
                    ) from exc
                logger.warning(
                    "Transient counter failure for scope %s on attempt %d: %s",
                    scope.key, attempt, exc,
                )
                if self.retry_delay:
                    await asyncio.sleep(self.retry_delay * attempt)
            except Exception as exc:
                logger.exception("Counter store error for scope %s", scope.key)
                raise AllocationError(
                    f"Counter store error for scope {scope.key}: {exc}",
                    scope_key=scope.key,
                    attempts=attempt,
                ) from exc

        number = format_invoice_number(scope, sequence, self.prefix)
        logger.info("Allocated invoice number %s (scope=%s)", number, scope.key)
        return number

    # ---- degraded path (explicit opt-in, racy) ----

    async def allocate_by_scan(self, user_id: str, on: date | None = None) -> str:
        """
        max(existing sequence in scope) + 1.

        NOT safe under concurrency: parallel calls may return duplicates.
        """
        scope = CounterScope.for_date(user_id, on or date.today())
        if self.scan_source is None:
            raise AllocationError(
                "Scan-based allocation requested but no invoice number source is configured",
                scope_key=scope.key,
            )

        logger.warning(
            "Using scan-based invoice numbering for scope %s; duplicates are possible "
            "under concurrent requests",
            scope.key,
        )
        prefix = scope.number_prefix(self.prefix)
        try:
            existing = await self.scan_source.list_invoice_numbers(scope.user_id, prefix)
        except Exception as exc:
            raise AllocationError(
                f"Could not read existing invoice numbers for scope {scope.key}: {exc}",
                scope_key=scope.key,
                attempts=1,
            ) from exc

        last = 0
        for number in existing:
            parsed = parse_invoice_number(number, self.prefix)
            if parsed and (parsed[0], parsed[1]) == (scope.year, scope.month):
                last = max(last, parsed[2])

        number = format_invoice_number(scope, last + 1, self.prefix)
        logger.info("Allocated invoice number %s by scan (scope=%s)", number, scope.key)
        return number


async def next_invoice_number(
    user_id: str,
    on: date | None,
    allocator: SequenceAllocator,
) -> str:
    """Allocate on the atomic path. Raises AllocationError on store failure."""
    return await allocator.allocate(user_id, on)
