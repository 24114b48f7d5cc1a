# invoice_engine/infrastructure/counters/redis_store.py

from __future__ import annotations

import redis.asyncio as redis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError

from invoice_engine.core.errors import TransientStoreError
from invoice_engine.domain.models.sequence import CounterScope
from invoice_engine.infrastructure.counters.base import CounterStore

_KEY_PREFIX = "invoice_seq:"


class RedisCounterStore(CounterStore):
    """Counters as Redis keys; INCR is atomic on the server."""

    def __init__(self, client: redis.Redis) -> None:
        self._r = client

    @classmethod
    def from_url(cls, redis_url: str) -> RedisCounterStore:
        if not redis_url:
            raise RuntimeError("REDIS_URL is not set")
        return cls(redis.from_url(redis_url, decode_responses=True))

    @staticmethod
    def _key(scope: CounterScope) -> str:
        return f"{_KEY_PREFIX}{scope.key}"

    async def increment(self, scope: CounterScope) -> int:
        try:
            return int(await self._r.incr(self._key(scope)))
        except (RedisConnectionError, RedisTimeoutError) as exc:
            raise TransientStoreError(f"Redis unavailable: {exc}") from exc

    async def current(self, scope: CounterScope) -> int:
        raw = await self._r.get(self._key(scope))
        return int(raw) if raw else 0
