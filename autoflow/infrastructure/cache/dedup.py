"""Inbound event deduplication (bounded recent-window memory of event ids)."""

from __future__ import annotations

import asyncio
import time
from collections import OrderedDict
from collections.abc import Callable

from autoflow.infrastructure.cache.redis_cache import CacheService
from autoflow.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


class InMemoryEventDeduplicator:
    """Per-process dedup: LRU-bounded map of key -> expiry (monotonic clock)."""

    def __init__(
        self,
        max_entries: int = 10_000,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[str, float] = OrderedDict()
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    async def seen_or_remember(self, key: str, ttl_seconds: int) -> bool:
        async with self._lock:
            now = self._clock()
            expires_at = self._entries.get(key)
            if expires_at is not None and expires_at > now:
                return True
            self._entries[key] = now + ttl_seconds
            self._entries.move_to_end(key)
            self._evict(now)
            return False

    async def forget(self, key: str) -> None:
        async with self._lock:
            self._entries.pop(key, None)

    def _evict(self, now: float) -> None:
        # Insertion order is expiry order for a fixed ttl.
        while self._entries:
            oldest_expiry = next(iter(self._entries.values()))
            if oldest_expiry > now and len(self._entries) <= self._max_entries:
                break
            self._entries.popitem(last=False)


class RedisEventDeduplicator:
    """Cross-process dedup via SET NX EX; falls back to in-memory when Redis is down."""

    def __init__(
        self, cache: CacheService, fallback: InMemoryEventDeduplicator
    ) -> None:
        self._cache = cache
        self._fallback = fallback

    async def seen_or_remember(self, key: str, ttl_seconds: int) -> bool:
        stored = await self._cache.add_if_absent(key, 1, ttl_seconds)
        if stored is None:
            logger.warning("Redis unavailable; using in-process dedup for %s", key)
            return await self._fallback.seen_or_remember(key, ttl_seconds)
        return not stored

    async def forget(self, key: str) -> None:
        await self._cache.delete(key)
        await self._fallback.forget(key)
