"""Cache layer: Redis service and event deduplicators."""

from autoflow.infrastructure.cache.dedup import (
    InMemoryEventDeduplicator,
    RedisEventDeduplicator,
)
from autoflow.infrastructure.cache.redis_cache import CacheService

__all__ = [
    "CacheService",
    "InMemoryEventDeduplicator",
    "RedisEventDeduplicator",
]
