"""Redis-based cache service.

Provides async Redis access with TTL support. Used for cross-process
inbound event deduplication (keys built by TriggerEvent.dedup_key).
"""

from __future__ import annotations

import json
import logging
from typing import Any

import redis.asyncio as redis

from autoflow.core.config import get_settings

logger = logging.getLogger(__name__)


class CacheService:
    """Async Redis cache service with TTL support.

    Uses autoflow.core.config for connection settings. Call connect() at
    startup and disconnect() at shutdown. Every operation degrades to a
    "not available" answer instead of raising when Redis is down.
    """

    def __init__(self, redis_client: redis.Redis | None = None) -> None:
        """Initialize cache service.

        Args:
            redis_client: Optional Redis client for testing or DI.
        """
        self.redis = redis_client
        self.settings = get_settings()
        self._connected = redis_client is not None

    async def connect(self) -> None:
        """Establish Redis connection. Call on app startup."""
        if self.redis is None:
            try:
                self.redis = redis.Redis(
                    host=self.settings.redis_host,
                    port=self.settings.redis_port,
                    db=self.settings.redis_db,
                    password=self.settings.redis_password.get_secret_value()
                    if self.settings.redis_password
                    else None,
                    decode_responses=True,
                    socket_connect_timeout=5,
                    socket_keepalive=True,
                )
                await self.redis.ping()
                self._connected = True
                logger.info(
                    "Redis cache connected: %s:%s",
                    self.settings.redis_host,
                    self.settings.redis_port,
                )
            except (redis.ConnectionError, redis.TimeoutError) as e:
                logger.warning("Redis connection failed: %s. Cache disabled.", e)
                self._connected = False
                self.redis = None

    async def disconnect(self) -> None:
        """Close Redis connection. Call on app shutdown."""
        if self.redis:
            await self.redis.aclose()
            self.redis = None
            self._connected = False
            logger.info("Redis cache disconnected")

    def is_available(self) -> bool:
        """Return True if Redis is connected and usable."""
        return self._connected and self.redis is not None

    async def add_if_absent(self, key: str, value: Any, ttl: int) -> bool | None:
        """SET key NX EX ttl.

        Returns:
            True if stored, False if the key already existed, None if Redis
            is unavailable (caller decides the fallback).
        """
        if not self.is_available() or self.redis is None:
            return None
        try:
            stored = await self.redis.set(key, json.dumps(value), ex=ttl, nx=True)
        except redis.RedisError:
            logger.warning("Cache add failed for key %s", key, exc_info=True)
            return None
        logger.debug("Cache ADD: %s (stored=%s, TTL: %ss)", key, bool(stored), ttl)
        return bool(stored)

    async def delete(self, key: str) -> bool:
        """Remove key from cache. Returns True if the command ran."""
        if not self.is_available() or self.redis is None:
            return False
        try:
            await self.redis.delete(key)
        except redis.RedisError:
            logger.warning("Cache delete failed for key %s", key, exc_info=True)
            return False
        logger.debug("Cache DELETE: %s", key)
        return True
