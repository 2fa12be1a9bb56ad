"""Application lifespan: startup and shutdown.

Single place for startup/shutdown wiring of infrastructure (shared HTTP
client, Redis-backed event dedup, telemetry, DB engine dispose). No
business logic here.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx
from fastapi import FastAPI

from autoflow.core.config import get_settings
from autoflow.infrastructure.cache import (
    CacheService,
    InMemoryEventDeduplicator,
    RedisEventDeduplicator,
)
from autoflow.infrastructure.persistence import database

logger = logging.getLogger(__name__)


def ensure_in_memory_deduplicator(app: FastAPI) -> InMemoryEventDeduplicator:
    """Return the process-wide in-memory deduplicator, creating it on first use."""
    dedup = getattr(app.state, "memory_deduplicator", None)
    if dedup is None:
        dedup = InMemoryEventDeduplicator(max_entries=get_settings().dedup_max_entries)
        app.state.memory_deduplicator = dedup
    return dedup


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit run shutdown.

    Startup order: shared HTTP client, Redis cache + dedup (if enabled),
    telemetry (if enabled). Shutdown order: HTTP client close, cache
    disconnect, telemetry shutdown, SQL engine dispose.
    """
    settings = get_settings()

    # ---- Startup ----
    # Shared HTTP client for provider API calls (connection reuse).
    app.state.http_client = httpx.AsyncClient(timeout=settings.action_timeout_seconds)

    memory_dedup = ensure_in_memory_deduplicator(app)
    if settings.redis_enabled:
        cache = CacheService()
        await cache.connect()
        app.state.cache = cache
        app.state.deduplicator = RedisEventDeduplicator(cache, memory_dedup)
    else:
        app.state.cache = None
        app.state.deduplicator = memory_dedup

    if settings.telemetry_enabled:
        from autoflow.shared.telemetry.telemetry import TelemetryConfig, set_telemetry

        telemetry = TelemetryConfig(
            service_name=settings.app_name,
            service_version=settings.app_version,
            enabled=True,
            environment=settings.telemetry_environment,
        )
        telemetry.setup_telemetry(
            exporter_type=settings.telemetry_exporter,
            otlp_endpoint=settings.telemetry_otlp_endpoint,
            sample_rate=settings.telemetry_sample_rate,
        )
        set_telemetry(telemetry)
        telemetry.instrument_fastapi(app)
        database.get_session_factory()
        if database.engine is not None:
            telemetry.instrument_sqlalchemy(database.engine)
        logger.info("Telemetry initialized")

    yield

    # ---- Shutdown ----
    if getattr(app.state, "http_client", None) is not None:
        await app.state.http_client.aclose()
        app.state.http_client = None
        logger.info("HTTP client closed")

    if getattr(app.state, "cache", None) is not None:
        await app.state.cache.disconnect()
        app.state.cache = None
        logger.info("Cache disconnected")
    app.state.deduplicator = memory_dedup

    from autoflow.shared.telemetry.telemetry import get_telemetry, set_telemetry

    telemetry_instance = get_telemetry()
    if telemetry_instance is not None:
        telemetry_instance.shutdown()
        set_telemetry(None)
        logger.info("Telemetry shutdown complete")

    await database.dispose_engine()
