"""Tests for EventIngestor and the event deduplicators."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock

import pytest
import redis.asyncio as redis

from autoflow.application.dtos.event import RawEvent
from autoflow.application.use_cases.events import EventIngestor
from autoflow.domain.entities.event import TriggerEvent
from autoflow.domain.exceptions import DuplicateEventException, InvalidEventException
from autoflow.infrastructure.cache import (
    CacheService,
    InMemoryEventDeduplicator,
    RedisEventDeduplicator,
)
from tests.support import USER_ID, FakeCredentialStore


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def _raw(**overrides) -> RawEvent:
    fields = {
        "app": "slack",
        "event_type": "new_message",
        "payload": {"text": "hi"},
        "user_id": USER_ID,
        "event_id": "Ev1",
    }
    fields.update(overrides)
    return RawEvent(**fields)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def ingestor(clock) -> EventIngestor:
    creds = FakeCredentialStore()
    creds.connect(USER_ID, "slack", external_account_id="T1")
    return EventIngestor(InMemoryEventDeduplicator(clock=clock), creds, dedup_window_seconds=60)


# ---- ingestion ----


async def test_ingest_returns_normalized_event(ingestor) -> None:
    received = datetime(2026, 1, 1, 12, 0, tzinfo=UTC)

    event = await ingestor.ingest(_raw(app=" Slack ", received_at=received))

    assert event.app == "slack"
    assert event.event_type == "new_message"
    assert event.user_id == USER_ID
    assert event.payload == {"text": "hi"}
    assert event.received_at == received
    assert event.dedup_key == "dedup:slack:Ev1"


async def test_ingest_stamps_received_at_when_missing(ingestor) -> None:
    event = await ingestor.ingest(_raw())

    assert event.received_at.tzinfo is not None


async def test_ingest_resolves_user_from_external_account(ingestor) -> None:
    event = await ingestor.ingest(_raw(user_id=None, external_account_id="T1"))

    assert event.user_id == USER_ID


@pytest.mark.parametrize(
    ("overrides", "field"),
    [
        ({"app": ""}, "app"),
        ({"app": None}, "app"),
        ({"event_type": "  "}, "event_type"),
        ({"payload": ["not", "an", "object"]}, "payload"),
        ({"user_id": None}, "user_id"),
        ({"user_id": None, "external_account_id": "T-unknown"}, "user_id"),
    ],
)
async def test_ingest_rejects_invalid_events(ingestor, overrides, field) -> None:
    with pytest.raises(InvalidEventException) as exc_info:
        await ingestor.ingest(_raw(**overrides))
    assert exc_info.value.error_code == "INVALID_EVENT"
    assert exc_info.value.details["field"] == field


async def test_repeated_event_id_is_duplicate(ingestor) -> None:
    await ingestor.ingest(_raw())

    with pytest.raises(DuplicateEventException):
        await ingestor.ingest(_raw())


async def test_same_event_id_from_another_app_is_not_duplicate(ingestor) -> None:
    await ingestor.ingest(_raw())

    event = await ingestor.ingest(_raw(app="gmail", event_type="new_email"))

    assert event.app == "gmail"


async def test_event_id_is_accepted_again_after_window(ingestor, clock) -> None:
    await ingestor.ingest(_raw())
    clock.now += 61

    event = await ingestor.ingest(_raw())

    assert event.event_id == "Ev1"


async def test_events_without_id_are_never_deduplicated(ingestor) -> None:
    await ingestor.ingest(_raw(event_id=None))

    event = await ingestor.ingest(_raw(event_id=None))

    assert event.dedup_key is None


async def test_release_allows_resubmission(ingestor) -> None:
    event = await ingestor.ingest(_raw())

    await ingestor.release(event)

    assert (await ingestor.ingest(_raw())).event_id == "Ev1"


def test_dedup_key_hashes_ids_containing_separator() -> None:
    event = TriggerEvent(
        app="gmail",
        event_type="new_email",
        user_id=USER_ID,
        payload={},
        received_at=datetime.now(UTC),
        event_id="a:b",
    )

    prefix, app, digest = event.dedup_key.split(":")
    assert (prefix, app) == ("dedup", "gmail")
    assert len(digest) == 64


# ---- in-memory deduplicator ----


async def test_in_memory_dedup_evicts_oldest_when_full(clock) -> None:
    dedup = InMemoryEventDeduplicator(max_entries=2, clock=clock)

    assert await dedup.seen_or_remember("a", 60) is False
    assert await dedup.seen_or_remember("b", 60) is False
    assert await dedup.seen_or_remember("c", 60) is False

    assert len(dedup) == 2
    assert await dedup.seen_or_remember("a", 60) is False
    assert await dedup.seen_or_remember("c", 60) is True


async def test_in_memory_dedup_drops_expired_entries(clock) -> None:
    dedup = InMemoryEventDeduplicator(clock=clock)
    await dedup.seen_or_remember("a", 10)
    clock.now += 11

    await dedup.seen_or_remember("b", 10)

    assert len(dedup) == 1


# ---- redis deduplicator ----


async def test_redis_dedup_uses_set_nx_result(clock) -> None:
    cache = AsyncMock()
    cache.add_if_absent = AsyncMock(side_effect=[True, False])
    dedup = RedisEventDeduplicator(cache, InMemoryEventDeduplicator(clock=clock))

    assert await dedup.seen_or_remember("dedup:slack:Ev1", 60) is False
    assert await dedup.seen_or_remember("dedup:slack:Ev1", 60) is True
    cache.add_if_absent.assert_awaited_with("dedup:slack:Ev1", 1, 60)


async def test_redis_dedup_falls_back_when_unavailable(clock) -> None:
    cache = AsyncMock()
    cache.add_if_absent = AsyncMock(return_value=None)
    dedup = RedisEventDeduplicator(cache, InMemoryEventDeduplicator(clock=clock))

    assert await dedup.seen_or_remember("k", 60) is False
    assert await dedup.seen_or_remember("k", 60) is True


async def test_redis_dedup_forget_clears_both_layers(clock) -> None:
    cache = AsyncMock()
    cache.add_if_absent = AsyncMock(return_value=None)
    fallback = InMemoryEventDeduplicator(clock=clock)
    dedup = RedisEventDeduplicator(cache, fallback)
    await dedup.seen_or_remember("k", 60)

    await dedup.forget("k")

    cache.delete.assert_awaited_once_with("k")
    assert len(fallback) == 0


# ---- cache service ----


async def test_cache_add_if_absent_maps_set_nx() -> None:
    client = AsyncMock()
    client.set = AsyncMock(side_effect=[True, None])
    cache = CacheService(redis_client=client)

    assert await cache.add_if_absent("k", 1, 60) is True
    assert await cache.add_if_absent("k", 1, 60) is False
    client.set.assert_awaited_with("k", "1", ex=60, nx=True)


async def test_cache_reports_unavailable_instead_of_raising() -> None:
    client = AsyncMock()
    client.set = AsyncMock(side_effect=redis.ConnectionError("down"))

    assert await CacheService(redis_client=client).add_if_absent("k", 1, 60) is None
    assert await CacheService().add_if_absent("k", 1, 60) is None
    assert await CacheService().delete("k") is False
