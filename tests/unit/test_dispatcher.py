"""Tests for EventDispatcher (ingest, match, fan-out, duplicate handling)."""

from unittest.mock import AsyncMock

import pytest

from autoflow.application.dtos.event import RawEvent
from autoflow.application.use_cases.events import EventDispatcher, EventIngestor
from autoflow.application.use_cases.workflows import (
    ExecutionOrchestrator,
    WorkflowMatcher,
)
from autoflow.domain.exceptions import StoreUnavailableException
from autoflow.infrastructure.cache.dedup import InMemoryEventDeduplicator
from autoflow.shared.enums import ExecutionStatus
from tests.support import USER_ID, action


def _raw(event_id: str | None = "Ev1", **payload) -> RawEvent:
    return RawEvent(
        app="slack",
        event_type="new_message",
        payload=payload or {"text": "hello"},
        user_id=USER_ID,
        event_id=event_id,
    )


@pytest.fixture
def dedup() -> InMemoryEventDeduplicator:
    return InMemoryEventDeduplicator()


@pytest.fixture
def dispatcher(store, credentials, registry, dedup) -> EventDispatcher:
    return EventDispatcher(
        EventIngestor(dedup, credentials),
        WorkflowMatcher(store),
        ExecutionOrchestrator(store, credentials, registry),
    )


async def test_event_runs_every_matching_workflow(dispatcher, make_workflow, executors) -> None:
    first = await make_workflow()
    second = await make_workflow(actions=[action("gmail", "send_email", to=["a@example.com"])])
    await make_workflow(enabled=False)

    result = await dispatcher.dispatch(_raw())

    assert result.status == "processed"
    assert sorted(e.workflow_id for e in result.executions) == sorted([first.id, second.id])
    assert all(e.status == ExecutionStatus.SUCCEEDED for e in result.executions)
    assert len(executors["slack"].calls) == 1
    assert len(executors["gmail"].calls) == 1


async def test_duplicate_delivery_produces_one_execution(dispatcher, store, make_workflow) -> None:
    workflow = await make_workflow()

    first = await dispatcher.dispatch(_raw())
    second = await dispatcher.dispatch(_raw())

    assert first.status == "processed"
    assert second.status == "duplicate"
    assert second.executions == []
    assert len(await store.list_executions(workflow.id)) == 1
    assert (await store.get_workflow(workflow.id)).execution_count == 1


async def test_event_with_no_match_is_processed_without_executions(dispatcher) -> None:
    result = await dispatcher.dispatch(_raw())

    assert result.status == "processed"
    assert result.executions == []


async def test_invalid_event_is_reported(dispatcher) -> None:
    raw = RawEvent(app="slack", event_type="", payload={}, user_id=USER_ID)

    result = await dispatcher.dispatch(raw)

    assert result.status == "invalid"
    assert result.reason == "missing event type"


async def test_one_failing_workflow_does_not_stop_others(
    store, credentials, registry, dedup, make_workflow
) -> None:
    """Only the store failure of one run is isolated; the other run completes."""
    healthy = await make_workflow()
    broken = await make_workflow()

    class PartlyFailingStore:
        def __init__(self, inner):
            self._inner = inner

        def __getattr__(self, name):
            return getattr(self._inner, name)

        async def create_execution(self, execution):
            if execution.workflow_id == broken.id:
                raise StoreUnavailableException("create_execution", "OperationalError")
            return await self._inner.create_execution(execution)

    dispatcher = EventDispatcher(
        EventIngestor(dedup, credentials),
        WorkflowMatcher(store),
        ExecutionOrchestrator(PartlyFailingStore(store), credentials, registry),
    )

    result = await dispatcher.dispatch(_raw())

    assert result.status == "processed"
    assert [e.workflow_id for e in result.executions] == [healthy.id]
    assert len(dedup) == 1


async def test_store_failure_releases_event_for_retry(
    store, credentials, registry, dedup, make_workflow
) -> None:
    await make_workflow()
    failing_store = AsyncMock(wraps=store)
    failing_store.create_execution = AsyncMock(
        side_effect=StoreUnavailableException("create_execution", "OperationalError")
    )
    dispatcher = EventDispatcher(
        EventIngestor(dedup, credentials),
        WorkflowMatcher(store),
        ExecutionOrchestrator(failing_store, credentials, registry),
    )

    with pytest.raises(StoreUnavailableException):
        await dispatcher.dispatch(_raw())
    assert len(dedup) == 0


async def test_matcher_store_failure_releases_event(credentials, dedup) -> None:
    store = AsyncMock()
    store.find_enabled_by_trigger = AsyncMock(
        side_effect=StoreUnavailableException("find_enabled_by_trigger")
    )
    dispatcher = EventDispatcher(
        EventIngestor(dedup, credentials),
        WorkflowMatcher(store),
        ExecutionOrchestrator(store, credentials, AsyncMock()),
    )

    with pytest.raises(StoreUnavailableException):
        await dispatcher.dispatch(_raw())
    assert len(dedup) == 0


async def test_store_failure_after_execution_recorded_keeps_event_seen(
    store, credentials, registry, dedup, make_workflow
) -> None:
    workflow = await make_workflow()

    class FinishFailsOnceStore:
        def __init__(self, inner):
            self._inner = inner
            self.failed = False

        def __getattr__(self, name):
            return getattr(self._inner, name)

        async def finish_execution(self, execution):
            if not self.failed:
                self.failed = True
                raise StoreUnavailableException("finish_execution", "OperationalError")
            return await self._inner.finish_execution(execution)

    dispatcher = EventDispatcher(
        EventIngestor(dedup, credentials),
        WorkflowMatcher(store),
        ExecutionOrchestrator(FinishFailsOnceStore(store), credentials, registry),
    )

    with pytest.raises(StoreUnavailableException) as exc_info:
        await dispatcher.dispatch(_raw())
    redelivered = await dispatcher.dispatch(_raw())

    assert exc_info.value.execution_id is not None
    assert redelivered.status == "duplicate"
    assert len(dedup) == 1
    assert len(await store.list_executions(workflow.id)) == 1
    assert (await store.get_workflow(workflow.id)).execution_count == 1
