"""Event dispatch: ingest -> match -> run every matched workflow concurrently."""

from __future__ import annotations

import asyncio

from autoflow.application.dtos.event import DispatchResult, RawEvent
from autoflow.application.use_cases.events.ingestor import EventIngestor
from autoflow.application.use_cases.workflows.matcher import WorkflowMatcher
from autoflow.application.use_cases.workflows.orchestrator import (
    ExecutionOrchestrator,
)
from autoflow.domain.entities.execution import ExecutionEntity
from autoflow.domain.exceptions import (
    DuplicateEventException,
    InvalidEventException,
    StoreUnavailableException,
)
from autoflow.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


class EventDispatcher:
    """Entry point for inbound events (webhooks).

    Invalid and duplicate events are dropped and reported in the result.
    Matched workflows are isolated from each other: one failing run does not
    stop the others.
    """

    def __init__(
        self,
        ingestor: EventIngestor,
        matcher: WorkflowMatcher,
        orchestrator: ExecutionOrchestrator,
    ) -> None:
        self.ingestor = ingestor
        self.matcher = matcher
        self.orchestrator = orchestrator

    async def dispatch(self, raw: RawEvent) -> DispatchResult:
        """Process one inbound event.

        Raises:
            StoreUnavailableException: No execution succeeded. The event id
                is released only if no execution was recorded, so the
                provider's retry cannot produce a second one.
        """
        try:
            event = await self.ingestor.ingest(raw)
        except InvalidEventException as e:
            reason = e.details.get("reason", e.message)
            logger.warning("Dropped invalid event from %s: %s", raw.app, reason)
            return DispatchResult(status="invalid", reason=reason)
        except DuplicateEventException as e:
            logger.info("Dropped duplicate event %s", e.details.get("event_id"))
            return DispatchResult(status="duplicate")

        try:
            workflows = await self.matcher.match(event)
        except StoreUnavailableException:
            await self.ingestor.release(event)
            raise

        if not workflows:
            logger.debug("No workflow matched %s/%s", event.app, event.event_type)
            return DispatchResult(status="processed")

        outcomes = await asyncio.gather(
            *(self.orchestrator.run(w, event) for w in workflows),
            return_exceptions=True,
        )
        executions: list[ExecutionEntity] = []
        failures: list[BaseException] = []
        for workflow, outcome in zip(workflows, outcomes, strict=True):
            if isinstance(outcome, ExecutionEntity):
                executions.append(outcome)
                continue
            if not isinstance(outcome, Exception):
                raise outcome
            failures.append(outcome)
            logger.error(
                "Workflow %s failed for event %s: %s",
                workflow.id,
                event.event_id,
                type(outcome).__name__,
            )

        if failures and not executions:
            if all(_failed_before_recording(f) for f in failures):
                await self.ingestor.release(event)
            else:
                logger.warning(
                    "Keeping event %s as seen: an execution was already recorded",
                    event.event_id,
                )
            raise failures[0]
        return DispatchResult(status="processed", executions=executions)


def _failed_before_recording(exc: BaseException) -> bool:
    """True when the run failed before its execution row was persisted."""
    return isinstance(exc, StoreUnavailableException) and exc.execution_id is None
