"""Workflow Matcher: TriggerEvent -> enabled workflows of the event's user."""

from __future__ import annotations

from autoflow.application.interfaces.repositories import IExecutionStore
from autoflow.domain.entities.event import TriggerEvent
from autoflow.domain.entities.workflow import WorkflowEntity
from autoflow.domain.exceptions import InvalidEventException
from autoflow.shared.telemetry import add_span_attributes, traced
from autoflow.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


class WorkflowMatcher:
    """Pure read over the Execution Store; no side effects."""

    def __init__(self, store: IExecutionStore) -> None:
        self.store = store

    @traced("workflow.match")
    async def match(self, event: TriggerEvent) -> list[WorkflowEntity]:
        """Return enabled workflows of event.user_id with trigger (app, event_type), oldest first.

        Raises:
            InvalidEventException: If the event carries no user id.
        """
        if not event.user_id:
            raise InvalidEventException("event has no user", field="user_id")
        candidates = await self.store.find_enabled_by_trigger(
            event.user_id, event.app, event.event_type
        )
        matched = [
            w
            for w in candidates
            if w.can_trigger_on(event.app, event.event_type, event.user_id)
        ]
        matched.sort(key=lambda w: (w.created_at, w.id))
        add_span_attributes(matched_workflows=len(matched))
        logger.debug(
            "Matched %d workflow(s) for %s/%s user=%s",
            len(matched),
            event.app,
            event.event_type,
            event.user_id,
        )
        return matched
