"""Manual Test Execution: run a workflow now through the real orchestrator path."""

from __future__ import annotations

from typing import Any

from autoflow.application.interfaces.repositories import IExecutionStore
from autoflow.application.use_cases.workflows.orchestrator import (
    ExecutionOrchestrator,
)
from autoflow.domain.entities.event import TriggerEvent
from autoflow.domain.entities.execution import ExecutionEntity
from autoflow.domain.exceptions import ResourceNotFoundException
from autoflow.shared.telemetry.logging import get_logger
from autoflow.shared.utils import utc_now

logger = get_logger(__name__)


class ManualRunService:
    """Synthesizes a TriggerEvent for the workflow's own trigger and runs it.

    Bypasses the matcher only (so disabled workflows can be tested); credential
    checks and failure handling are those of a real run.
    """

    def __init__(self, store: IExecutionStore, orchestrator: ExecutionOrchestrator) -> None:
        self.store = store
        self.orchestrator = orchestrator

    async def test(
        self,
        workflow_id: str,
        owner_id: str,
        payload: dict[str, Any] | None = None,
    ) -> ExecutionEntity:
        """Return the completed execution; business failures are in its status.

        Raises:
            ResourceNotFoundException: Unknown, deleted, or another user's workflow.
            StoreUnavailableException: Persistence failed.
        """
        workflow = await self.store.get_workflow(workflow_id)
        if workflow is None or workflow.is_deleted or not workflow.belongs_to(owner_id):
            raise ResourceNotFoundException("workflow", workflow_id)
        event = TriggerEvent(
            app=workflow.trigger.app,
            event_type=workflow.trigger.event,
            user_id=owner_id,
            payload=dict(payload or {}),
            received_at=utc_now(),
        )
        logger.info("Manual test run of workflow %s by %s", workflow_id, owner_id)
        return await self.orchestrator.run(workflow, event)
