"""Execution Orchestrator: runs one workflow's action chain for one event.

Sequence per run: snapshot actions, persist PENDING execution, move to
RUNNING, run actions strictly in order (first failure aborts the chain),
persist the terminal status, count the attempt. Business failures become
recorded action results; only Execution Store failures propagate.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from typing import Any

from autoflow.application.interfaces.repositories import IExecutionStore
from autoflow.application.interfaces.services import (
    IActionExecutorRegistry,
    ICredentialStore,
)
from autoflow.core.constants import ERROR_NO_ACTIONS, ERROR_NOT_CONNECTED, ERROR_TIMEOUT
from autoflow.domain.entities.event import TriggerEvent
from autoflow.domain.entities.execution import (
    ExecutionEntity,
    compute_final_status,
    plan_action_results,
)
from autoflow.domain.entities.workflow import ActionSpec, WorkflowEntity
from autoflow.domain.exceptions import (
    ActionExecutionException,
    AutoflowException,
    CredentialNotConnectedException,
    StoreUnavailableException,
)
from autoflow.shared.enums import ExecutionStatus
from autoflow.shared.telemetry import add_span_attributes, add_span_event, traced
from autoflow.shared.telemetry.logging import get_logger
from autoflow.shared.utils import generate_cuid, utc_now

logger = get_logger(__name__)


class ExecutionOrchestrator:
    """Runs workflows against events, for both manual and event-driven runs."""

    def __init__(
        self,
        store: IExecutionStore,
        credential_store: ICredentialStore,
        executors: IActionExecutorRegistry,
        action_timeout_seconds: float = 30.0,
    ) -> None:
        self.store = store
        self.credential_store = credential_store
        self.executors = executors
        self.action_timeout_seconds = action_timeout_seconds

    @traced("execution.run")
    async def run(self, workflow: WorkflowEntity, event: TriggerEvent) -> ExecutionEntity:
        """Run workflow for event; always return the recorded execution.

        Raises:
            StoreUnavailableException: If the execution could not be persisted,
                or a store read or write failed mid-run (``execution_id`` set).
        """
        actions = workflow.snapshot_actions()
        execution = ExecutionEntity(
            id=generate_cuid(),
            workflow_id=workflow.id,
            owner_id=workflow.owner_id,
            status=ExecutionStatus.PENDING,
            trigger_data=dict(event.payload),
            action_results=plan_action_results(actions),
        )
        execution = await self.store.create_execution(execution)
        add_span_attributes(workflow_id=workflow.id, execution_id=execution.id)
        logger.info(
            "Execution %s created for workflow %s (%d action(s))",
            execution.id,
            workflow.id,
            len(actions),
        )

        try:
            execution = await self._drive(execution, workflow, actions, event.payload)
        except StoreUnavailableException as e:
            e.execution_id = execution.id
            await self._count_attempt_after_failure(workflow.id)
            raise
        except Exception:
            await self._count_attempt_after_failure(workflow.id)
            raise
        await self.store.increment_execution_count(workflow.id)

        add_span_attributes(status=execution.status.value)
        logger.info(
            "Execution %s finished: %s (succeeded=%d, failed=%d)",
            execution.id,
            execution.status.value,
            execution.succeeded_count,
            execution.failed_count,
        )
        return execution

    async def _drive(
        self,
        execution: ExecutionEntity,
        workflow: WorkflowEntity,
        actions: Sequence[ActionSpec],
        payload: dict[str, Any],
    ) -> ExecutionEntity:
        if not actions:
            logger.warning("Workflow %s has no actions; failing execution", workflow.id)
            execution.status = ExecutionStatus.FAILED
            execution.error_message = ERROR_NO_ACTIONS
            execution.finished_at = utc_now()
            await self.store.finish_execution(execution)
            return execution

        if not await self.store.mark_running(execution.id):
            # Invalidated between creation and start (workflow deleted).
            logger.warning(
                "Execution %s no longer pending; not started", execution.id
            )
            current = await self.store.get_execution(execution.id)
            return current or execution
        execution.status = ExecutionStatus.RUNNING
        execution.started_at = utc_now()

        for index, action in enumerate(actions):
            started_at = utc_now()
            error = await self._attempt(workflow, action, payload)
            finished_at = utc_now()
            result = execution.action_results[index]
            if error is None:
                execution.action_results[index] = result.succeeded(started_at, finished_at)
            else:
                execution.action_results[index] = result.failed(
                    error, started_at, finished_at
                )
                logger.warning(
                    "Execution %s action %d (%s/%s) failed: %s",
                    execution.id,
                    index,
                    action.app,
                    action.task,
                    error,
                )
            await self.store.save_action_results(execution.id, execution.action_results)
            if error is not None:
                add_span_event("chain_aborted", {"action_index": index, "error": error})
                break

        execution.status = compute_final_status(execution.action_results)
        execution.error_message = execution.first_error()
        execution.finished_at = utc_now()
        await self.store.finish_execution(execution)
        return execution

    async def _attempt(
        self, workflow: WorkflowEntity, action: ActionSpec, payload: dict[str, Any]
    ) -> str | None:
        """Run one action. Return None on success, else the error string to record."""
        try:
            token = await self.credential_store.get_token(workflow.owner_id, action.app)
            executor = self.executors.get(action.app)
            async with asyncio.timeout(self.action_timeout_seconds):
                await executor.execute(action, token, payload)
        except CredentialNotConnectedException:
            return ERROR_NOT_CONNECTED
        except TimeoutError:
            return ERROR_TIMEOUT
        except ActionExecutionException as e:
            return e.message
        except StoreUnavailableException:
            raise
        except AutoflowException as e:
            return e.error_code.lower()
        except Exception as e:
            logger.exception(
                "Unexpected error in %s/%s for workflow %s",
                action.app,
                action.task,
                workflow.id,
            )
            return f"unexpected_error:{type(e).__name__}"
        return None

    async def _count_attempt_after_failure(self, workflow_id: str) -> None:
        try:
            await self.store.increment_execution_count(workflow_id)
        except StoreUnavailableException:
            logger.error("Could not count failed attempt for workflow %s", workflow_id)
