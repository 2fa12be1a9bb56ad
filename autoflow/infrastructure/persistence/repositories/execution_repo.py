"""WorkflowExecution repository. Status transitions are conditional single UPDATEs."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from autoflow.domain.entities.execution import ActionResult, ExecutionEntity
from autoflow.infrastructure.persistence.models.workflow import WorkflowExecution
from autoflow.infrastructure.persistence.repositories.base import BaseRepository
from autoflow.shared.enums import ExecutionStatus
from autoflow.shared.utils import ensure_utc, utc_now

_OPEN_STATUSES = (ExecutionStatus.PENDING.value, ExecutionStatus.RUNNING.value)


def execution_to_entity(e: WorkflowExecution) -> ExecutionEntity:
    """Map ORM WorkflowExecution to the domain ExecutionEntity."""
    return ExecutionEntity(
        id=e.id,
        workflow_id=e.workflow_id,
        owner_id=e.owner_id,
        status=ExecutionStatus(e.status),
        trigger_data=dict(e.trigger_data or {}),
        action_results=[ActionResult.from_dict(r) for r in (e.action_results or [])],
        error_message=e.error_message,
        started_at=ensure_utc(e.started_at),
        finished_at=ensure_utc(e.finished_at),
        created_at=ensure_utc(e.created_at),
    )


def _results_to_json(results: Sequence[ActionResult]) -> list[dict]:
    return [r.to_dict() for r in results]


class WorkflowExecutionRepository(BaseRepository[WorkflowExecution]):
    """Workflow execution repository."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, WorkflowExecution)

    async def create_execution(self, execution: ExecutionEntity) -> WorkflowExecution:
        """Insert the execution row exactly as planned (no prior read)."""
        row = WorkflowExecution(
            id=execution.id,
            workflow_id=execution.workflow_id,
            owner_id=execution.owner_id,
            status=execution.status.value,
            trigger_data=execution.trigger_data,
            action_results=_results_to_json(execution.action_results),
            error_message=execution.error_message,
            started_at=execution.started_at,
            finished_at=execution.finished_at,
            created_at=execution.created_at or utc_now(),
        )
        self.db.add(row)
        await self.db.flush()
        return row

    async def mark_running(self, execution_id: str, started_at: datetime) -> bool:
        """PENDING -> RUNNING. Return False if the row is no longer PENDING."""
        result = await self.db.execute(
            update(WorkflowExecution)
            .where(
                WorkflowExecution.id == execution_id,
                WorkflowExecution.status == ExecutionStatus.PENDING.value,
            )
            .values(status=ExecutionStatus.RUNNING.value, started_at=started_at)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount > 0

    async def save_action_results(
        self, execution_id: str, results: Sequence[ActionResult]
    ) -> None:
        """Checkpoint action results of a RUNNING execution."""
        await self.db.execute(
            update(WorkflowExecution)
            .where(
                WorkflowExecution.id == execution_id,
                WorkflowExecution.status == ExecutionStatus.RUNNING.value,
            )
            .values(action_results=_results_to_json(results))
            .execution_options(synchronize_session=False)
        )

    async def finish(
        self,
        execution_id: str,
        status: ExecutionStatus,
        results: Sequence[ActionResult],
        error_message: str | None,
        finished_at: datetime,
    ) -> bool:
        """Set terminal state. Terminal rows are never overwritten."""
        result = await self.db.execute(
            update(WorkflowExecution)
            .where(
                WorkflowExecution.id == execution_id,
                WorkflowExecution.status.in_(_OPEN_STATUSES),
            )
            .values(
                status=status.value,
                action_results=_results_to_json(results),
                error_message=error_message,
                finished_at=finished_at,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount > 0

    async def get_by_workflow(
        self, workflow_id: str, skip: int = 0, limit: int = 50
    ) -> list[WorkflowExecution]:
        """Return executions of a workflow, newest first."""
        result = await self.db.execute(
            select(WorkflowExecution)
            .where(WorkflowExecution.workflow_id == workflow_id)
            .order_by(WorkflowExecution.created_at.desc(), WorkflowExecution.id.desc())
            .offset(skip)
            .limit(limit)
        )
        return list(result.scalars().all())
