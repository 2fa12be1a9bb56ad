"""Workflow execution API schemas."""

from datetime import datetime

from pydantic import BaseModel

from autoflow.domain.entities.execution import ActionResult, ExecutionEntity


class ActionResultResponse(BaseModel):
    """Outcome of one action of the chain."""

    action_index: int
    app: str
    task: str
    status: str
    error: str | None = None
    started_at: datetime | None = None
    finished_at: datetime | None = None

    @classmethod
    def from_result(cls, result: ActionResult) -> "ActionResultResponse":
        return cls(
            action_index=result.action_index,
            app=result.app,
            task=result.task,
            status=result.status.value,
            error=result.error,
            started_at=result.started_at,
            finished_at=result.finished_at,
        )


class WorkflowExecutionResponse(BaseModel):
    """Workflow execution (audit record)."""

    id: str
    workflow_id: str
    status: str
    trigger_data: dict
    action_results: list[ActionResultResponse]
    actions_succeeded: int
    actions_failed: int
    error_message: str | None = None
    started_at: datetime | None = None
    finished_at: datetime | None = None
    created_at: datetime | None = None

    @classmethod
    def from_entity(cls, execution: ExecutionEntity) -> "WorkflowExecutionResponse":
        return cls(
            id=execution.id,
            workflow_id=execution.workflow_id,
            status=execution.status.value,
            trigger_data=execution.trigger_data,
            action_results=[
                ActionResultResponse.from_result(r) for r in execution.action_results
            ],
            actions_succeeded=execution.succeeded_count,
            actions_failed=execution.failed_count,
            error_message=execution.error_message,
            started_at=execution.started_at,
            finished_at=execution.finished_at,
            created_at=execution.created_at,
        )
