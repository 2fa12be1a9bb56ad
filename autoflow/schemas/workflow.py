"""Workflow API schemas."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from autoflow.domain.entities.workflow import WorkflowEntity


class WorkflowActionSchema(BaseModel):
    """One step of the action chain: provider app, task and its config."""

    app: str = Field(..., min_length=1, max_length=64)
    task: str = Field(..., min_length=1, max_length=128)
    config: dict[str, Any] = Field(default_factory=dict)


class WorkflowTriggerSchema(BaseModel):
    """Trigger: provider app + event type (+ optional config)."""

    app: str = Field(..., min_length=1, max_length=64)
    event: str = Field(..., min_length=1, max_length=128)
    config: dict[str, Any] = Field(default_factory=dict)


class WorkflowCreateRequest(BaseModel):
    """Request body for creating a workflow.

    An empty actions list is accepted here and rejected by the service
    with WORKFLOW_HAS_NO_ACTIONS (422).
    """

    name: str = Field(..., min_length=1, max_length=255)
    trigger: WorkflowTriggerSchema
    actions: list[WorkflowActionSchema]


class WorkflowUpdateRequest(BaseModel):
    """Request body for updating a workflow (partial)."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    trigger: WorkflowTriggerSchema | None = None
    actions: list[WorkflowActionSchema] | None = None


class WorkflowResponse(BaseModel):
    """Workflow as shown in the dashboard."""

    id: str
    name: str
    status: str
    enabled: bool
    trigger: WorkflowTriggerSchema
    actions: list[WorkflowActionSchema]
    execution_count: int
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, workflow: WorkflowEntity) -> "WorkflowResponse":
        return cls(
            id=workflow.id,
            name=workflow.name,
            status=workflow.state.value,
            enabled=workflow.enabled,
            trigger=WorkflowTriggerSchema(**workflow.trigger.to_dict()),
            actions=[WorkflowActionSchema(**a.to_dict()) for a in workflow.actions],
            execution_count=workflow.execution_count,
            created_at=workflow.created_at,
            updated_at=workflow.updated_at,
        )


class WorkflowSummaryResponse(BaseModel):
    """Real counts over the owner's workflows."""

    total: int
    active: int
    total_executions: int


class ManualRunRequest(BaseModel):
    """Optional sample trigger payload for a manual test run."""

    payload: dict[str, Any] = Field(default_factory=dict)
