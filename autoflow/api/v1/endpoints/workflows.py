"""Workflow API: thin routes delegating to WorkflowService and ManualRunService."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, Response

from autoflow.api.v1.dependencies import (
    get_current_user_id,
    get_manual_run_service,
    get_workflow_service,
    get_workflow_service_for_write,
)
from autoflow.application.dtos.workflow import WorkflowCreate, WorkflowUpdate
from autoflow.application.use_cases.workflows import ManualRunService, WorkflowService
from autoflow.core.limiter import limit_manual_runs, limit_writes
from autoflow.schemas.execution import WorkflowExecutionResponse
from autoflow.schemas.workflow import (
    ManualRunRequest,
    WorkflowCreateRequest,
    WorkflowResponse,
    WorkflowSummaryResponse,
    WorkflowUpdateRequest,
)

router = APIRouter()


@router.get("", response_model=list[WorkflowResponse])
async def list_workflows(
    user_id: Annotated[str, Depends(get_current_user_id)],
    service: Annotated[WorkflowService, Depends(get_workflow_service)],
    include_disabled: bool = Query(True),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
):
    """List the caller's workflows, newest first."""
    workflows = await service.list_workflows(
        user_id, include_disabled=include_disabled, skip=skip, limit=limit
    )
    return [WorkflowResponse.from_entity(w) for w in workflows]


@router.get("/summary", response_model=WorkflowSummaryResponse)
async def workflow_summary(
    user_id: Annotated[str, Depends(get_current_user_id)],
    service: Annotated[WorkflowService, Depends(get_workflow_service)],
):
    """Totals over the caller's workflows (real counts only)."""
    summary = await service.summary(user_id)
    return WorkflowSummaryResponse(
        total=summary.total,
        active=summary.active,
        total_executions=summary.total_executions,
    )


@router.post("", response_model=WorkflowResponse, status_code=201)
@limit_writes
async def create_workflow(
    request: Request,
    body: WorkflowCreateRequest,
    user_id: Annotated[str, Depends(get_current_user_id)],
    service: Annotated[WorkflowService, Depends(get_workflow_service_for_write)],
):
    """Create an enabled workflow. The trigger app must be connected."""
    workflow = await service.create(
        user_id,
        WorkflowCreate(
            name=body.name,
            trigger_app=body.trigger.app,
            trigger_event=body.trigger.event,
            trigger_config=body.trigger.config,
            actions=[a.model_dump() for a in body.actions],
        ),
    )
    return WorkflowResponse.from_entity(workflow)


@router.get(
    "/executions/{execution_id}",
    response_model=WorkflowExecutionResponse,
)
async def get_execution(
    execution_id: str,
    user_id: Annotated[str, Depends(get_current_user_id)],
    service: Annotated[WorkflowService, Depends(get_workflow_service)],
):
    """Get one execution of the caller's workflows."""
    execution = await service.get_execution(user_id, execution_id)
    return WorkflowExecutionResponse.from_entity(execution)


@router.get("/{workflow_id}", response_model=WorkflowResponse)
async def get_workflow(
    workflow_id: str,
    user_id: Annotated[str, Depends(get_current_user_id)],
    service: Annotated[WorkflowService, Depends(get_workflow_service)],
):
    workflow = await service.get(user_id, workflow_id)
    return WorkflowResponse.from_entity(workflow)


@router.patch("/{workflow_id}", response_model=WorkflowResponse)
@limit_writes
async def update_workflow(
    request: Request,
    workflow_id: str,
    body: WorkflowUpdateRequest,
    user_id: Annotated[str, Depends(get_current_user_id)],
    service: Annotated[WorkflowService, Depends(get_workflow_service_for_write)],
):
    """Edit name, trigger or actions. Runs already started keep their snapshot."""
    trigger = body.trigger
    workflow = await service.update(
        user_id,
        workflow_id,
        WorkflowUpdate(
            name=body.name,
            trigger_app=trigger.app if trigger else None,
            trigger_event=trigger.event if trigger else None,
            trigger_config=trigger.config if trigger else None,
            actions=(
                [a.model_dump() for a in body.actions]
                if body.actions is not None
                else None
            ),
        ),
    )
    return WorkflowResponse.from_entity(workflow)


@router.delete("/{workflow_id}", status_code=204)
@limit_writes
async def delete_workflow(
    request: Request,
    workflow_id: str,
    user_id: Annotated[str, Depends(get_current_user_id)],
    service: Annotated[WorkflowService, Depends(get_workflow_service_for_write)],
) -> Response:
    """Delete (terminal). Pending executions are marked failed."""
    await service.delete(user_id, workflow_id)
    return Response(status_code=204)


@router.post("/{workflow_id}/enable", response_model=WorkflowResponse)
@limit_writes
async def enable_workflow(
    request: Request,
    workflow_id: str,
    user_id: Annotated[str, Depends(get_current_user_id)],
    service: Annotated[WorkflowService, Depends(get_workflow_service_for_write)],
):
    workflow = await service.enable(user_id, workflow_id)
    return WorkflowResponse.from_entity(workflow)


@router.post("/{workflow_id}/disable", response_model=WorkflowResponse)
@limit_writes
async def disable_workflow(
    request: Request,
    workflow_id: str,
    user_id: Annotated[str, Depends(get_current_user_id)],
    service: Annotated[WorkflowService, Depends(get_workflow_service_for_write)],
):
    workflow = await service.disable(user_id, workflow_id)
    return WorkflowResponse.from_entity(workflow)


@router.post("/{workflow_id}/test", response_model=WorkflowExecutionResponse)
@limit_manual_runs
async def run_workflow_now(
    request: Request,
    workflow_id: str,
    user_id: Annotated[str, Depends(get_current_user_id)],
    service: Annotated[ManualRunService, Depends(get_manual_run_service)],
    body: ManualRunRequest | None = None,
):
    """Run the workflow now. Returns 200 with the execution even when it failed."""
    execution = await service.test(
        workflow_id, user_id, payload=body.payload if body else None
    )
    return WorkflowExecutionResponse.from_entity(execution)


@router.get(
    "/{workflow_id}/executions",
    response_model=list[WorkflowExecutionResponse],
)
async def list_workflow_executions(
    workflow_id: str,
    user_id: Annotated[str, Depends(get_current_user_id)],
    service: Annotated[WorkflowService, Depends(get_workflow_service)],
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=500),
):
    """Execution history for a workflow, newest first."""
    executions = await service.list_executions(
        user_id, workflow_id, skip=skip, limit=limit
    )
    return [WorkflowExecutionResponse.from_entity(e) for e in executions]
