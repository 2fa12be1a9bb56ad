"""Workflow management: create, edit, enable/disable, delete, list, summary.

Guards the invariants the engine relies on: at least one action, valid
configs, trigger app connected at creation, deletion is terminal.
"""

from __future__ import annotations

from typing import Any

from autoflow.application.dtos.workflow import (
    WorkflowCreate,
    WorkflowSummary,
    WorkflowUpdate,
)
from autoflow.application.interfaces.repositories import (
    IExecutionStore,
    IWorkflowRepository,
)
from autoflow.application.interfaces.services import ICredentialStore
from autoflow.core.constants import ERROR_WORKFLOW_DELETED
from autoflow.domain.entities.execution import ExecutionEntity
from autoflow.domain.entities.workflow import (
    WorkflowEntity,
    ensure_has_actions,
    normalize_app,
)
from autoflow.domain.exceptions import (
    CredentialNotConnectedException,
    ResourceNotFoundException,
    ValidationException,
)
from autoflow.domain.value_objects.configs import (
    parse_trigger_config,
    validate_action_config,
)
from autoflow.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


def _require_text(value: str | None, field: str) -> str:
    text = (value or "").strip()
    if not text:
        raise ValidationException(f"{field} is required", field=field)
    return text


def normalize_actions(actions: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Validate and canonicalize an action list for storage (order preserved)."""
    normalized: list[dict[str, Any]] = []
    for index, raw in enumerate(actions):
        prefix = f"actions.{index}"
        app = normalize_app(_require_text(raw.get("app"), f"{prefix}.app"))
        task = _require_text(raw.get("task"), f"{prefix}.task")
        config = raw.get("config") or {}
        if not isinstance(config, dict):
            raise ValidationException("Action config must be an object", field=f"{prefix}.config")
        validate_action_config(app, task, config, field=f"{prefix}.config")
        normalized.append({"app": app, "task": task, "config": config})
    return normalized


class WorkflowService:
    """Owner-scoped workflow CRUD. Another user's workflow is reported as not found."""

    def __init__(
        self,
        workflow_repo: IWorkflowRepository,
        store: IExecutionStore,
        credential_store: ICredentialStore,
    ) -> None:
        self.workflow_repo = workflow_repo
        self.store = store
        self.credential_store = credential_store

    async def _require(self, owner_id: str, workflow_id: str) -> WorkflowEntity:
        workflow = await self.workflow_repo.get_by_id_and_owner(workflow_id, owner_id)
        if workflow is None:
            raise ResourceNotFoundException("workflow", workflow_id)
        return workflow

    async def _require_connected(self, owner_id: str, app: str) -> None:
        if not await self.credential_store.is_connected(owner_id, app):
            raise CredentialNotConnectedException(owner_id, app)

    async def create(self, owner_id: str, data: WorkflowCreate) -> WorkflowEntity:
        """Create an enabled workflow.

        Raises:
            WorkflowHasNoActionsException: actions is empty.
            ValidationException: name, trigger or a config is invalid.
            CredentialNotConnectedException: trigger app not connected for owner.
        """
        name = _require_text(data.name, "name")
        ensure_has_actions(data.actions)
        trigger_app = normalize_app(_require_text(data.trigger_app, "trigger.app"))
        trigger_event = _require_text(data.trigger_event, "trigger.event")
        parse_trigger_config(trigger_app, trigger_event, data.trigger_config)
        actions = normalize_actions(data.actions)
        await self._require_connected(owner_id, trigger_app)

        workflow = await self.workflow_repo.create_workflow(
            owner_id=owner_id,
            name=name,
            trigger_app=trigger_app,
            trigger_event=trigger_event,
            trigger_config=dict(data.trigger_config or {}),
            actions=actions,
        )
        logger.info(
            "Workflow %s created by %s (%s/%s, %d action(s))",
            workflow.id,
            owner_id,
            trigger_app,
            trigger_event,
            len(actions),
        )
        return workflow

    async def update(
        self, owner_id: str, workflow_id: str, data: WorkflowUpdate
    ) -> WorkflowEntity:
        """Edit name, trigger or actions. In-flight executions keep their snapshot."""
        current = await self._require(owner_id, workflow_id)
        changes: dict[str, Any] = {}
        if data.name is not None:
            changes["name"] = _require_text(data.name, "name")

        trigger_app = current.trigger.app
        trigger_event = current.trigger.event
        if data.trigger_app is not None:
            trigger_app = normalize_app(_require_text(data.trigger_app, "trigger.app"))
        if data.trigger_event is not None:
            trigger_event = _require_text(data.trigger_event, "trigger.event")
        trigger_changed = (trigger_app, trigger_event) != (
            current.trigger.app,
            current.trigger.event,
        )
        if trigger_changed or data.trigger_config is not None:
            trigger_config = (
                data.trigger_config
                if data.trigger_config is not None
                else dict(current.trigger.config)
            )
            parse_trigger_config(trigger_app, trigger_event, trigger_config)
            changes["trigger_config"] = dict(trigger_config)
        if trigger_changed:
            if trigger_app != current.trigger.app:
                await self._require_connected(owner_id, trigger_app)
            changes["trigger_app"] = trigger_app
            changes["trigger_event"] = trigger_event

        if data.actions is not None:
            ensure_has_actions(data.actions, workflow_id)
            changes["actions"] = normalize_actions(data.actions)

        if not changes:
            return current
        updated = await self.workflow_repo.update_workflow(workflow_id, owner_id, changes)
        if updated is None:
            raise ResourceNotFoundException("workflow", workflow_id)
        logger.info("Workflow %s updated (%s)", workflow_id, ", ".join(sorted(changes)))
        return updated

    async def enable(self, owner_id: str, workflow_id: str) -> WorkflowEntity:
        current = await self._require(owner_id, workflow_id)
        ensure_has_actions(current.actions, workflow_id)
        return await self._set_enabled(owner_id, current, True)

    async def disable(self, owner_id: str, workflow_id: str) -> WorkflowEntity:
        current = await self._require(owner_id, workflow_id)
        return await self._set_enabled(owner_id, current, False)

    async def _set_enabled(
        self, owner_id: str, current: WorkflowEntity, enabled: bool
    ) -> WorkflowEntity:
        if current.enabled == enabled:
            return current
        updated = await self.workflow_repo.update_workflow(
            current.id, owner_id, {"enabled": enabled}
        )
        if updated is None:
            raise ResourceNotFoundException("workflow", current.id)
        logger.info("Workflow %s %s", current.id, "enabled" if enabled else "disabled")
        return updated

    async def delete(self, owner_id: str, workflow_id: str) -> None:
        """Terminal soft delete; PENDING executions become FAILED(workflow_deleted)."""
        invalidated = await self.workflow_repo.soft_delete(
            workflow_id, owner_id, ERROR_WORKFLOW_DELETED
        )
        if invalidated is None:
            raise ResourceNotFoundException("workflow", workflow_id)
        logger.info(
            "Workflow %s deleted; %d pending execution(s) invalidated",
            workflow_id,
            invalidated,
        )

    async def get(self, owner_id: str, workflow_id: str) -> WorkflowEntity:
        return await self._require(owner_id, workflow_id)

    async def list_workflows(
        self,
        owner_id: str,
        include_disabled: bool = True,
        skip: int = 0,
        limit: int = 100,
    ) -> list[WorkflowEntity]:
        return await self.workflow_repo.get_by_owner(
            owner_id, skip=skip, limit=limit, include_disabled=include_disabled
        )

    async def summary(self, owner_id: str) -> WorkflowSummary:
        total, active, executions = await self.workflow_repo.summary(owner_id)
        return WorkflowSummary(total=total, active=active, total_executions=executions)

    async def list_executions(
        self, owner_id: str, workflow_id: str, skip: int = 0, limit: int = 50
    ) -> list[ExecutionEntity]:
        """Execution history, newest first. Kept readable after the workflow is deleted."""
        workflow = await self.store.get_workflow(workflow_id)
        if workflow is None or not workflow.belongs_to(owner_id):
            raise ResourceNotFoundException("workflow", workflow_id)
        return await self.store.list_executions(workflow_id, skip=skip, limit=limit)

    async def get_execution(self, owner_id: str, execution_id: str) -> ExecutionEntity:
        execution = await self.store.get_execution(execution_id)
        if execution is None or execution.owner_id != owner_id:
            raise ResourceNotFoundException("workflow_execution", execution_id)
        return execution
