"""Workflow repository. Returns domain WorkflowEntity (IWorkflowRepository)."""

from __future__ import annotations

from typing import Any

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from autoflow.domain.entities.workflow import ActionSpec, TriggerSpec, WorkflowEntity
from autoflow.infrastructure.persistence.models.workflow import (
    Workflow,
    WorkflowExecution,
)
from autoflow.infrastructure.persistence.repositories.base import BaseRepository
from autoflow.shared.enums import ExecutionStatus
from autoflow.shared.utils import ensure_utc, utc_now

_UPDATABLE_FIELDS = frozenset(
    {"name", "trigger_app", "trigger_event", "trigger_config", "actions", "enabled"}
)


def workflow_to_entity(w: Workflow) -> WorkflowEntity:
    """Map ORM Workflow to the domain WorkflowEntity."""
    return WorkflowEntity(
        id=w.id,
        owner_id=w.owner_id,
        name=w.name,
        trigger=TriggerSpec(
            app=w.trigger_app,
            event=w.trigger_event,
            config=dict(w.trigger_config or {}),
        ),
        actions=tuple(ActionSpec.from_dict(a) for a in (w.actions or [])),
        enabled=w.enabled,
        execution_count=w.execution_count,
        created_at=ensure_utc(w.created_at),
        updated_at=ensure_utc(w.updated_at),
        deleted_at=ensure_utc(w.deleted_at),
    )


class WorkflowRepository(BaseRepository[Workflow]):
    """Workflow repository."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Workflow)

    async def _get_live(self, workflow_id: str, owner_id: str) -> Workflow | None:
        result = await self.db.execute(
            select(Workflow).where(
                Workflow.id == workflow_id,
                Workflow.owner_id == owner_id,
                Workflow.deleted_at.is_(None),
            )
        )
        return result.scalar_one_or_none()

    async def get_by_id_and_owner(
        self, workflow_id: str, owner_id: str
    ) -> WorkflowEntity | None:
        """Return a live (not deleted) workflow owned by owner_id."""
        row = await self._get_live(workflow_id, owner_id)
        return workflow_to_entity(row) if row else None

    async def get_by_owner(
        self,
        owner_id: str,
        skip: int = 0,
        limit: int = 100,
        include_disabled: bool = True,
    ) -> list[WorkflowEntity]:
        """Return owner's live workflows, newest first."""
        q = select(Workflow).where(
            Workflow.owner_id == owner_id,
            Workflow.deleted_at.is_(None),
        )
        if not include_disabled:
            q = q.where(Workflow.enabled.is_(True))
        q = (
            q.order_by(Workflow.created_at.desc(), Workflow.id.desc())
            .offset(skip)
            .limit(limit)
        )
        result = await self.db.execute(q)
        return [workflow_to_entity(w) for w in result.scalars().all()]

    async def get_enabled_by_trigger(
        self, owner_id: str, trigger_app: str, trigger_event: str
    ) -> list[WorkflowEntity]:
        """Return enabled live workflows matching the trigger, oldest first."""
        result = await self.db.execute(
            select(Workflow)
            .where(
                Workflow.owner_id == owner_id,
                Workflow.trigger_app == trigger_app,
                Workflow.trigger_event == trigger_event,
                Workflow.enabled.is_(True),
                Workflow.deleted_at.is_(None),
            )
            .order_by(Workflow.created_at.asc(), Workflow.id.asc())
        )
        return [workflow_to_entity(w) for w in result.scalars().all()]

    async def create_workflow(
        self,
        owner_id: str,
        name: str,
        trigger_app: str,
        trigger_event: str,
        actions: list[dict[str, Any]],
        trigger_config: dict[str, Any] | None = None,
        enabled: bool = True,
    ) -> WorkflowEntity:
        """Create workflow; return created entity."""
        workflow = Workflow(
            owner_id=owner_id,
            name=name,
            trigger_app=trigger_app,
            trigger_event=trigger_event,
            trigger_config=trigger_config or {},
            actions=actions,
            enabled=enabled,
            execution_count=0,
        )
        return workflow_to_entity(await self.create(workflow))

    async def update_workflow(
        self, workflow_id: str, owner_id: str, changes: dict[str, Any]
    ) -> WorkflowEntity | None:
        """Apply definition changes; execution_count is never touched here."""
        row = await self._get_live(workflow_id, owner_id)
        if row is None:
            return None
        for key, value in changes.items():
            if key not in _UPDATABLE_FIELDS:
                raise ValueError(f"Workflow field {key!r} is not updatable")
            setattr(row, key, value)
        return workflow_to_entity(await self.update(row))

    async def soft_delete(
        self, workflow_id: str, owner_id: str, reason: str
    ) -> int | None:
        """Terminal delete plus invalidation of PENDING executions, in one transaction.

        Returns:
            Number of invalidated executions, or None if the workflow was not found.
        """
        row = await self._get_live(workflow_id, owner_id)
        if row is None:
            return None
        now = utc_now()
        row.enabled = False
        row.deleted_at = now
        await self.update(row)
        result = await self.db.execute(
            update(WorkflowExecution)
            .where(
                WorkflowExecution.workflow_id == workflow_id,
                WorkflowExecution.status == ExecutionStatus.PENDING.value,
            )
            .values(
                status=ExecutionStatus.FAILED.value,
                error_message=reason,
                finished_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount or 0

    async def increment_execution_count(self, workflow_id: str) -> bool:
        """Single-statement increment (no read-modify-write). Return whether a row matched."""
        result = await self.db.execute(
            update(Workflow)
            .where(Workflow.id == workflow_id)
            .values(
                execution_count=Workflow.execution_count + 1,
                updated_at=utc_now(),
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount > 0

    async def summary(self, owner_id: str) -> tuple[int, int, int]:
        """Return (total, active, total_executions) over owner's live workflows."""
        result = await self.db.execute(
            select(
                func.count(Workflow.id),
                func.count(Workflow.id).filter(Workflow.enabled.is_(True)),
                func.coalesce(func.sum(Workflow.execution_count), 0),
            ).where(
                Workflow.owner_id == owner_id,
                Workflow.deleted_at.is_(None),
            )
        )
        total, active, executions = result.one()
        return int(total or 0), int(active or 0), int(executions or 0)
