"""Repository interfaces (ports) for the application layer.

The engine talks only to IExecutionStore; the concrete SQL implementation
lives in infrastructure. Implementations raise StoreUnavailableException
when the backing database cannot be reached.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from autoflow.domain.entities.execution import ActionResult, ExecutionEntity
    from autoflow.domain.entities.workflow import WorkflowEntity


# Execution store interface
class IExecutionStore(Protocol):
    """Persistence of workflows, executions and execution statistics."""

    async def get_workflow(self, workflow_id: str) -> WorkflowEntity | None:
        """Return the workflow (deleted ones included), or None."""

    async def find_enabled_by_trigger(
        self, owner_id: str, app: str, event_type: str
    ) -> list[WorkflowEntity]:
        """Return enabled, non-deleted workflows of owner with this trigger (oldest first)."""

    async def create_execution(self, execution: ExecutionEntity) -> ExecutionEntity:
        """Insert a new execution row (status PENDING)."""

    async def mark_running(self, execution_id: str) -> bool:
        """Move PENDING -> RUNNING. Return False if the execution is no longer PENDING."""

    async def save_action_results(
        self, execution_id: str, results: Sequence[ActionResult]
    ) -> None:
        """Checkpoint per-action progress of a running execution."""

    async def finish_execution(self, execution: ExecutionEntity) -> None:
        """Persist terminal status, action results, error and finished_at."""

    async def increment_execution_count(self, workflow_id: str) -> bool:
        """Atomically add 1 to the workflow's execution_count."""

    async def list_executions(
        self, workflow_id: str, skip: int = 0, limit: int = 50
    ) -> list[ExecutionEntity]:
        """Return executions of a workflow, newest first."""

    async def get_execution(self, execution_id: str) -> ExecutionEntity | None:
        """Return one execution by id."""


# Workflow repository interface (CRUD layer, session-scoped)
class IWorkflowRepository(Protocol):
    """Workflow definitions owned by a user. Deleted workflows are invisible."""

    async def get_by_id_and_owner(
        self, workflow_id: str, owner_id: str
    ) -> WorkflowEntity | None:
        """Return a live workflow owned by owner_id."""

    async def get_by_owner(
        self,
        owner_id: str,
        skip: int = 0,
        limit: int = 100,
        include_disabled: bool = True,
    ) -> list[WorkflowEntity]:
        """Return owner's live workflows, newest first."""

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
        """Create a workflow with execution_count 0."""

    async def update_workflow(
        self, workflow_id: str, owner_id: str, changes: dict[str, Any]
    ) -> WorkflowEntity | None:
        """Apply definition changes; None when not found."""

    async def soft_delete(
        self, workflow_id: str, owner_id: str, reason: str
    ) -> int | None:
        """Delete and invalidate PENDING executions; None when not found."""

    async def summary(self, owner_id: str) -> tuple[int, int, int]:
        """Return (total, active, total_executions)."""
