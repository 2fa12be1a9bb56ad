"""SQL-backed Execution Store (the engine's only persistence dependency).

Each primitive runs in its own short transaction on a fresh session, so
concurrent executions never share a session and no primitive reads before
it writes. Database errors surface as StoreUnavailableException.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from autoflow.domain.entities.execution import ActionResult, ExecutionEntity
from autoflow.domain.entities.workflow import WorkflowEntity, normalize_app
from autoflow.domain.exceptions import StoreUnavailableException
from autoflow.infrastructure.persistence.repositories.execution_repo import (
    WorkflowExecutionRepository,
    execution_to_entity,
)
from autoflow.infrastructure.persistence.repositories.workflow_repo import (
    WorkflowRepository,
    workflow_to_entity,
)
from autoflow.shared.telemetry.logging import get_logger
from autoflow.shared.utils import utc_now

logger = get_logger(__name__)


class SqlExecutionStore:
    """IExecutionStore over SQLAlchemy async sessions."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    @asynccontextmanager
    async def _transaction(self, operation: str) -> AsyncIterator[AsyncSession]:
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    yield session
        except (SQLAlchemyError, OSError) as e:
            logger.error(
                "Execution store operation %s failed: %s",
                operation,
                type(e).__name__,
                exc_info=True,
            )
            raise StoreUnavailableException(operation, type(e).__name__) from e

    async def get_workflow(self, workflow_id: str) -> WorkflowEntity | None:
        async with self._transaction("get_workflow") as session:
            row = await WorkflowRepository(session).get_by_id(workflow_id)
            return workflow_to_entity(row) if row else None

    async def find_enabled_by_trigger(
        self, owner_id: str, app: str, event_type: str
    ) -> list[WorkflowEntity]:
        async with self._transaction("find_enabled_by_trigger") as session:
            return await WorkflowRepository(session).get_enabled_by_trigger(
                owner_id, normalize_app(app), event_type
            )

    async def create_execution(self, execution: ExecutionEntity) -> ExecutionEntity:
        async with self._transaction("create_execution") as session:
            row = await WorkflowExecutionRepository(session).create_execution(execution)
            created_at = row.created_at
        execution.created_at = created_at
        return execution

    async def mark_running(self, execution_id: str) -> bool:
        async with self._transaction("mark_running") as session:
            return await WorkflowExecutionRepository(session).mark_running(
                execution_id, utc_now()
            )

    async def save_action_results(
        self, execution_id: str, results: Sequence[ActionResult]
    ) -> None:
        async with self._transaction("save_action_results") as session:
            await WorkflowExecutionRepository(session).save_action_results(
                execution_id, results
            )

    async def finish_execution(self, execution: ExecutionEntity) -> None:
        finished_at = execution.finished_at or utc_now()
        async with self._transaction("finish_execution") as session:
            updated = await WorkflowExecutionRepository(session).finish(
                execution.id,
                execution.status,
                execution.action_results,
                execution.error_message,
                finished_at,
            )
        if not updated:
            logger.warning(
                "Execution %s was already terminal; final state not overwritten",
                execution.id,
            )

    async def increment_execution_count(self, workflow_id: str) -> bool:
        async with self._transaction("increment_execution_count") as session:
            return await WorkflowRepository(session).increment_execution_count(
                workflow_id
            )

    async def list_executions(
        self, workflow_id: str, skip: int = 0, limit: int = 50
    ) -> list[ExecutionEntity]:
        async with self._transaction("list_executions") as session:
            rows = await WorkflowExecutionRepository(session).get_by_workflow(
                workflow_id, skip=skip, limit=limit
            )
            return [execution_to_entity(r) for r in rows]

    async def get_execution(self, execution_id: str) -> ExecutionEntity | None:
        async with self._transaction("get_execution") as session:
            row = await WorkflowExecutionRepository(session).get_by_id(execution_id)
            return execution_to_entity(row) if row else None

