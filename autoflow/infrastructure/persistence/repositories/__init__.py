"""Persistence repositories. Re-exports for dependency injection."""

from autoflow.infrastructure.persistence.repositories.app_connection_repo import (
    AppConnectionRepository,
)
from autoflow.infrastructure.persistence.repositories.base import BaseRepository
from autoflow.infrastructure.persistence.repositories.execution_repo import (
    WorkflowExecutionRepository,
    execution_to_entity,
)
from autoflow.infrastructure.persistence.repositories.workflow_repo import (
    WorkflowRepository,
    workflow_to_entity,
)

__all__ = [
    "AppConnectionRepository",
    "BaseRepository",
    "WorkflowExecutionRepository",
    "WorkflowRepository",
    "execution_to_entity",
    "workflow_to_entity",
]
