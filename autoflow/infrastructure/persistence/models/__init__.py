"""Persistence models: ORM entities and mixins."""

from autoflow.infrastructure.persistence.models.app_connection import AppConnection
from autoflow.infrastructure.persistence.models.mixins import (
    CuidMixin,
    SoftDeleteMixin,
    TimestampMixin,
)
from autoflow.infrastructure.persistence.models.workflow import (
    Workflow,
    WorkflowExecution,
)

__all__ = [
    "AppConnection",
    "CuidMixin",
    "SoftDeleteMixin",
    "TimestampMixin",
    "Workflow",
    "WorkflowExecution",
]
