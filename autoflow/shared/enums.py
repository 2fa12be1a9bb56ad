"""Shared enumerations for the autoflow application.

Cross-cutting enums used by domain, application and infrastructure
(execution lifecycle, per-action outcome).
"""

from enum import Enum


class _ValuesMixin:
    """Mixin that adds a values() classmethod to str Enums."""

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings."""
        return [member.value for member in cls]


class ExecutionStatus(_ValuesMixin, str, Enum):
    """Workflow execution lifecycle status.

    PENDING -> RUNNING -> {SUCCEEDED, FAILED, PARTIAL}. RUNNING never reverts.
    """

    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    PARTIAL = "partial"

    @property
    def is_terminal(self) -> bool:
        """Return whether no further transition is allowed."""
        return self in (
            ExecutionStatus.SUCCEEDED,
            ExecutionStatus.FAILED,
            ExecutionStatus.PARTIAL,
        )


class ActionResultStatus(_ValuesMixin, str, Enum):
    """Outcome of a single action inside an execution."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SKIPPED = "skipped"


class WorkflowState(_ValuesMixin, str, Enum):
    """Workflow state as shown in the dashboard list."""

    ACTIVE = "active"
    PAUSED = "paused"
