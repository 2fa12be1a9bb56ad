"""DTOs for workflow management use cases."""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class WorkflowCreate:
    """Input for creating a workflow."""

    name: str
    trigger_app: str
    trigger_event: str
    actions: list[dict[str, Any]]
    trigger_config: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class WorkflowUpdate:
    """Partial update; None means unchanged."""

    name: str | None = None
    trigger_app: str | None = None
    trigger_event: str | None = None
    trigger_config: dict[str, Any] | None = None
    actions: list[dict[str, Any]] | None = None


@dataclass(frozen=True)
class WorkflowSummary:
    """Real counts for the dashboard header."""

    total: int
    active: int
    total_executions: int
