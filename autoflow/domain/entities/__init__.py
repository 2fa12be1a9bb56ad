"""Domain entities (pure Python; no ORM or framework imports)."""

from autoflow.domain.entities.event import TriggerEvent
from autoflow.domain.entities.execution import (
    ActionResult,
    ExecutionEntity,
    compute_final_status,
    plan_action_results,
)
from autoflow.domain.entities.workflow import (
    ActionSpec,
    TriggerSpec,
    WorkflowEntity,
    ensure_has_actions,
    normalize_app,
)

__all__ = [
    "ActionResult",
    "ActionSpec",
    "ExecutionEntity",
    "TriggerEvent",
    "TriggerSpec",
    "WorkflowEntity",
    "compute_final_status",
    "ensure_has_actions",
    "normalize_app",
    "plan_action_results",
]
