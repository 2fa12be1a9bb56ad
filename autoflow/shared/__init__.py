"""Shared utilities: context, enums, telemetry, and cross-cutting helpers.

Used by domain, application, and infrastructure. No business logic.
"""

from autoflow.shared.enums import ActionResultStatus, ExecutionStatus, WorkflowState

__all__ = [
    "ActionResultStatus",
    "ExecutionStatus",
    "WorkflowState",
]
