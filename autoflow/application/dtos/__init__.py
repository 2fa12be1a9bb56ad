"""Application DTOs (frozen dataclasses)."""

from autoflow.application.dtos.action import ActionOutcome
from autoflow.application.dtos.connection import ConnectionResult, Token
from autoflow.application.dtos.event import DispatchResult, RawEvent
from autoflow.application.dtos.workflow import (
    WorkflowCreate,
    WorkflowSummary,
    WorkflowUpdate,
)

__all__ = [
    "ActionOutcome",
    "ConnectionResult",
    "DispatchResult",
    "RawEvent",
    "Token",
    "WorkflowCreate",
    "WorkflowSummary",
    "WorkflowUpdate",
]
