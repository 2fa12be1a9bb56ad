"""Inbound event API schemas."""

from typing import Literal

from pydantic import BaseModel, Field

from autoflow.schemas.execution import WorkflowExecutionResponse


class EventDispatchResponse(BaseModel):
    """Result of handling one inbound event."""

    status: Literal["processed", "duplicate", "invalid", "ignored"]
    reason: str | None = None
    executions: list[WorkflowExecutionResponse] = Field(default_factory=list)


class SlackChallengeResponse(BaseModel):
    """Echo of the Slack url_verification challenge."""

    challenge: str
