"""DTOs for event ingestion (no dependency on ORM or presentation schemas)."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from autoflow.domain.entities.execution import ExecutionEntity


@dataclass(frozen=True)
class RawEvent:
    """Inbound event after provider-specific normalization, before validation.

    user_id is set for internal events; provider webhooks carry an
    external_account_id (e.g. Slack team id) resolved to a user by the ingestor.
    """

    app: str | None
    event_type: str | None
    payload: dict[str, Any] = field(default_factory=dict)
    user_id: str | None = None
    external_account_id: str | None = None
    event_id: str | None = None
    received_at: datetime | None = None


@dataclass(frozen=True)
class DispatchResult:
    """Outcome of dispatching one inbound event.

    status: processed | duplicate | invalid | ignored.
    """

    status: str
    executions: list[ExecutionEntity] = field(default_factory=list)
    reason: str | None = None
