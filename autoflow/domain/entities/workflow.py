"""Workflow domain entity.

A workflow is a definition: one trigger (app + event type) and an ordered,
non-empty list of actions. Execution statistics (execution_count) are the
only fields the engine mutates.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from autoflow.domain.exceptions import WorkflowHasNoActionsException
from autoflow.shared.enums import WorkflowState


def normalize_app(app: str) -> str:
    """Return the canonical (lowercase, stripped) app identifier."""
    return app.strip().lower()


@dataclass(frozen=True)
class TriggerSpec:
    """What causes a workflow to be considered: app + event type (+ config)."""

    app: str
    event: str
    config: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"app": self.app, "event": self.event, "config": dict(self.config)}


@dataclass(frozen=True)
class ActionSpec:
    """One step of the action chain, targeting a provider app."""

    app: str
    task: str
    config: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"app": self.app, "task": self.task, "config": dict(self.config)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ActionSpec:
        return cls(
            app=normalize_app(data["app"]),
            task=data["task"],
            config=dict(data.get("config") or {}),
        )


def ensure_has_actions(
    actions: Sequence[ActionSpec] | Sequence[dict[str, Any]],
    workflow_id: str | None = None,
) -> None:
    """Raise WorkflowHasNoActionsException when actions is empty."""
    if not actions:
        raise WorkflowHasNoActionsException(workflow_id)


@dataclass
class WorkflowEntity:
    """Domain entity for a workflow definition (trigger + ordered actions)."""

    id: str
    owner_id: str
    name: str
    trigger: TriggerSpec
    actions: tuple[ActionSpec, ...]
    enabled: bool
    execution_count: int
    created_at: datetime
    updated_at: datetime
    deleted_at: datetime | None = None

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    @property
    def state(self) -> WorkflowState:
        """Dashboard state: active when enabled, paused otherwise."""
        return WorkflowState.ACTIVE if self.enabled else WorkflowState.PAUSED

    def belongs_to(self, user_id: str) -> bool:
        """Return whether this workflow is owned by the given user."""
        return self.owner_id == user_id

    def can_trigger_on(self, app: str, event_type: str, user_id: str) -> bool:
        """Return whether an event (app, type, user) should run this workflow."""
        return (
            self.enabled
            and not self.is_deleted
            and self.owner_id == user_id
            and self.trigger.app == normalize_app(app)
            and self.trigger.event == event_type
        )

    def snapshot_actions(self) -> tuple[ActionSpec, ...]:
        """Return the action chain as of now (immutable; safe against later edits)."""
        return tuple(self.actions)
