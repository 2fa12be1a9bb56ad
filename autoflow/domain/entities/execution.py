"""Workflow execution domain entity.

An execution records one attempt to run a workflow's action chain for one
triggering event. The action plan is fixed at start: one result per action
of the snapshot, all SKIPPED until attempted.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any

from autoflow.domain.entities.workflow import ActionSpec
from autoflow.shared.enums import ActionResultStatus, ExecutionStatus
from autoflow.shared.utils.datetime import parse_iso_utc


@dataclass(frozen=True)
class ActionResult:
    """Outcome of one action in the chain."""

    action_index: int
    app: str
    task: str
    status: ActionResultStatus = ActionResultStatus.SKIPPED
    error: str | None = None
    started_at: datetime | None = None
    finished_at: datetime | None = None

    def succeeded(self, started_at: datetime, finished_at: datetime) -> ActionResult:
        return replace(
            self,
            status=ActionResultStatus.SUCCEEDED,
            error=None,
            started_at=started_at,
            finished_at=finished_at,
        )

    def failed(
        self, error: str, started_at: datetime, finished_at: datetime
    ) -> ActionResult:
        return replace(
            self,
            status=ActionResultStatus.FAILED,
            error=error,
            started_at=started_at,
            finished_at=finished_at,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "action_index": self.action_index,
            "app": self.app,
            "task": self.task,
            "status": self.status.value,
            "error": self.error,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ActionResult:
        return cls(
            action_index=int(data["action_index"]),
            app=data.get("app", ""),
            task=data.get("task", ""),
            status=ActionResultStatus(data.get("status", ActionResultStatus.SKIPPED.value)),
            error=data.get("error"),
            started_at=parse_iso_utc(data.get("started_at")),
            finished_at=parse_iso_utc(data.get("finished_at")),
        )


def plan_action_results(actions: Sequence[ActionSpec]) -> list[ActionResult]:
    """Return the fixed-length plan for a snapshot of actions (all SKIPPED)."""
    return [
        ActionResult(action_index=index, app=action.app, task=action.task)
        for index, action in enumerate(actions)
    ]


def compute_final_status(results: Sequence[ActionResult]) -> ExecutionStatus:
    """Derive the terminal status from the action results.

    All SUCCEEDED -> SUCCEEDED; none SUCCEEDED -> FAILED; otherwise PARTIAL.
    An empty plan is FAILED (a workflow without actions never succeeds).
    """
    succeeded = sum(1 for r in results if r.status == ActionResultStatus.SUCCEEDED)
    if results and succeeded == len(results):
        return ExecutionStatus.SUCCEEDED
    if succeeded == 0:
        return ExecutionStatus.FAILED
    return ExecutionStatus.PARTIAL


@dataclass
class ExecutionEntity:
    """Domain entity for a workflow execution (audit record)."""

    id: str
    workflow_id: str
    owner_id: str
    status: ExecutionStatus
    trigger_data: dict[str, Any]
    action_results: list[ActionResult] = field(default_factory=list)
    error_message: str | None = None
    started_at: datetime | None = None
    finished_at: datetime | None = None
    created_at: datetime | None = None

    @property
    def succeeded_count(self) -> int:
        return sum(
            1 for r in self.action_results if r.status == ActionResultStatus.SUCCEEDED
        )

    @property
    def failed_count(self) -> int:
        return sum(
            1 for r in self.action_results if r.status == ActionResultStatus.FAILED
        )

    def first_error(self) -> str | None:
        """Return the error of the first failed action, if any."""
        for result in self.action_results:
            if result.status == ActionResultStatus.FAILED:
                return result.error
        return None
