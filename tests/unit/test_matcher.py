"""Tests for WorkflowMatcher (enabled, owner, trigger, creation order)."""

from datetime import timedelta

import pytest

from autoflow.application.use_cases.workflows import WorkflowMatcher
from autoflow.domain.entities.event import TriggerEvent
from autoflow.domain.exceptions import InvalidEventException
from autoflow.shared.utils import utc_now
from tests.support import OTHER_USER_ID, USER_ID


def _event(app: str = "slack", event_type: str = "new_message", user_id: str = USER_ID):
    return TriggerEvent(
        app=app,
        event_type=event_type,
        user_id=user_id,
        payload={},
        received_at=utc_now(),
    )


async def test_matches_enabled_workflows_with_same_trigger(store, make_workflow) -> None:
    wanted = await make_workflow()
    await make_workflow(trigger=("gmail", "new_email"))
    await make_workflow(trigger=("slack", "reaction_added"))

    matched = await WorkflowMatcher(store).match(_event())

    assert [w.id for w in matched] == [wanted.id]


async def test_disabled_workflow_is_never_matched(store, make_workflow) -> None:
    await make_workflow(enabled=False)

    assert await WorkflowMatcher(store).match(_event()) == []


async def test_other_users_workflows_are_not_matched(store, make_workflow) -> None:
    await make_workflow(owner_id=OTHER_USER_ID)

    assert await WorkflowMatcher(store).match(_event()) == []


async def test_matches_are_ordered_oldest_first(store, make_workflow) -> None:
    base = utc_now()
    newest = await make_workflow(created_at=base + timedelta(minutes=2))
    oldest = await make_workflow(created_at=base - timedelta(minutes=2))
    middle = await make_workflow(created_at=base)

    matched = await WorkflowMatcher(store).match(_event())

    assert [w.id for w in matched] == [oldest.id, middle.id, newest.id]


async def test_app_id_is_case_insensitive(store, make_workflow) -> None:
    workflow = await make_workflow()

    matched = await WorkflowMatcher(store).match(_event(app="Slack"))

    assert [w.id for w in matched] == [workflow.id]


async def test_event_without_user_is_invalid(store) -> None:
    with pytest.raises(InvalidEventException) as exc_info:
        await WorkflowMatcher(store).match(_event(user_id=""))
    assert exc_info.value.details["field"] == "user_id"
