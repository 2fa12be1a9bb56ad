"""Test doubles for the engine's external collaborators."""

import asyncio
from typing import Any

from autoflow.application.dtos.action import ActionOutcome
from autoflow.application.dtos.connection import Token
from autoflow.domain.entities.workflow import ActionSpec
from autoflow.domain.exceptions import CredentialNotConnectedException

USER_ID = "user-1"
OTHER_USER_ID = "user-2"


class FakeCredentialStore:
    """In-memory ICredentialStore: connect(user, app) before use."""

    def __init__(self) -> None:
        self.tokens: dict[tuple[str, str], Token] = {}
        self.accounts: dict[tuple[str, str], str] = {}

    def connect(
        self, user_id: str, app: str, external_account_id: str | None = None
    ) -> None:
        self.tokens[(user_id, app)] = Token(app=app, access_token=f"tok-{user_id}-{app}")
        if external_account_id:
            self.accounts[(app, external_account_id)] = user_id

    def disconnect(self, user_id: str, app: str) -> None:
        self.tokens.pop((user_id, app), None)

    async def get_token(self, user_id: str, app: str) -> Token:
        token = self.tokens.get((user_id, app))
        if token is None:
            raise CredentialNotConnectedException(user_id, app)
        return token

    async def is_connected(self, user_id: str, app: str) -> bool:
        return (user_id, app) in self.tokens

    async def resolve_user(self, app: str, external_account_id: str) -> str | None:
        return self.accounts.get((app, external_account_id))


class RecordingExecutor:
    """IActionExecutor that records calls.

    Raises `error` (for every task, or only those in fail_tasks) and sleeps
    `delay` seconds before answering when set.
    """

    def __init__(
        self,
        app: str,
        error: BaseException | None = None,
        delay: float = 0.0,
        fail_tasks: set[str] | None = None,
    ) -> None:
        self.app = app
        self.error = error
        self.delay = delay
        self.fail_tasks = fail_tasks or set()
        self.calls: list[tuple[ActionSpec, Token, dict[str, Any]]] = []

    async def execute(
        self, action: ActionSpec, token: Token, payload: dict[str, Any]
    ) -> ActionOutcome:
        self.calls.append((action, token, dict(payload)))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None and (
            not self.fail_tasks or action.task in self.fail_tasks
        ):
            raise self.error
        return ActionOutcome(provider=self.app, task=action.task, response={"ok": True})


def action(app: str = "slack", task: str = "send_message", **config: Any) -> dict[str, Any]:
    """Action dict as stored on a workflow."""
    return {
        "app": app,
        "task": task,
        "config": config or {"channel": "#general", "text": "hi"},
    }
