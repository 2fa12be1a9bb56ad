"""Action executor registry keyed by provider app id."""

from __future__ import annotations

import httpx

from autoflow.application.interfaces.services import IActionExecutor
from autoflow.core.config import Settings
from autoflow.domain.entities.workflow import normalize_app
from autoflow.domain.exceptions import ActionExecutionException
from autoflow.infrastructure.external.providers.calendar import CalendarActionExecutor
from autoflow.infrastructure.external.providers.gmail import GmailActionExecutor
from autoflow.infrastructure.external.providers.slack import SlackActionExecutor
from autoflow.infrastructure.external.providers.templating import (
    ActionTemplateRenderer,
)
from autoflow.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


class ActionExecutorRegistry:
    """Maps app id -> executor. Unknown apps fail as unsupported_app."""

    def __init__(self, executors: dict[str, IActionExecutor] | None = None) -> None:
        self._executors: dict[str, IActionExecutor] = {}
        for app, executor in (executors or {}).items():
            self.register(app, executor)

    def register(self, app: str, executor: IActionExecutor) -> None:
        self._executors[normalize_app(app)] = executor
        logger.debug("Registered action executor for %s", app)

    def get(self, app: str) -> IActionExecutor:
        executor = self._executors.get(normalize_app(app))
        if executor is None:
            raise ActionExecutionException(app, "unsupported_app")
        return executor

    def supported_apps(self) -> list[str]:
        return sorted(self._executors)


def build_default_registry(
    settings: Settings, http_client: httpx.AsyncClient | None = None
) -> ActionExecutorRegistry:
    """Registry with the built-in Slack, Gmail and Calendar executors."""
    renderer = ActionTemplateRenderer()
    return ActionExecutorRegistry(
        {
            SlackActionExecutor.app: SlackActionExecutor(
                base_url=settings.slack_api_base_url,
                http_client=http_client,
                renderer=renderer,
            ),
            GmailActionExecutor.app: GmailActionExecutor(
                base_url=settings.gmail_api_base_url,
                http_client=http_client,
                renderer=renderer,
            ),
            CalendarActionExecutor.app: CalendarActionExecutor(
                base_url=settings.calendar_api_base_url,
                http_client=http_client,
                renderer=renderer,
            ),
        }
    )
