"""Base class for HTTP action executors (one subclass per provider app)."""

from __future__ import annotations

from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from typing import Any, ClassVar

import httpx

from autoflow.application.dtos.action import ActionOutcome
from autoflow.application.dtos.connection import Token
from autoflow.domain.entities.workflow import ActionSpec
from autoflow.domain.exceptions import ActionExecutionException, ValidationException
from autoflow.domain.value_objects.configs import parse_action_config
from autoflow.infrastructure.external.providers.templating import (
    ActionTemplateRenderer,
)
from autoflow.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

TaskHandler = Callable[[httpx.AsyncClient, Token, Any], Awaitable[dict[str, Any]]]


class HttpActionExecutor:
    """Renders and validates action config, then calls the provider task handler.

    Subclasses set app and map task names to handler method names in tasks.
    Provider failures are raised as ActionExecutionException.
    """

    app: ClassVar[str]
    tasks: ClassVar[dict[str, str]]

    def __init__(
        self,
        *,
        base_url: str,
        http_client: httpx.AsyncClient | None = None,
        renderer: ActionTemplateRenderer | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._shared_http = http_client
        self._renderer = renderer or ActionTemplateRenderer()

    @asynccontextmanager
    async def _http_cm(self) -> AsyncIterator[httpx.AsyncClient]:
        """Yield shared HTTP client or a short-lived one."""
        if self._shared_http is not None:
            yield self._shared_http
            return
        async with httpx.AsyncClient() as client:
            yield client

    async def execute(
        self, action: ActionSpec, token: Token, payload: dict[str, Any]
    ) -> ActionOutcome:
        handler_name = self.tasks.get(action.task)
        if handler_name is None:
            raise ActionExecutionException(self.app, f"unsupported_task:{action.task}")
        handler: TaskHandler = getattr(self, handler_name)
        rendered = self._renderer.render_config(self.app, action.config, payload)
        try:
            config = parse_action_config(self.app, action.task, rendered)
        except ValidationException as e:
            raise ActionExecutionException(self.app, f"invalid_config: {e.message}") from e
        logger.debug("Calling %s/%s", self.app, action.task)
        async with self._http_cm() as client:
            response = await handler(client, token, config)
        return ActionOutcome(provider=self.app, task=action.task, response=response)

    async def _post_json(
        self,
        client: httpx.AsyncClient,
        token: Token,
        path: str,
        body: dict[str, Any],
    ) -> dict[str, Any]:
        """POST JSON with bearer auth; map HTTP and transport errors to ActionExecutionException."""
        url = f"{self._base_url}/{path.lstrip('/')}"
        try:
            response = await client.post(
                url,
                json=body,
                headers={"Authorization": f"Bearer {token.access_token}"},
            )
            response.raise_for_status()
        except httpx.TimeoutException as e:
            raise ActionExecutionException(self.app, "timeout") from e
        except httpx.HTTPStatusError as e:
            raise ActionExecutionException(
                self.app, f"http_{e.response.status_code}"
            ) from e
        except httpx.TransportError as e:
            raise ActionExecutionException(
                self.app, f"transport_error: {type(e).__name__}"
            ) from e
        try:
            data = response.json()
        except ValueError:
            return {}
        return data if isinstance(data, dict) else {"result": data}
