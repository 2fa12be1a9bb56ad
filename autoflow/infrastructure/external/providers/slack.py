"""Slack action executor (Web API chat.postMessage)."""

from __future__ import annotations

from typing import Any

import httpx

from autoflow.application.dtos.connection import Token
from autoflow.domain.exceptions import ActionExecutionException
from autoflow.domain.value_objects.configs import SlackSendMessageConfig
from autoflow.infrastructure.external.providers.base import HttpActionExecutor


class SlackActionExecutor(HttpActionExecutor):
    """Slack provider. Slack answers 200 with ok=false on API errors."""

    app = "slack"
    tasks = {"send_message": "_send_message"}

    async def _send_message(
        self,
        client: httpx.AsyncClient,
        token: Token,
        config: SlackSendMessageConfig,
    ) -> dict[str, Any]:
        data = await self._post_json(
            client,
            token,
            "chat.postMessage",
            {"channel": config.channel, "text": config.text},
        )
        if not data.get("ok"):
            raise ActionExecutionException(
                self.app, f"slack_error:{data.get('error', 'unknown')}"
            )
        return {"channel": data.get("channel"), "ts": data.get("ts")}
