"""Gmail action executor (REST users.messages.send with a base64url RFC 822 message)."""

from __future__ import annotations

import base64
from email.message import EmailMessage
from typing import Any

import httpx

from autoflow.application.dtos.connection import Token
from autoflow.domain.value_objects.configs import GmailSendEmailConfig
from autoflow.infrastructure.external.providers.base import HttpActionExecutor


def build_raw_message(config: GmailSendEmailConfig) -> str:
    """Return the base64url-encoded MIME message Gmail expects in 'raw'."""
    message = EmailMessage()
    message["To"] = ", ".join(config.to)
    message["Subject"] = config.subject
    message.set_content(config.body)
    return base64.urlsafe_b64encode(message.as_bytes()).decode()


class GmailActionExecutor(HttpActionExecutor):
    """Gmail provider."""

    app = "gmail"
    tasks = {"send_email": "_send_email"}

    async def _send_email(
        self,
        client: httpx.AsyncClient,
        token: Token,
        config: GmailSendEmailConfig,
    ) -> dict[str, Any]:
        data = await self._post_json(
            client,
            token,
            "users/me/messages/send",
            {"raw": build_raw_message(config)},
        )
        return {"id": data.get("id"), "thread_id": data.get("threadId")}
