"""Google Calendar action executor (events.insert)."""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

import httpx

from autoflow.application.dtos.connection import Token
from autoflow.domain.value_objects.configs import CalendarCreateEventConfig
from autoflow.infrastructure.external.providers.base import HttpActionExecutor


class CalendarActionExecutor(HttpActionExecutor):
    """Google Calendar provider."""

    app = "calendar"
    tasks = {"create_event": "_create_event"}

    async def _create_event(
        self,
        client: httpx.AsyncClient,
        token: Token,
        config: CalendarCreateEventConfig,
    ) -> dict[str, Any]:
        data = await self._post_json(
            client,
            token,
            f"calendars/{quote(config.calendar_id, safe='')}/events",
            {
                "summary": config.summary,
                "start": {"dateTime": config.start},
                "end": {"dateTime": config.end},
            },
        )
        return {"id": data.get("id"), "html_link": data.get("htmlLink")}
