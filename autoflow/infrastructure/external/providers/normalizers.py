"""Webhook payload normalizers: provider body -> RawEvent with a flat payload."""

from __future__ import annotations

from typing import Any

from autoflow.application.dtos.event import RawEvent
from autoflow.application.interfaces.services import IPayloadNormalizer
from autoflow.domain.entities.workflow import normalize_app
from autoflow.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

_SCALARS = (str, int, float, bool)


def flatten_scalars(data: dict[str, Any]) -> dict[str, Any]:
    """Keep only scalar (or null) values so the payload stays a flat key-value map."""
    return {
        str(k): v for k, v in data.items() if v is None or isinstance(v, _SCALARS)
    }


class SlackEventNormalizer:
    """Slack Events API envelope (event_callback) -> slack/new_message.

    Bot messages and message subtypes (edits, deletes, joins) are ignored.
    """

    app = "slack"

    def normalize(self, body: dict[str, Any]) -> RawEvent | None:
        if body.get("type") != "event_callback":
            return None
        event = body.get("event")
        if not isinstance(event, dict) or event.get("type") != "message":
            return None
        if event.get("subtype") or event.get("bot_id"):
            logger.debug("Ignoring Slack message subtype=%s", event.get("subtype"))
            return None
        payload = {
            "channel": event.get("channel"),
            "user": event.get("user"),
            "text": event.get("text", ""),
            "ts": event.get("ts"),
        }
        if event.get("thread_ts"):
            payload["thread_ts"] = event["thread_ts"]
        return RawEvent(
            app=self.app,
            event_type="new_message",
            payload=payload,
            external_account_id=body.get("team_id"),
            event_id=body.get("event_id"),
        )


class GenericEventNormalizer:
    """Signed internal/generic events: {app, event_type, user_id?, event_id?, payload}."""

    def normalize(self, body: dict[str, Any]) -> RawEvent | None:
        payload = body.get("payload")
        return RawEvent(
            app=body.get("app"),
            event_type=body.get("event_type"),
            payload=flatten_scalars(payload) if isinstance(payload, dict) else {},
            user_id=body.get("user_id"),
            external_account_id=body.get("external_account_id"),
            event_id=body.get("event_id"),
        )


class PayloadNormalizerRegistry:
    """Per-provider normalizers; apps without one use the generic normalizer."""

    def __init__(
        self,
        normalizers: dict[str, IPayloadNormalizer] | None = None,
        default: IPayloadNormalizer | None = None,
    ) -> None:
        self._normalizers = {
            normalize_app(app): n for app, n in (normalizers or {}).items()
        }
        self._default = default or GenericEventNormalizer()

    def get(self, app: str) -> IPayloadNormalizer:
        return self._normalizers.get(normalize_app(app), self._default)

    def normalize(self, app: str, body: dict[str, Any]) -> RawEvent | None:
        return self.get(app).normalize(body)


def build_default_normalizers() -> PayloadNormalizerRegistry:
    return PayloadNormalizerRegistry({SlackEventNormalizer.app: SlackEventNormalizer()})
