"""API tests for inbound events (signatures, Slack handshake, dispatch, dedup)."""

import hashlib
import hmac
import json
import time
from typing import Any

import pytest
from httpx import AsyncClient

from autoflow.api.v1.endpoints.events import verify_slack_signature, verify_webhook_signature
from autoflow.core.config import get_settings
from tests.support import USER_ID

WEBHOOK_SECRET = "test-webhook-secret"
SLACK_SECRET = "test-slack-signing-secret"


def _signed(body: dict[str, Any]) -> tuple[bytes, dict[str, str]]:
    raw = json.dumps(body).encode()
    digest = hmac.new(WEBHOOK_SECRET.encode(), raw, hashlib.sha256).hexdigest()
    return raw, {
        "Content-Type": "application/json",
        "X-Webhook-Signature-256": f"sha256={digest}",
    }


def _slack_signed(body: dict[str, Any], timestamp: int | None = None) -> tuple[bytes, dict[str, str]]:
    raw = json.dumps(body).encode()
    ts = str(timestamp if timestamp is not None else int(time.time()))
    base = b"v0:" + ts.encode() + b":" + raw
    signature = "v0=" + hmac.new(SLACK_SECRET.encode(), base, hashlib.sha256).hexdigest()
    return raw, {
        "Content-Type": "application/json",
        "X-Slack-Request-Timestamp": ts,
        "X-Slack-Signature": signature,
    }


def _gmail_event(event_id: str = "msg-1", **overrides: Any) -> dict[str, Any]:
    body = {
        "app": "gmail",
        "event_type": "new_email",
        "user_id": USER_ID,
        "event_id": event_id,
        "payload": {"subject": "Quarterly report", "from": "boss@example.com"},
    }
    body.update(overrides)
    return body


def _slack_message(event_id: str = "Ev1") -> dict[str, Any]:
    return {
        "type": "event_callback",
        "team_id": "T1",
        "event_id": event_id,
        "event": {"type": "message", "channel": "C1", "user": "U1", "text": "ship it", "ts": "1.1"},
    }


@pytest.fixture
async def gmail_to_slack(client: AsyncClient, auth_headers, connected) -> dict:
    response = await client.post(
        "/api/v1/workflows",
        json={
            "name": "Email to Slack",
            "trigger": {"app": "gmail", "event": "new_email"},
            "actions": [
                {
                    "app": "slack",
                    "task": "send_message",
                    "config": {"channel": "#inbox", "text": "{{ payload.subject }}"},
                }
            ],
        },
        headers=auth_headers,
    )
    assert response.status_code == 201, response.text
    return response.json()


# ---- signature helpers ----


def test_verify_webhook_signature() -> None:
    body = b'{"a":1}'
    good = "sha256=" + hmac.new(b"s", body, hashlib.sha256).hexdigest()

    assert verify_webhook_signature(body, good, "s")
    assert not verify_webhook_signature(body, good, "other")
    assert not verify_webhook_signature(body, None, "s")
    assert not verify_webhook_signature(body, "md5=abc", "s")


def test_verify_slack_signature_rejects_stale_timestamp() -> None:
    body = b"{}"
    sig = "v0=" + hmac.new(b"s", b"v0:1000:" + body, hashlib.sha256).hexdigest()

    assert verify_slack_signature(body, "1000", sig, "s", 300, now=1100)
    assert not verify_slack_signature(body, "1000", sig, "s", 300, now=1000 + 301)
    assert not verify_slack_signature(body, "not-a-number", sig, "s", 300, now=1100)
    assert not verify_slack_signature(body, None, sig, "s", 300, now=1100)


# ---- generic events ----


async def test_event_when_secret_not_configured_returns_503(
    client: AsyncClient, monkeypatch
) -> None:
    monkeypatch.delenv("EVENT_WEBHOOK_SECRET", raising=False)
    get_settings.cache_clear()
    raw, headers = _signed(_gmail_event())

    response = await client.post("/api/v1/events", content=raw, headers=headers)

    assert response.status_code == 503
    assert "not configured" in response.json()["message"].lower()


async def test_event_with_wrong_signature_returns_401(client: AsyncClient) -> None:
    raw, headers = _signed(_gmail_event())
    headers["X-Webhook-Signature-256"] = "sha256=wrong"

    response = await client.post("/api/v1/events", content=raw, headers=headers)

    assert response.status_code == 401
    assert "signature" in response.json()["message"].lower()


async def test_event_runs_matching_workflow(
    client: AsyncClient, auth_headers, gmail_to_slack, executors
) -> None:
    raw, headers = _signed(_gmail_event())

    response = await client.post("/api/v1/events", content=raw, headers=headers)

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "processed"
    assert len(body["executions"]) == 1
    assert body["executions"][0]["workflow_id"] == gmail_to_slack["id"]
    assert body["executions"][0]["status"] == "succeeded"
    assert executors["slack"].calls[0][2]["subject"] == "Quarterly report"


async def test_duplicate_event_runs_once(
    client: AsyncClient, auth_headers, gmail_to_slack, executors
) -> None:
    raw, headers = _signed(_gmail_event("msg-dup"))

    first = await client.post("/api/v1/events", content=raw, headers=headers)
    second = await client.post("/api/v1/events", content=raw, headers=headers)
    history = await client.get(
        f"/api/v1/workflows/{gmail_to_slack['id']}/executions", headers=auth_headers
    )

    assert first.json()["status"] == "processed"
    assert second.status_code == 200
    assert second.json() == {"status": "duplicate", "reason": None, "executions": []}
    assert len(history.json()) == 1
    assert len(executors["slack"].calls) == 1


async def test_disabled_workflow_is_not_run(
    client: AsyncClient, auth_headers, gmail_to_slack, executors
) -> None:
    await client.post(
        f"/api/v1/workflows/{gmail_to_slack['id']}/disable", headers=auth_headers
    )
    raw, headers = _signed(_gmail_event("msg-2"))

    response = await client.post("/api/v1/events", content=raw, headers=headers)

    assert response.json() == {"status": "processed", "reason": None, "executions": []}
    assert executors["slack"].calls == []


@pytest.mark.parametrize(
    ("body", "reason"),
    [
        (_gmail_event(event_type=""), "missing event type"),
        (_gmail_event(user_id=None), "no user for event"),
        (["not", "an", "object"], "malformed_body"),
    ],
)
async def test_invalid_event_returns_400(client: AsyncClient, body, reason) -> None:
    raw, headers = _signed(body)

    response = await client.post("/api/v1/events", content=raw, headers=headers)

    assert response.status_code == 400
    assert response.json()["status"] == "invalid"
    assert response.json()["reason"] == reason


# ---- Slack Events API ----


async def test_slack_url_verification_echoes_challenge(client: AsyncClient) -> None:
    raw, headers = _slack_signed({"type": "url_verification", "challenge": "abc123"})

    response = await client.post("/api/v1/events/slack", content=raw, headers=headers)

    assert response.status_code == 200
    assert response.json() == {"challenge": "abc123"}


async def test_slack_bad_signature_is_401(client: AsyncClient) -> None:
    raw, headers = _slack_signed({"type": "url_verification", "challenge": "x"})
    headers["X-Slack-Signature"] = "v0=deadbeef"

    response = await client.post("/api/v1/events/slack", content=raw, headers=headers)

    assert response.status_code == 401


async def test_slack_stale_request_is_401(client: AsyncClient) -> None:
    raw, headers = _slack_signed(
        {"type": "url_verification", "challenge": "x"}, timestamp=int(time.time()) - 3600
    )

    response = await client.post("/api/v1/events/slack", content=raw, headers=headers)

    assert response.status_code == 401


async def test_slack_message_runs_workflow_of_team_owner(
    client: AsyncClient, auth_headers, connected, executors
) -> None:
    created = await client.post(
        "/api/v1/workflows",
        json={
            "name": "Slack to Gmail",
            "trigger": {"app": "slack", "event": "new_message"},
            "actions": [
                {
                    "app": "gmail",
                    "task": "send_email",
                    "config": {"to": ["me@example.com"], "subject": "{{ payload.text }}"},
                }
            ],
        },
        headers=auth_headers,
    )
    assert created.status_code == 201
    raw, headers = _slack_signed(_slack_message())

    first = await client.post(
        "/api/v1/events/slack", content=raw, headers={**headers, "X-Slack-Retry-Num": "0"}
    )
    retry = await client.post(
        "/api/v1/events/slack", content=raw, headers={**headers, "X-Slack-Retry-Num": "1"}
    )

    assert first.json()["status"] == "processed"
    assert first.json()["executions"][0]["workflow_id"] == created.json()["id"]
    assert retry.json()["status"] == "duplicate"
    assert executors["gmail"].calls[0][2]["text"] == "ship it"


async def test_slack_bot_message_is_ignored(client: AsyncClient, executors) -> None:
    body = _slack_message()
    body["event"]["bot_id"] = "B1"
    raw, headers = _slack_signed(body)

    response = await client.post("/api/v1/events/slack", content=raw, headers=headers)

    assert response.status_code == 200
    assert response.json()["status"] == "ignored"


async def test_slack_unknown_team_is_invalid(client: AsyncClient) -> None:
    raw, headers = _slack_signed(_slack_message("Ev9"))

    response = await client.post("/api/v1/events/slack", content=raw, headers=headers)

    assert response.status_code == 400
    assert response.json()["reason"] == "no user for event"
