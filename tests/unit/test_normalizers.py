"""Tests for webhook payload normalizers."""

import pytest

from autoflow.infrastructure.external.providers import (
    GenericEventNormalizer,
    SlackEventNormalizer,
    build_default_normalizers,
)


def _slack_body(**event_overrides) -> dict:
    event = {
        "type": "message",
        "channel": "C1",
        "user": "U1",
        "text": "deploy done",
        "ts": "1700000000.0001",
    }
    event.update(event_overrides)
    return {"type": "event_callback", "team_id": "T1", "event_id": "Ev42", "event": event}


def test_slack_message_becomes_new_message_event() -> None:
    raw = SlackEventNormalizer().normalize(_slack_body(thread_ts="1.0"))

    assert raw.app == "slack"
    assert raw.event_type == "new_message"
    assert raw.external_account_id == "T1"
    assert raw.event_id == "Ev42"
    assert raw.user_id is None
    assert raw.payload == {
        "channel": "C1",
        "user": "U1",
        "text": "deploy done",
        "ts": "1700000000.0001",
        "thread_ts": "1.0",
    }


@pytest.mark.parametrize(
    "body",
    [
        {"type": "url_verification", "challenge": "x"},
        {"type": "event_callback", "event": {"type": "reaction_added"}},
        {"type": "event_callback", "event": "not-a-dict"},
        _slack_body(subtype="message_changed"),
        _slack_body(bot_id="B1"),
    ],
)
def test_slack_ignores_non_message_events(body) -> None:
    assert SlackEventNormalizer().normalize(body) is None


def test_generic_normalizer_flattens_payload() -> None:
    raw = GenericEventNormalizer().normalize(
        {
            "app": "gmail",
            "event_type": "new_email",
            "user_id": "user-1",
            "event_id": "msg-1",
            "payload": {"subject": "Hi", "size": 3, "labels": ["INBOX"], "meta": {"a": 1}},
        }
    )

    assert (raw.app, raw.event_type, raw.user_id, raw.event_id) == (
        "gmail",
        "new_email",
        "user-1",
        "msg-1",
    )
    assert raw.payload == {"subject": "Hi", "size": 3}


def test_generic_normalizer_tolerates_missing_payload() -> None:
    raw = GenericEventNormalizer().normalize({"app": "gmail"})

    assert raw.payload == {}
    assert raw.event_type is None


def test_registry_dispatches_by_app() -> None:
    registry = build_default_normalizers()

    assert isinstance(registry.get("SLACK"), SlackEventNormalizer)
    assert isinstance(registry.get("gmail"), GenericEventNormalizer)
    assert registry.normalize("slack", {"type": "url_verification"}) is None
