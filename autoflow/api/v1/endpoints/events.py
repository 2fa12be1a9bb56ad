"""Inbound event API: signed webhooks delegating to EventDispatcher.

Two surfaces: a generic HMAC-signed JSON event and the Slack Events API.
Invalid events answer 400, duplicates and ignored deliveries 200, and a
store outage 503 (so the provider retries; the event id was released).
"""

import hashlib
import hmac
import json
import time
from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse

from autoflow.api.v1.dependencies import get_event_dispatcher, get_payload_normalizers
from autoflow.application.dtos.event import DispatchResult
from autoflow.application.use_cases.events import EventDispatcher
from autoflow.core.config import get_settings
from autoflow.core.limiter import limit_inbound_events
from autoflow.infrastructure.external.providers import (
    GenericEventNormalizer,
    PayloadNormalizerRegistry,
)
from autoflow.schemas.event import EventDispatchResponse, SlackChallengeResponse
from autoflow.schemas.execution import WorkflowExecutionResponse
from autoflow.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()

_generic_normalizer = GenericEventNormalizer()


def verify_webhook_signature(body: bytes, signature_header: str | None, secret: str) -> bool:
    """Return True if X-Webhook-Signature-256 matches HMAC-SHA256(secret, body)."""
    if not signature_header or not signature_header.startswith("sha256="):
        return False
    expected = hmac.HMAC(secret.encode(), body, hashlib.sha256).hexdigest()
    return hmac.compare_digest(signature_header[7:].strip(), expected)


def verify_slack_signature(
    body: bytes,
    timestamp: str | None,
    signature: str | None,
    secret: str,
    tolerance_seconds: int,
    now: float | None = None,
) -> bool:
    """Slack v0 signing: v0=HMAC-SHA256(secret, "v0:<timestamp>:<body>"), fresh timestamp."""
    if not timestamp or not signature:
        return False
    try:
        ts = int(timestamp)
    except ValueError:
        return False
    current = time.time() if now is None else now
    if abs(current - ts) > tolerance_seconds:
        return False
    base = b"v0:" + timestamp.encode() + b":" + body
    expected = "v0=" + hmac.HMAC(secret.encode(), base, hashlib.sha256).hexdigest()
    return hmac.compare_digest(signature, expected)


def _parse_json_object(body: bytes) -> dict[str, Any] | None:
    try:
        data = json.loads(body)
    except (UnicodeDecodeError, json.JSONDecodeError):
        return None
    return data if isinstance(data, dict) else None


def _invalid(reason: str) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content=EventDispatchResponse(status="invalid", reason=reason).model_dump(),
    )


def _to_response(result: DispatchResult) -> EventDispatchResponse | JSONResponse:
    if result.status == "invalid":
        return _invalid(result.reason or "invalid_event")
    return EventDispatchResponse(
        status=result.status,
        reason=result.reason,
        executions=[WorkflowExecutionResponse.from_entity(e) for e in result.executions],
    )


@router.post(
    "",
    response_model=EventDispatchResponse,
    responses={
        400: {"description": "Invalid event", "model": EventDispatchResponse},
        401: {"description": "Invalid or missing signature"},
        503: {"description": "Not configured, or store unavailable"},
    },
)
@limit_inbound_events
async def receive_event(
    request: Request,
    dispatcher: Annotated[EventDispatcher, Depends(get_event_dispatcher)],
):
    """Generic inbound event.

    EVENT_WEBHOOK_SECRET must be set, and callers must send
    X-Webhook-Signature-256: sha256=<hmac_sha256(secret, body)>. Body:
    {app, event_type, user_id | external_account_id, event_id?, payload}.
    """
    body = await request.body()
    settings = get_settings()
    if not settings.event_webhook_secret:
        raise HTTPException(
            status_code=503,
            detail="Event webhook is not configured (EVENT_WEBHOOK_SECRET is not set).",
        )
    sig = request.headers.get("X-Webhook-Signature-256")
    if not verify_webhook_signature(
        body, sig, settings.event_webhook_secret.get_secret_value()
    ):
        raise HTTPException(status_code=401, detail="Invalid or missing webhook signature")
    data = _parse_json_object(body)
    if data is None:
        return _invalid("malformed_body")
    raw = _generic_normalizer.normalize(data)
    if raw is None:
        return EventDispatchResponse(status="ignored")
    return _to_response(await dispatcher.dispatch(raw))


@router.post(
    "/slack",
    response_model=EventDispatchResponse | SlackChallengeResponse,
    responses={
        401: {"description": "Invalid signature or stale timestamp"},
        503: {"description": "Not configured, or store unavailable"},
    },
)
@limit_inbound_events
async def receive_slack_event(
    request: Request,
    dispatcher: Annotated[EventDispatcher, Depends(get_event_dispatcher)],
    normalizers: Annotated[PayloadNormalizerRegistry, Depends(get_payload_normalizers)],
):
    """Slack Events API endpoint (url_verification and event_callback)."""
    body = await request.body()
    settings = get_settings()
    if not settings.slack_signing_secret:
        raise HTTPException(
            status_code=503,
            detail="Slack events are not configured (SLACK_SIGNING_SECRET is not set).",
        )
    if not verify_slack_signature(
        body,
        request.headers.get("X-Slack-Request-Timestamp"),
        request.headers.get("X-Slack-Signature"),
        settings.slack_signing_secret.get_secret_value(),
        settings.slack_request_tolerance_seconds,
    ):
        raise HTTPException(status_code=401, detail="Invalid Slack signature")
    data = _parse_json_object(body)
    if data is None:
        return _invalid("malformed_body")
    if data.get("type") == "url_verification":
        return SlackChallengeResponse(challenge=str(data.get("challenge", "")))

    raw = normalizers.normalize("slack", data)
    if raw is None:
        logger.debug("Ignoring Slack delivery of type %s", data.get("type"))
        return EventDispatchResponse(status="ignored")
    retry = request.headers.get("X-Slack-Retry-Num")
    if retry:
        logger.info("Slack retry %s for event %s", retry, raw.event_id)
    return _to_response(await dispatcher.dispatch(raw))
