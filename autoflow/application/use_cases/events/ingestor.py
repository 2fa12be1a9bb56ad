"""Event Ingestor: RawEvent -> TriggerEvent (validated, user-resolved, deduplicated)."""

from __future__ import annotations

from autoflow.application.dtos.event import RawEvent
from autoflow.application.interfaces.services import (
    ICredentialStore,
    IEventDeduplicator,
)
from autoflow.domain.entities.event import TriggerEvent
from autoflow.domain.entities.workflow import normalize_app
from autoflow.domain.exceptions import DuplicateEventException, InvalidEventException
from autoflow.shared.telemetry import traced
from autoflow.shared.utils import ensure_utc, utc_now


class EventIngestor:
    """Validates app, event type and user; drops repeats of a provider event id."""

    def __init__(
        self,
        deduplicator: IEventDeduplicator,
        credential_store: ICredentialStore | None = None,
        dedup_window_seconds: int = 300,
    ) -> None:
        self.deduplicator = deduplicator
        self.credential_store = credential_store
        self.dedup_window_seconds = dedup_window_seconds

    @traced("event.ingest")
    async def ingest(self, raw: RawEvent) -> TriggerEvent:
        """Return the canonical event.

        Raises:
            InvalidEventException: Missing app/event type, or no resolvable user.
            DuplicateEventException: Event id already seen inside the dedup window.
        """
        app = normalize_app(raw.app or "")
        if not app:
            raise InvalidEventException("missing app", field="app")
        event_type = (raw.event_type or "").strip()
        if not event_type:
            raise InvalidEventException("missing event type", field="event_type")
        if not isinstance(raw.payload, dict):
            raise InvalidEventException("payload must be an object", field="payload")

        user_id = raw.user_id
        if not user_id and raw.external_account_id and self.credential_store:
            user_id = await self.credential_store.resolve_user(
                app, raw.external_account_id
            )
        if not user_id:
            raise InvalidEventException("no user for event", field="user_id")

        event = TriggerEvent(
            app=app,
            event_type=event_type,
            user_id=user_id,
            payload=dict(raw.payload),
            received_at=ensure_utc(raw.received_at) or utc_now(),
            event_id=raw.event_id or None,
        )
        key = event.dedup_key
        if key and await self.deduplicator.seen_or_remember(
            key, self.dedup_window_seconds
        ):
            raise DuplicateEventException(app, event.event_id or "")
        return event

    async def release(self, event: TriggerEvent) -> None:
        """Forget the event id so a resubmission after a transport failure is processed."""
        key = event.dedup_key
        if key:
            await self.deduplicator.forget(key)
