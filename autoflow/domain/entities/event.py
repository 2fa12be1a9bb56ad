"""Trigger event entity: the canonical, provider-independent inbound event."""

import hashlib
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from autoflow.core.constants import CACHE_KEY_SEP, CACHE_PREFIX_DEDUP


@dataclass(frozen=True)
class TriggerEvent:
    """Normalized inbound event. Ephemeral; only payload is persisted (trigger_data)."""

    app: str
    event_type: str
    user_id: str
    payload: dict[str, Any]
    received_at: datetime
    event_id: str | None = field(default=None)

    @property
    def dedup_key(self) -> str | None:
        """Idempotency key dedup:<app>:<event_id>, or None when the provider sent no id.

        Event ids containing the separator are hashed so keys stay unambiguous.
        """
        if not self.event_id:
            return None
        event_id = self.event_id
        if CACHE_KEY_SEP in event_id:
            event_id = hashlib.sha256(event_id.encode()).hexdigest()
        return CACHE_KEY_SEP.join((CACHE_PREFIX_DEDUP, self.app, event_id))
