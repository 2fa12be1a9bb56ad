"""DTOs for app connections (credential management)."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Token:
    """Decrypted credential handed to an action executor. Never logged."""

    app: str
    access_token: str
    refresh_token: str | None = None
    scope: str | None = None

    def __repr__(self) -> str:
        return f"Token(app={self.app!r}, access_token='***')"


@dataclass(frozen=True)
class ConnectionResult:
    """App connection read-model (no secrets)."""

    id: str
    user_id: str
    app: str
    connected: bool
    scope: str | None
    external_account_id: str | None
    last_used_at: datetime | None
    created_at: datetime
    updated_at: datetime
