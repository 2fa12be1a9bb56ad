"""App connection (credential) API schemas. Tokens are write-only."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, SecretStr


class ConnectionUpsertRequest(BaseModel):
    """Tokens obtained by the OAuth flow for one provider app."""

    access_token: SecretStr
    refresh_token: SecretStr | None = None
    scope: str | None = Field(default=None, max_length=1024)
    external_account_id: str | None = Field(default=None, max_length=255)


class ConnectionResponse(BaseModel):
    """Connection status (never includes tokens)."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    app: str
    connected: bool
    scope: str | None
    external_account_id: str | None
    last_used_at: datetime | None
    created_at: datetime
    updated_at: datetime
