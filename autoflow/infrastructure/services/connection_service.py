"""Connection management: store, list and revoke a user's provider credentials.

OAuth token acquisition happens elsewhere; this service receives the tokens
and persists them encrypted.
"""

from __future__ import annotations

from autoflow.application.dtos.connection import ConnectionResult
from autoflow.domain.entities.workflow import normalize_app
from autoflow.domain.exceptions import ResourceNotFoundException, ValidationException
from autoflow.infrastructure.persistence.models.app_connection import AppConnection
from autoflow.infrastructure.persistence.repositories.app_connection_repo import (
    AppConnectionRepository,
)
from autoflow.infrastructure.security.encryption import TokenEncryptor
from autoflow.shared.telemetry.logging import get_logger
from autoflow.shared.utils import ensure_utc

logger = get_logger(__name__)


def _to_result(row: AppConnection) -> ConnectionResult:
    return ConnectionResult(
        id=row.id,
        user_id=row.user_id,
        app=row.app,
        connected=row.connected,
        scope=row.scope,
        external_account_id=row.external_account_id,
        last_used_at=ensure_utc(row.last_used_at),
        created_at=ensure_utc(row.created_at),
        updated_at=ensure_utc(row.updated_at),
    )


class ConnectionService:
    """Session-scoped; the caller owns the transaction."""

    def __init__(
        self, repo: AppConnectionRepository, encryptor: TokenEncryptor
    ) -> None:
        self.repo = repo
        self.encryptor = encryptor

    async def connect(
        self,
        user_id: str,
        app: str,
        access_token: str,
        refresh_token: str | None = None,
        scope: str | None = None,
        external_account_id: str | None = None,
    ) -> ConnectionResult:
        """Create or replace the user's credential for app (upsert on user_id + app)."""
        app = normalize_app(app)
        if not app:
            raise ValidationException("App is required", field="app")
        if not access_token:
            raise ValidationException("Access token is required", field="access_token")
        encrypted_access = self.encryptor.encrypt(access_token)
        encrypted_refresh = self.encryptor.encrypt(refresh_token) if refresh_token else None

        row = await self.repo.get_by_user_and_app(user_id, app)
        if row is None:
            row = await self.repo.create(
                AppConnection(
                    user_id=user_id,
                    app=app,
                    access_token_encrypted=encrypted_access,
                    refresh_token_encrypted=encrypted_refresh,
                    scope=scope,
                    external_account_id=external_account_id,
                    connected=True,
                )
            )
        else:
            row.access_token_encrypted = encrypted_access
            row.refresh_token_encrypted = encrypted_refresh
            row.scope = scope
            row.external_account_id = external_account_id
            row.connected = True
            row = await self.repo.update(row)
        logger.info("Connected %s for user %s", app, user_id)
        return _to_result(row)

    async def disconnect(self, user_id: str, app: str) -> None:
        """Revoke: drop stored tokens and mark the row disconnected."""
        app = normalize_app(app)
        row = await self.repo.get_by_user_and_app(user_id, app)
        if row is None or not row.connected:
            raise ResourceNotFoundException("app_connection", app)
        row.connected = False
        row.access_token_encrypted = ""
        row.refresh_token_encrypted = None
        await self.repo.update(row)
        logger.info("Disconnected %s for user %s", app, user_id)

    async def list_connections(self, user_id: str) -> list[ConnectionResult]:
        return [_to_result(r) for r in await self.repo.get_by_user(user_id)]
