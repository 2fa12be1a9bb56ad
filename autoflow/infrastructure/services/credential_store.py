"""SQL-backed Credential Store: per-user, per-app encrypted provider tokens."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from autoflow.application.dtos.connection import Token
from autoflow.domain.entities.workflow import normalize_app
from autoflow.domain.exceptions import (
    CredentialNotConnectedException,
    StoreUnavailableException,
)
from autoflow.infrastructure.persistence.repositories.app_connection_repo import (
    AppConnectionRepository,
)
from autoflow.infrastructure.security.encryption import TokenEncryptor
from autoflow.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


class SqlCredentialStore:
    """ICredentialStore over the app_connection table.

    Opens its own short transaction per call (used from concurrent executions).
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        encryptor: TokenEncryptor,
    ) -> None:
        self._session_factory = session_factory
        self._encryptor = encryptor

    @asynccontextmanager
    async def _transaction(self, operation: str) -> AsyncIterator[AsyncSession]:
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    yield session
        except SQLAlchemyError as e:
            logger.error("Credential store %s failed: %s", operation, type(e).__name__)
            raise StoreUnavailableException(operation, type(e).__name__) from e

    async def get_token(self, user_id: str, app: str) -> Token:
        """Return the decrypted token; raise CredentialNotConnectedException if absent."""
        app = normalize_app(app)
        async with self._transaction("get_token") as session:
            repo = AppConnectionRepository(session)
            row = await repo.get_connected(user_id, app)
            if row is None:
                raise CredentialNotConnectedException(user_id, app)
            try:
                access_token = self._encryptor.decrypt(row.access_token_encrypted)
                refresh_token = (
                    self._encryptor.decrypt(row.refresh_token_encrypted)
                    if row.refresh_token_encrypted
                    else None
                )
            except ValueError as e:
                logger.warning(
                    "Stored %s token for user %s cannot be decrypted; treating as not connected",
                    app,
                    user_id,
                )
                raise CredentialNotConnectedException(user_id, app) from e
            await repo.touch_last_used(row.id)
            return Token(
                app=app,
                access_token=access_token,
                refresh_token=refresh_token,
                scope=row.scope,
            )

    async def is_connected(self, user_id: str, app: str) -> bool:
        async with self._transaction("is_connected") as session:
            row = await AppConnectionRepository(session).get_connected(
                user_id, normalize_app(app)
            )
            return row is not None

    async def resolve_user(self, app: str, external_account_id: str) -> str | None:
        """Map a provider identity (e.g. Slack team id) to the owning user id."""
        async with self._transaction("resolve_user") as session:
            row = await AppConnectionRepository(session).get_by_external_account(
                normalize_app(app), external_account_id
            )
            return row.user_id if row else None
