"""Tests for token encryption, ConnectionService and SqlCredentialStore."""

import pytest

from autoflow.domain.exceptions import (
    CredentialNotConnectedException,
    ResourceNotFoundException,
    ValidationException,
)
from autoflow.infrastructure.persistence.repositories import AppConnectionRepository
from autoflow.infrastructure.security.encryption import TokenEncryptor
from autoflow.infrastructure.services import ConnectionService, SqlCredentialStore
from tests.support import OTHER_USER_ID, USER_ID


@pytest.fixture
def encryptor() -> TokenEncryptor:
    return TokenEncryptor(secret="unit-test-secret", salt="unit-test-salt")


@pytest.fixture
def connect(session_factory, encryptor):
    async def _connect(user_id: str, app: str, token: str, **kwargs):
        async with session_factory() as session:
            async with session.begin():
                service = ConnectionService(AppConnectionRepository(session), encryptor)
                return await service.connect(user_id, app, token, **kwargs)

    return _connect


@pytest.fixture
def credential_store(session_factory, encryptor) -> SqlCredentialStore:
    return SqlCredentialStore(session_factory, encryptor)


class TestTokenEncryptor:
    """Fernet round trip with a PBKDF2-derived key."""

    def test_ciphertext_differs_from_token(self, encryptor) -> None:
        encrypted = encryptor.encrypt("xoxb-123")
        assert encrypted != "xoxb-123"
        assert encryptor.decrypt(encrypted) == "xoxb-123"

    def test_other_key_cannot_decrypt(self, encryptor) -> None:
        other = TokenEncryptor(secret="another-secret", salt="unit-test-salt")
        with pytest.raises(ValueError):
            other.decrypt(encryptor.encrypt("xoxb-123"))

    def test_defaults_to_settings(self) -> None:
        encryptor = TokenEncryptor()
        assert encryptor.decrypt(encryptor.encrypt("t")) == "t"


class TestConnectionService:
    """Upsert, list and revoke connections; tokens stored encrypted."""

    async def test_connect_stores_encrypted_token(self, connect, session_factory) -> None:
        result = await connect(USER_ID, "Slack", "xoxb-secret", scope="chat:write")

        assert result.app == "slack"
        assert result.connected is True
        async with session_factory() as session:
            row = await AppConnectionRepository(session).get_by_user_and_app(USER_ID, "slack")
        assert row.access_token_encrypted != "xoxb-secret"

    async def test_reconnect_replaces_token(self, connect, credential_store) -> None:
        first = await connect(USER_ID, "slack", "old")
        second = await connect(USER_ID, "slack", "new")

        assert first.id == second.id
        assert (await credential_store.get_token(USER_ID, "slack")).access_token == "new"

    async def test_connect_requires_token(self, connect) -> None:
        with pytest.raises(ValidationException):
            await connect(USER_ID, "slack", "")

    async def test_disconnect_and_list(self, connect, session_factory, encryptor) -> None:
        await connect(USER_ID, "slack", "a")
        await connect(USER_ID, "gmail", "b")

        async with session_factory() as session:
            async with session.begin():
                service = ConnectionService(AppConnectionRepository(session), encryptor)
                await service.disconnect(USER_ID, "slack")
                listed = await service.list_connections(USER_ID)
                with pytest.raises(ResourceNotFoundException):
                    await service.disconnect(USER_ID, "slack")

        assert [(c.app, c.connected) for c in listed] == [("gmail", True), ("slack", False)]


class TestSqlCredentialStore:
    """Decrypted tokens per (user, app); provider identity lookup."""

    async def test_get_token_decrypts_and_touches(
        self, connect, credential_store, session_factory
    ) -> None:
        await connect(USER_ID, "gmail", "ya29.token", refresh_token="1//refresh")

        token = await credential_store.get_token(USER_ID, "GMAIL")

        assert token.access_token == "ya29.token"
        assert token.refresh_token == "1//refresh"
        assert "ya29" not in repr(token)
        async with session_factory() as session:
            row = await AppConnectionRepository(session).get_by_user_and_app(USER_ID, "gmail")
        assert row.last_used_at is not None

    async def test_missing_connection_is_not_connected(self, credential_store) -> None:
        with pytest.raises(CredentialNotConnectedException):
            await credential_store.get_token(USER_ID, "slack")
        assert await credential_store.is_connected(USER_ID, "slack") is False

    async def test_token_is_per_user(self, connect, credential_store) -> None:
        await connect(OTHER_USER_ID, "slack", "theirs")

        with pytest.raises(CredentialNotConnectedException):
            await credential_store.get_token(USER_ID, "slack")

    async def test_undecryptable_token_is_not_connected(
        self, connect, session_factory
    ) -> None:
        await connect(USER_ID, "slack", "xoxb")
        store = SqlCredentialStore(
            session_factory, TokenEncryptor(secret="rotated", salt="unit-test-salt")
        )

        with pytest.raises(CredentialNotConnectedException):
            await store.get_token(USER_ID, "slack")

    async def test_resolve_user_by_external_account(self, connect, credential_store) -> None:
        await connect(USER_ID, "slack", "xoxb", external_account_id="T1")

        assert await credential_store.resolve_user("slack", "T1") == USER_ID
        assert await credential_store.resolve_user("slack", "T2") is None
