"""Pytest configuration and fixtures for autoflow.

The real SqlExecutionStore runs against SQLite (one database file per test
under tmp_path). Credential Store and Action Executors are external
collaborators and are faked here.
"""

import os
from datetime import datetime, timedelta
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./autoflow-test.db")
os.environ.setdefault("SECRET_KEY", "test-secret-key-0123456789abcdef")
os.environ.setdefault("ENCRYPTION_SALT", "test-encryption-salt")
os.environ.setdefault("EVENT_WEBHOOK_SECRET", "test-webhook-secret")
os.environ.setdefault("SLACK_SIGNING_SECRET", "test-slack-signing-secret")

from autoflow.core.config import get_settings  # noqa: E402
from autoflow.core.limiter import limiter  # noqa: E402
from autoflow.domain.entities.workflow import WorkflowEntity  # noqa: E402
from autoflow.infrastructure.external.providers import (  # noqa: E402
    ActionExecutorRegistry,
)
from autoflow.infrastructure.persistence import database  # noqa: E402
from autoflow.infrastructure.persistence.database import (  # noqa: E402
    Base,
    create_session_factory,
)
from autoflow.infrastructure.persistence.execution_store import (  # noqa: E402
    SqlExecutionStore,
)
from autoflow.infrastructure.persistence.models import Workflow  # noqa: E402
from autoflow.infrastructure.persistence.repositories import (  # noqa: E402
    workflow_to_entity,
)
from autoflow.infrastructure.security.jwt import create_access_token  # noqa: E402
from autoflow.shared.utils import utc_now  # noqa: E402
from tests.support import (  # noqa: E402
    OTHER_USER_ID,
    USER_ID,
    FakeCredentialStore,
    RecordingExecutor,
    action,
)


@pytest.fixture(autouse=True)
def _reset_settings_and_limits():
    get_settings.cache_clear()
    limiter.reset()
    yield
    get_settings.cache_clear()


@pytest.fixture
async def session_factory(tmp_path):
    """Session factory over a fresh SQLite database with all tables created."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'engine.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield create_session_factory(engine)
    await engine.dispose()


@pytest.fixture
def store(session_factory) -> SqlExecutionStore:
    return SqlExecutionStore(session_factory)


@pytest.fixture
def credentials() -> FakeCredentialStore:
    creds = FakeCredentialStore()
    for app in ("slack", "gmail", "calendar"):
        creds.connect(USER_ID, app)
    return creds


@pytest.fixture
def executors() -> dict[str, RecordingExecutor]:
    return {app: RecordingExecutor(app) for app in ("slack", "gmail", "calendar")}


@pytest.fixture
def registry(executors) -> ActionExecutorRegistry:
    return ActionExecutorRegistry(executors)


@pytest.fixture
def make_workflow(session_factory):
    """Insert a workflow row directly; returns the domain entity."""
    counter = {"n": 0}

    async def _make(
        owner_id: str = USER_ID,
        trigger: tuple[str, str] = ("slack", "new_message"),
        actions: list[dict[str, Any]] | None = None,
        enabled: bool = True,
        name: str | None = None,
        created_at: datetime | None = None,
    ) -> WorkflowEntity:
        counter["n"] += 1
        created = created_at or utc_now() + timedelta(milliseconds=counter["n"])
        row = Workflow(
            owner_id=owner_id,
            name=name or f"workflow {counter['n']}",
            trigger_app=trigger[0],
            trigger_event=trigger[1],
            trigger_config={},
            actions=[action()] if actions is None else actions,
            enabled=enabled,
            execution_count=0,
            created_at=created,
            updated_at=created,
        )
        async with session_factory() as session:
            async with session.begin():
                session.add(row)
                await session.flush()
                entity = workflow_to_entity(row)
        return entity

    return _make


# ---- HTTP ----


@pytest.fixture
async def api_database(tmp_path, monkeypatch):
    """Point the app's lazily created engine at a per-test SQLite file."""
    monkeypatch.setenv("DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'api.db'}")
    get_settings.cache_clear()
    await database.dispose_engine()
    database.get_session_factory()
    assert database.engine is not None
    async with database.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield database.get_session_factory()
    await database.dispose_engine()


@pytest.fixture
def app(api_database, registry):
    """FastAPI app with recording executors in place of provider APIs."""
    from autoflow.main import create_app

    application = create_app()
    application.state.action_executors = registry
    return application


@pytest.fixture
async def client(app) -> AsyncClient:
    """Async HTTP client against the FastAPI app (ASGI)."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(USER_ID)}"}


@pytest.fixture
def other_auth_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(OTHER_USER_ID)}"}


@pytest.fixture
async def connected(client: AsyncClient, auth_headers: dict[str, str]) -> None:
    """Connect slack (team T1), gmail and calendar for USER_ID through the API."""
    for app_id, account in (("slack", "T1"), ("gmail", None), ("calendar", None)):
        body: dict[str, Any] = {"access_token": f"token-{app_id}"}
        if account:
            body["external_account_id"] = account
        response = await client.put(
            f"/api/v1/connections/{app_id}", json=body, headers=auth_headers
        )
        assert response.status_code == 200, response.text
