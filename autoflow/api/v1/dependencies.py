"""Presentation-layer dependency injection (composition root).

Provides FastAPI Depends() for DB sessions, the execution engine and the
workflow/connection services. Everything is built from infrastructure
implementations here; routes depend only on these dependencies.

Engine collaborators (Execution Store, Credential Store) open their own
short transactions through the session factory, so concurrent executions
never share the request session.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from autoflow.application.interfaces.services import (
    IActionExecutorRegistry,
    ICredentialStore,
    IEventDeduplicator,
)
from autoflow.application.use_cases.events import EventDispatcher, EventIngestor
from autoflow.application.use_cases.workflows import (
    ExecutionOrchestrator,
    ManualRunService,
    WorkflowMatcher,
    WorkflowService,
)
from autoflow.core.config import get_settings
from autoflow.core.lifespan import ensure_in_memory_deduplicator
from autoflow.infrastructure.external.providers import (
    PayloadNormalizerRegistry,
    build_default_normalizers,
    build_default_registry,
)
from autoflow.infrastructure.persistence.database import (
    get_db,
    get_db_transactional,
    get_session_factory,
)
from autoflow.infrastructure.persistence.execution_store import SqlExecutionStore
from autoflow.infrastructure.persistence.repositories import (
    AppConnectionRepository,
    WorkflowRepository,
)
from autoflow.infrastructure.security.encryption import TokenEncryptor
from autoflow.infrastructure.security.jwt import verify_token
from autoflow.infrastructure.services import ConnectionService, SqlCredentialStore

_http_bearer = HTTPBearer(auto_error=False)


# ---- Authentication ----


async def get_current_user_id(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_http_bearer)],
) -> str:
    """Return the user id (JWT sub); raise 401 if missing or invalid."""
    if not credentials:
        raise HTTPException(
            status_code=401,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        user_id = verify_token(credentials.credentials)
    except ValueError as e:
        raise HTTPException(
            status_code=401,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e
    return user_id


# ---- Process-wide collaborators ----


def get_engine_session_factory() -> async_sessionmaker[AsyncSession]:
    """Session factory used by the Execution Store and Credential Store."""
    return get_session_factory()


def get_token_encryptor(request: Request) -> TokenEncryptor:
    """Token encryptor (key derivation runs once per process)."""
    encryptor = getattr(request.app.state, "token_encryptor", None)
    if encryptor is None:
        encryptor = TokenEncryptor()
        request.app.state.token_encryptor = encryptor
    return encryptor


def get_action_executors(request: Request) -> IActionExecutorRegistry:
    """Executor registry over the shared HTTP client (when the lifespan started one)."""
    executors = getattr(request.app.state, "action_executors", None)
    if executors is None:
        executors = build_default_registry(
            get_settings(), getattr(request.app.state, "http_client", None)
        )
        request.app.state.action_executors = executors
    return executors


def get_deduplicator(request: Request) -> IEventDeduplicator:
    """Redis-backed dedup when the lifespan connected Redis, else in-process."""
    dedup = getattr(request.app.state, "deduplicator", None)
    return dedup if dedup is not None else ensure_in_memory_deduplicator(request.app)


def get_payload_normalizers(request: Request) -> PayloadNormalizerRegistry:
    normalizers = getattr(request.app.state, "payload_normalizers", None)
    if normalizers is None:
        normalizers = build_default_normalizers()
        request.app.state.payload_normalizers = normalizers
    return normalizers


# ---- Execution engine ----


async def get_execution_store(
    session_factory: Annotated[
        async_sessionmaker[AsyncSession], Depends(get_engine_session_factory)
    ],
) -> SqlExecutionStore:
    return SqlExecutionStore(session_factory)


async def get_credential_store(
    session_factory: Annotated[
        async_sessionmaker[AsyncSession], Depends(get_engine_session_factory)
    ],
    encryptor: Annotated[TokenEncryptor, Depends(get_token_encryptor)],
) -> ICredentialStore:
    return SqlCredentialStore(session_factory, encryptor)


async def get_orchestrator(
    store: Annotated[SqlExecutionStore, Depends(get_execution_store)],
    credential_store: Annotated[ICredentialStore, Depends(get_credential_store)],
    executors: Annotated[IActionExecutorRegistry, Depends(get_action_executors)],
) -> ExecutionOrchestrator:
    """Build the orchestrator with the configured per-action timeout."""
    return ExecutionOrchestrator(
        store=store,
        credential_store=credential_store,
        executors=executors,
        action_timeout_seconds=get_settings().action_timeout_seconds,
    )


async def get_event_dispatcher(
    store: Annotated[SqlExecutionStore, Depends(get_execution_store)],
    credential_store: Annotated[ICredentialStore, Depends(get_credential_store)],
    deduplicator: Annotated[IEventDeduplicator, Depends(get_deduplicator)],
    orchestrator: Annotated[ExecutionOrchestrator, Depends(get_orchestrator)],
) -> EventDispatcher:
    """Build ingest -> match -> run for inbound events."""
    ingestor = EventIngestor(
        deduplicator=deduplicator,
        credential_store=credential_store,
        dedup_window_seconds=get_settings().dedup_window_seconds,
    )
    return EventDispatcher(ingestor, WorkflowMatcher(store), orchestrator)


async def get_manual_run_service(
    store: Annotated[SqlExecutionStore, Depends(get_execution_store)],
    orchestrator: Annotated[ExecutionOrchestrator, Depends(get_orchestrator)],
) -> ManualRunService:
    return ManualRunService(store, orchestrator)


# ---- Workflow and connection management ----


async def get_workflow_service(
    db: Annotated[AsyncSession, Depends(get_db)],
    store: Annotated[SqlExecutionStore, Depends(get_execution_store)],
    credential_store: Annotated[ICredentialStore, Depends(get_credential_store)],
) -> WorkflowService:
    """WorkflowService for read operations (get, list, summary, history)."""
    return WorkflowService(WorkflowRepository(db), store, credential_store)


async def get_workflow_service_for_write(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
    store: Annotated[SqlExecutionStore, Depends(get_execution_store)],
    credential_store: Annotated[ICredentialStore, Depends(get_credential_store)],
) -> WorkflowService:
    """WorkflowService for create/update/enable/disable/delete (transactional)."""
    return WorkflowService(WorkflowRepository(db), store, credential_store)


async def get_connection_service(
    db: Annotated[AsyncSession, Depends(get_db)],
    encryptor: Annotated[TokenEncryptor, Depends(get_token_encryptor)],
) -> ConnectionService:
    """ConnectionService for listing connections."""
    return ConnectionService(AppConnectionRepository(db), encryptor)


async def get_connection_service_for_write(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
    encryptor: Annotated[TokenEncryptor, Depends(get_token_encryptor)],
) -> ConnectionService:
    """ConnectionService for connect/disconnect (transactional)."""
    return ConnectionService(AppConnectionRepository(db), encryptor)
