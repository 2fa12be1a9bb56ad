"""Connections API: store, list and revoke provider credentials (tokens write-only)."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response

from autoflow.api.v1.dependencies import (
    get_connection_service,
    get_connection_service_for_write,
    get_current_user_id,
)
from autoflow.core.limiter import limit_writes
from autoflow.infrastructure.services import ConnectionService
from autoflow.schemas.connection import ConnectionResponse, ConnectionUpsertRequest

router = APIRouter()


@router.get("", response_model=list[ConnectionResponse])
async def list_connections(
    user_id: Annotated[str, Depends(get_current_user_id)],
    service: Annotated[ConnectionService, Depends(get_connection_service)],
):
    """List the caller's app connections (connected and revoked)."""
    connections = await service.list_connections(user_id)
    return [ConnectionResponse.model_validate(c) for c in connections]


@router.put("/{app}", response_model=ConnectionResponse)
@limit_writes
async def connect_app(
    request: Request,
    app: str,
    body: ConnectionUpsertRequest,
    user_id: Annotated[str, Depends(get_current_user_id)],
    service: Annotated[ConnectionService, Depends(get_connection_service_for_write)],
):
    """Store (or replace) the caller's tokens for app."""
    connection = await service.connect(
        user_id,
        app,
        access_token=body.access_token.get_secret_value(),
        refresh_token=(
            body.refresh_token.get_secret_value() if body.refresh_token else None
        ),
        scope=body.scope,
        external_account_id=body.external_account_id,
    )
    return ConnectionResponse.model_validate(connection)


@router.delete("/{app}", status_code=204)
@limit_writes
async def disconnect_app(
    request: Request,
    app: str,
    user_id: Annotated[str, Depends(get_current_user_id)],
    service: Annotated[ConnectionService, Depends(get_connection_service_for_write)],
) -> Response:
    """Revoke the caller's credential for app."""
    await service.disconnect(user_id, app)
    return Response(status_code=204)
