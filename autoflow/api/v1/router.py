"""API v1 router aggregation.

Includes all endpoint modules with consistent prefix and tags. All routes
use dependencies from autoflow.api.v1.dependencies.
"""

from fastapi import APIRouter

from autoflow.api.v1.endpoints import connections, events, health, workflows

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(workflows.router, prefix="/workflows", tags=["workflows"])
api_router.include_router(
    connections.router, prefix="/connections", tags=["connections"]
)
api_router.include_router(events.router, prefix="/events", tags=["events"])
