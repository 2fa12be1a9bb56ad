"""Smoke tests for health and app wiring."""

from httpx import AsyncClient

from autoflow.middleware.request_id import sanitize_request_id


async def test_health_returns_ok(client: AsyncClient) -> None:
    """GET /api/v1/health returns 200 and status ok."""
    response = await client.get("/api/v1/health")
    assert response.status_code == 200
    assert response.json().get("status") == "ok"


async def test_ready_checks_database(client: AsyncClient) -> None:
    response = await client.get("/api/v1/health/ready")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "database": "ok"}


async def test_request_id_is_echoed(client: AsyncClient) -> None:
    response = await client.get("/api/v1/health", headers={"X-Request-ID": "abc-123"})
    assert response.headers.get("X-Request-ID") == "abc-123"


async def test_request_id_is_generated_when_missing(client: AsyncClient) -> None:
    response = await client.get("/api/v1/health")
    assert response.headers.get("X-Request-ID")


def test_sanitize_request_id_replaces_unsafe_values() -> None:
    assert sanitize_request_id(" ok-id_1 ") == "ok-id_1"
    assert sanitize_request_id("bad id\nwith newline") != "bad id\nwith newline"
    assert len(sanitize_request_id("x" * 500)) == 36
