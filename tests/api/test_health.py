"""Health endpoint tests."""

from unittest.mock import AsyncMock

import pytest
from httpx import AsyncClient

from scribe.services.sessions import InMemorySessionStore


@pytest.mark.asyncio
async def test_health_check(client: AsyncClient):
    """Test basic health check endpoint."""
    response = await client.get("/api/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


@pytest.mark.asyncio
async def test_health_check_db(client: AsyncClient):
    """Test health check with database connectivity."""
    response = await client.get("/api/health/db")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["database"] == "connected"


@pytest.mark.asyncio
async def test_readiness(client: AsyncClient):
    response = await client.get("/api/health/ready")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["sessions"] == "connected"
    assert data["session_backend"] == "memory"


@pytest.mark.asyncio
async def test_readiness_session_store_down(client: AsyncClient, session_store: InMemorySessionStore):
    session_store.ping = AsyncMock(return_value=False)  # type: ignore[method-assign]

    response = await client.get("/api/health/ready")

    assert response.status_code == 503
    data = response.json()
    assert data["status"] == "degraded"
    assert data["database"] == "connected"
    assert data["sessions"] == "disconnected"


@pytest.mark.asyncio
async def test_request_id_header(client: AsyncClient):
    """An incoming request ID is echoed back, otherwise one is generated."""
    response = await client.get("/api/health", headers={"X-Request-ID": "abc-123"})
    assert response.headers["X-Request-ID"] == "abc-123"

    response = await client.get("/api/health")
    assert response.headers["X-Request-ID"]
