import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    """Test basic health check."""
    response = await client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "OK"
    assert data["message"] == "FinQuest API is running"
    assert "timestamp" in data
    assert "environment" in data


@pytest.mark.asyncio
async def test_health_ready(client: AsyncClient):
    """Test readiness check with database connection."""
    response = await client.get("/health/ready")
    assert response.status_code == 200
    assert response.json() == {"status": "ready", "database": "connected"}


@pytest.mark.asyncio
async def test_health_is_not_rate_limited(client: AsyncClient):
    response = await client.get("/health")
    assert "RateLimit-Limit" not in response.headers


@pytest.mark.asyncio
async def test_unknown_route(client: AsyncClient):
    response = await client.get("/api/nope")
    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "Resource not found"}


@pytest.mark.asyncio
async def test_security_headers_on_api_responses(client: AsyncClient):
    response = await client.get("/health")
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Frame-Options"] == "SAMEORIGIN"
    assert response.headers["Referrer-Policy"] == "no-referrer"


@pytest.mark.asyncio
async def test_large_responses_are_compressed(client: AsyncClient, auth_headers: dict):
    response = await client.get(
        "/api/financial/dashboard-stats",
        headers={**auth_headers, "Accept-Encoding": "gzip"},
    )
    assert response.status_code == 200
    assert response.headers["Content-Encoding"] == "gzip"
    assert response.json()["success"] is True
