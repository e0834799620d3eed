"""Health probes and request middleware."""

import pytest


class TestHealthEndpoints:
    """Liveness, readiness and version probes."""

    @pytest.mark.asyncio
    async def test_health(self, client):
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}

    @pytest.mark.asyncio
    async def test_ready(self, client):
        response = await client.get("/ready")
        data = response.json()
        assert data["status"] == "ready"
        assert data["checks"] == {"database": "ok", "problem_source": "ok"}

    @pytest.mark.asyncio
    async def test_version(self, client):
        data = (await client.get("/version")).json()
        assert "version" in data
        assert "environment" in data


class TestRequestMiddleware:
    """Request id propagation and CORS."""

    @pytest.mark.asyncio
    async def test_request_id_generated(self, client):
        response = await client.get("/health")
        assert response.headers.get("x-request-id")

    @pytest.mark.asyncio
    async def test_request_id_propagated(self, client):
        response = await client.get("/health", headers={"X-Request-Id": "abc-123"})
        assert response.headers["x-request-id"] == "abc-123"

    @pytest.mark.asyncio
    async def test_cors_preflight(self, client):
        response = await client.options(
            "/api/v1/ranks",
            headers={
                "Origin": "http://localhost:5173",
                "Access-Control-Request-Method": "GET",
            },
        )
        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "http://localhost:5173"
