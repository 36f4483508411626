"""
Tests for health endpoints and application-level responses.
"""

import pytest
from fastapi import FastAPI
from httpx import AsyncClient

pytestmark = pytest.mark.integration


class TestHealth:

    @pytest.mark.asyncio
    async def test_healthcheck(self, client: AsyncClient):
        response = await client.get("/api/v1/healthcheck")

        assert response.status_code == 200
        assert response.json() == {
            "statusCode": 200,
            "data": {"status": "OK"},
            "message": "Service is healthy",
        }

    @pytest.mark.asyncio
    async def test_health_reports_database(self, client: AsyncClient, settings):
        response = await client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"
        assert body["environment"] == "test"
        assert body["version"] == settings.APP_VERSION

    @pytest.mark.asyncio
    async def test_health_without_context(self, client: AsyncClient, app: FastAPI):
        app.state.context = None

        response = await client.get("/health")

        assert response.status_code == 503
        assert response.json()["database"] == "disconnected"

    @pytest.mark.asyncio
    async def test_root(self, client: AsyncClient):
        response = await client.get("/")

        assert response.status_code == 200
        assert "version" in response.json()


class TestErrorEnvelope:

    @pytest.mark.asyncio
    async def test_unknown_route(self, client: AsyncClient):
        response = await client.get("/api/v1/nowhere")

        assert response.status_code == 404
        assert response.json() == {"status": "error", "statusCode": 404, "message": "Not Found"}

    @pytest.mark.asyncio
    async def test_wrong_method(self, client: AsyncClient):
        response = await client.delete("/api/v1/healthcheck")

        assert response.status_code == 405
        assert response.json()["status"] == "error"

    @pytest.mark.asyncio
    async def test_unexpected_error_is_generic_500(self, raw_client: AsyncClient, app: FastAPI):
        async def explode():
            raise RuntimeError("database password is hunter2")

        app.add_api_route("/boom", explode)

        response = await raw_client.get("/boom")

        assert response.status_code == 500
        assert response.json() == {
            "status": "error",
            "statusCode": 500,
            "message": "Internal server error",
        }
        assert "hunter2" not in response.text

    @pytest.mark.asyncio
    async def test_request_id_header(self, client: AsyncClient):
        generated = await client.get("/api/v1/healthcheck")
        echoed = await client.get("/api/v1/healthcheck", headers={"X-Request-ID": "abc-123"})

        assert len(generated.headers["x-request-id"]) == 32
        assert echoed.headers["x-request-id"] == "abc-123"
