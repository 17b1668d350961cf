"""Tests for the health endpoint, API docs and the bundled front end."""

import pytest
from httpx import AsyncClient

from zeedzad.db import get_storage
from zeedzad.db.storage import BackendUnavailable, Storage
from zeedzad.main import app


class UnreachableStorage(Storage):
    backend = "unreachable"

    async def ping(self) -> None:
        raise BackendUnavailable("connection refused")

    async def query(self, sql, args=()):
        raise BackendUnavailable("connection refused")

    async def execute(self, sql, args=()):
        raise BackendUnavailable("connection refused")

    def begin(self):
        raise NotImplementedError

    async def close(self) -> None:
        pass


class TestDatabaseHealth:
    """Tests for /api/databasez."""

    @pytest.mark.asyncio
    async def test_healthy(self, client: AsyncClient):
        response = await client.get("/api/databasez")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["database"] == "healthy"
        assert set(data) == {"status", "timestamp", "database", "uptime"}

    @pytest.mark.asyncio
    async def test_degraded(self, client: AsyncClient):
        """An unreachable database degrades the service with 503."""
        app.dependency_overrides[get_storage] = lambda: UnreachableStorage()

        response = await client.get("/api/databasez")

        assert response.status_code == 503
        assert response.json()["status"] == "degraded"
        assert response.json()["database"] == "unhealthy"

    @pytest.mark.asyncio
    async def test_repository_failure_is_server_error(self, client: AsyncClient):
        app.dependency_overrides[get_storage] = lambda: UnreachableStorage()

        response = await client.get("/api/videos")

        assert response.status_code == 500
        assert response.json() == {"error": "get videos: connection refused"}


class TestSwagger:
    """Tests for the API documentation routes."""

    @pytest.mark.asyncio
    async def test_openapi_document(self, client: AsyncClient):
        response = await client.get("/api/swagger/doc.json")

        assert response.status_code == 200
        paths = response.json()["paths"]
        assert "/api/videos" in paths
        assert "/api/games/steam/search" in paths

    @pytest.mark.asyncio
    async def test_envelope_schema_is_typed(self, client: AsyncClient):
        """Documented responses describe data and meta, not a bare object."""
        doc = (await client.get("/api/swagger/doc.json")).json()

        ok = doc["paths"]["/api/videos"]["get"]["responses"]["200"]
        ref = ok["content"]["application/json"]["schema"]["$ref"]
        envelope = doc["components"]["schemas"][ref.rsplit("/", 1)[-1]]

        assert envelope["type"] == "object"
        assert envelope["properties"]["data"]["type"] == "array"
        assert envelope["properties"]["data"]["items"]["$ref"].endswith("/VideoRead")
        assert "meta" in envelope["properties"]
        assert envelope["required"] == ["data"]

    @pytest.mark.asyncio
    async def test_ui(self, client: AsyncClient):
        response = await client.get("/api/swagger/index.html")

        assert response.status_code == 200
        assert "swagger" in response.text.lower()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("path", ["/api/swagger", "/api/swagger/"])
    async def test_redirects(self, client: AsyncClient, path: str):
        response = await client.get(path)

        assert response.status_code == 307
        assert response.headers["location"] == "/api/swagger/index.html"


class TestFrontEnd:
    """Tests for static serving."""

    @pytest.mark.asyncio
    async def test_index(self, client: AsyncClient):
        response = await client.get("/")

        assert response.status_code == 200
        assert "<title>Zeedzad</title>" in response.text

    @pytest.mark.asyncio
    async def test_unknown_path_falls_back_to_404_page(self, client: AsyncClient):
        response = await client.get("/videos/some-client-route")

        assert response.status_code == 404
        assert "app.js" in response.text

    @pytest.mark.asyncio
    async def test_gzip(self, client: AsyncClient):
        response = await client.get("/app.js", headers={"Accept-Encoding": "gzip"})

        assert response.status_code == 200
        assert response.headers.get("content-encoding") == "gzip"
