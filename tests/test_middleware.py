"""Middleware tests: request ID, CORS, error handling."""

from unittest.mock import MagicMock

import pytest
from httpx import ASGITransport, AsyncClient

from voidspace.config import Settings
from voidspace.exceptions import StorageError
from voidspace.main import create_app


@pytest.mark.asyncio
async def test_request_id_generated(client: AsyncClient) -> None:
    response = await client.get("/health")
    assert "x-request-id" in response.headers
    assert len(response.headers["x-request-id"]) == 36  # UUID format


@pytest.mark.asyncio
async def test_request_id_preserved(client: AsyncClient) -> None:
    response = await client.get("/health", headers={"X-Request-Id": "test-abc-123"})
    assert response.headers["x-request-id"] == "test-abc-123"


@pytest.mark.asyncio
async def test_cors_preflight(client: AsyncClient) -> None:
    response = await client.options(
        "/api/v1/levels",
        headers={
            "Origin": "http://localhost:3000",
            "Access-Control-Request-Method": "GET",
        },
    )
    assert response.headers["access-control-allow-origin"] == "http://localhost:3000"


@pytest.mark.asyncio
async def test_not_found_is_json(client: AsyncClient) -> None:
    response = await client.get("/api/v1/nope")
    assert response.status_code == 404
    assert response.json() == {"detail": "Not Found"}


@pytest.mark.asyncio
async def test_validation_error_format(client: AsyncClient) -> None:
    response = await client.post("/api/v1/accounts/0xabc/activity", json={"delta": 1})
    assert response.status_code == 422
    data = response.json()
    assert data["detail"] == "Validation error"
    assert data["errors"]


@pytest.mark.asyncio
async def test_storage_failure_returns_503(settings: Settings) -> None:
    """Module reads go straight to the store, so a failing backend surfaces as 503."""
    store = MagicMock()
    store.get.side_effect = StorageError("voidspace:0xabc:modules:builder", "connection refused")
    app = create_app(settings, store=store)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        response = await ac.get("/api/v1/accounts/0xabc/modules/builder")
    assert response.status_code == 503
    assert response.json() == {"detail": "Progress storage unavailable"}
