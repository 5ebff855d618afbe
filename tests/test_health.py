"""Health endpoint tests."""

from unittest.mock import MagicMock

import pytest
from httpx import ASGITransport, AsyncClient

from voidspace.config import Settings
from voidspace.main import create_app


@pytest.mark.asyncio
async def test_health(client: AsyncClient) -> None:
    """GET /health returns 200 with healthy status."""
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


@pytest.mark.asyncio
async def test_readiness(client: AsyncClient) -> None:
    response = await client.get("/ready")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ready"
    assert data["checks"]["storage"] == "ok"


@pytest.mark.asyncio
async def test_readiness_degraded(settings: Settings) -> None:
    """An unreachable store reports degraded instead of failing the probe."""
    store = MagicMock()
    store.ping.return_value = False
    app = create_app(settings, store=store)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        data = (await ac.get("/ready")).json()
    assert data["status"] == "degraded"
    assert data["checks"]["storage"].startswith("error")


@pytest.mark.asyncio
async def test_version(client: AsyncClient) -> None:
    response = await client.get("/version")
    assert response.status_code == 200
    assert response.json() == {"version": "0.1.0", "environment": "test"}


@pytest.mark.asyncio
async def test_lifespan_builds_and_releases_store(settings: Settings) -> None:
    app = create_app(settings)
    async with app.router.lifespan_context(app):
        assert app.state.store is not None
        assert app.state.store.ping()
    assert app.state.store is None
