"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from voidspace.config import Settings
from voidspace.main import create_app
from voidspace.progression.context import ProgressionContext
from voidspace.progression.storage import MemoryStore

ACCOUNT = "0xabc123"


class FakeClock:
    """Deterministic epoch-millisecond clock that advances one second per call."""

    def __init__(self, start: int = 1_700_000_000_000) -> None:
        self.now = start

    def __call__(self) -> int:
        self.now += 1000
        return self.now


@pytest.fixture
def settings() -> Settings:
    return Settings(storage_backend="memory", log_format="console", environment="test")


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def ctx(store: MemoryStore, clock: FakeClock) -> ProgressionContext:
    """A loaded context for a connected account with no stored progress."""
    context = ProgressionContext(store, ACCOUNT, clock=clock)
    context.load()
    return context


@pytest_asyncio.fixture
async def client(settings: Settings, store: MemoryStore) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client against an app backed by the in-memory store."""
    app = create_app(settings, store=store)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
