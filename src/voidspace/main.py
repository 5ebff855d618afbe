"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from voidspace.config import Settings, get_settings
from voidspace.database import close_db
from voidspace.health.router import router as health_router
from voidspace.middleware import setup_middleware
from voidspace.progression.router import router as progression_router
from voidspace.progression.storage import KeyValueStore, build_store

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown lifecycle."""
    settings: Settings = app.state.settings
    owns_store = getattr(app.state, "store", None) is None
    if owns_store:
        app.state.store = build_store(settings)

    yield

    if owns_store:
        app.state.store.close()
        close_db()
        app.state.store = None
    logger.info("shutdown_complete")


def create_app(settings: Settings | None = None, store: KeyValueStore | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    ``store`` overrides the backend selected by settings and is left open on
    shutdown; tests pass a MemoryStore here.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Voidspace Progression API",
        description="XP, levels and achievements for Voidspace learners",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.store = store

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(progression_router)

    return app


app = create_app()
