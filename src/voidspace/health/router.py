"""Health, readiness, and version endpoints."""

from fastapi import APIRouter, Depends

from voidspace.config import Settings
from voidspace.dependencies import get_app_settings, get_store
from voidspace.progression.storage import KeyValueStore

router = APIRouter()


@router.get("/health")
async def health() -> dict[str, str]:
    """Liveness probe: returns 200 if the process is alive."""
    return {"status": "healthy"}


@router.get("/ready")
def readiness(
    store: KeyValueStore = Depends(get_store),  # noqa: B008
    settings: Settings = Depends(get_app_settings),  # noqa: B008
) -> dict[str, object]:
    """Readiness probe: checks the progress store."""
    checks: dict[str, object] = {
        "storage": "ok" if store.ping() else f"error: {settings.storage_backend} unreachable",
    }
    all_ok = all(v == "ok" for v in checks.values())
    return {"status": "ready" if all_ok else "degraded", "checks": checks}


@router.get("/version")
async def version(settings: Settings = Depends(get_app_settings)) -> dict[str, str]:  # noqa: B008
    """Return API version and environment."""
    return {
        "version": settings.app_version,
        "environment": settings.environment,
    }
