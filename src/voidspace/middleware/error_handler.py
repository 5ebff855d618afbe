"""Global error handlers: consistent JSON error responses."""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from voidspace.exceptions import (
    ProgressionError,
    ProgressionNotLoadedError,
    StorageError,
    UnknownTrackError,
)

logger = structlog.get_logger()


def setup_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers."""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content={"detail": "Validation error", "errors": exc.errors()},
        )

    @app.exception_handler(UnknownTrackError)
    async def unknown_track_handler(_request: Request, exc: UnknownTrackError) -> JSONResponse:
        return JSONResponse(
            status_code=404,
            content={"detail": f"Unknown track: {exc.track}"},
        )

    @app.exception_handler(StorageError)
    async def storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
        """The backing store is unavailable; the client may retry."""
        logger.error("storage_error", path=request.url.path, namespace=exc.namespace, error=str(exc))
        return JSONResponse(
            status_code=503,
            content={"detail": "Progress storage unavailable"},
        )

    @app.exception_handler(ProgressionNotLoadedError)
    async def not_loaded_handler(_request: Request, exc: ProgressionNotLoadedError) -> JSONResponse:
        return JSONResponse(
            status_code=409,
            content={"detail": str(exc)},
        )

    @app.exception_handler(ProgressionError)
    async def progression_error_handler(_request: Request, exc: ProgressionError) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={"detail": str(exc)},
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all for unhandled exceptions; always return JSON."""
        logger.error(
            "unhandled_exception",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            exc_info=exc,
        )
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )
