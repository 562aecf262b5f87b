"""
FastAPI application factory for the dbcreds role service.

Uses lifespan handler for startup/shutdown with async resource management.
"""

import uuid
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from dbcreds.config import settings
from dbcreds.db.connection import resolve_connection_url
from dbcreds.db.protocol import DatabaseUnavailableError
from dbcreds.db.session import close_db, init_db
from dbcreds.logging_config import configure_logging, get_logger
from dbcreds.storage import close_storage, get_storage, init_storage
from dbcreds.storage.protocol import StorageError

from .health import router as health_router

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Application lifespan handler for startup and shutdown."""
    configure_logging(json_logs=settings.json_logs, log_level=settings.log_level)
    logger.info("Starting dbcreds role service", version="0.1.0")

    await init_storage()

    # A connection stored at runtime wins over the configured default
    await init_db(await resolve_connection_url(get_storage()))
    logger.info("Database initialized")

    yield

    logger.info("Shutting down dbcreds role service")
    await close_db()
    await close_storage()


def create_application() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="dbcreds",
        description="Role definitions for dynamic database credentials",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
    )

    # Request ID middleware
    @app.middleware("http")
    async def add_request_id(request: Request, call_next):  # type: ignore[no-untyped-def]
        """Ensure every request has a request ID for logging correlation."""
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        structlog.contextvars.bind_contextvars(request_id=request_id)

        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        structlog.contextvars.unbind_contextvars("request_id")

        return response

    @app.exception_handler(StorageError)
    async def storage_exception_handler(request: Request, exc: StorageError) -> JSONResponse:
        logger.error("Storage operation failed", exc_info=exc, path=str(request.url.path))
        return JSONResponse(status_code=500, content={"errors": ["Internal server error"]})

    @app.exception_handler(DatabaseUnavailableError)
    async def database_exception_handler(
        request: Request, exc: DatabaseUnavailableError
    ) -> JSONResponse:
        logger.error("Database unavailable", error=str(exc), path=str(request.url.path))
        return JSONResponse(
            status_code=503, content={"errors": ["Target database is unavailable"]}
        )

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Global exception handler for unhandled errors."""
        logger.error("Unhandled exception", exc_info=exc, path=str(request.url.path))
        return JSONResponse(
            status_code=500,
            content={"errors": ["Internal server error"]},
        )

    # Health endpoints (no prefix)
    app.include_router(health_router)

    # Role definition CRUD
    from dbcreds.api.routers.roles import router as roles_router

    app.include_router(roles_router, prefix=settings.api_prefix)

    # Target database connection
    from dbcreds.api.routers.connection import router as connection_router

    app.include_router(connection_router, prefix=settings.api_prefix)

    return app


# Application instance
app = create_application()
