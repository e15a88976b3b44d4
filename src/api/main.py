"""
FastAPI application factory.

`create_app` wires middleware, exception handlers and routers; the lifespan
brings the ledger schema up to date before the first request is served.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.api.middleware import ErrorHandlerMiddleware, LoggingMiddleware
from src.api.middleware.error_handler import setup_exception_handlers
from src.api.routes import (
    catalog_router,
    documents_router,
    health_router,
    inventory_router,
)
from src.config import configure_logging, get_logger, get_settings
from src.infrastructure.storage.sqlite import close_pool, get_pool
from src.infrastructure.storage.sqlite.migrations.migrator import initialize_database

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings = get_settings()
    logger.info(
        "application_starting",
        host=settings.api.host,
        port=settings.api.port,
        db_path=str(settings.storage.db_path),
    )

    applied = await initialize_database(settings.storage.db_path)
    await get_pool()
    logger.info(
        "application_started",
        migrations_applied=[f"v{r.version}" for r in applied],
    )

    try:
        yield
    finally:
        await close_pool()
        logger.info("application_stopped")


def create_app() -> FastAPI:
    """Build the API application from current settings."""
    settings = get_settings()
    configure_logging(settings)

    app = FastAPI(
        title="Stockledger API",
        description="Perpetual inventory ledger with weighted-average costing",
        version=settings.app_version,
        docs_url="/docs" if settings.api.debug else None,
        redoc_url="/redoc" if settings.api.debug else None,
        lifespan=lifespan,
    )

    # Starlette runs the last added middleware first: logging wraps errors.
    app.add_middleware(ErrorHandlerMiddleware)
    app.add_middleware(LoggingMiddleware)
    if settings.api.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.api.cors_origins,
            allow_methods=["GET", "POST", "PATCH", "DELETE"],
            allow_headers=["Content-Type", "X-User-Id"],
            expose_headers=["X-Request-ID", "X-Response-Time"],
        )

    setup_exception_handlers(app)

    for router in (health_router, catalog_router, inventory_router, documents_router):
        app.include_router(router)

    # Unprefixed probe for container health checks
    @app.get("/health", include_in_schema=False)
    async def root_health() -> dict[str, str]:
        return {"status": "healthy", "version": settings.app_version}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "src.api.main:app",
        host=settings.api.host,
        port=settings.api.port,
        reload=settings.api.debug,
    )
