"""Liveness and database health endpoints."""

import time

import aiosqlite
from fastapi import APIRouter

from src.application.dto.responses import ComponentHealthResponse, HealthResponse
from src.config import get_settings
from src.infrastructure.storage.sqlite import get_pool
from src.infrastructure.storage.sqlite.migrations.migrator import get_current_version

router = APIRouter(prefix="/api/health", tags=["health"])

_started = time.monotonic()


def _health(database: ComponentHealthResponse | None = None) -> HealthResponse:
    healthy = database is None or database.available
    return HealthResponse(
        status="healthy" if healthy else "unhealthy",
        version=get_settings().app_version,
        uptime_seconds=time.monotonic() - _started,
        database=database,
    )


@router.get("", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    return _health()


@router.get("/db", response_model=HealthResponse)
async def db_health() -> HealthResponse:
    """
    Database health check.

    Counts ledger rows to confirm the schema is migrated and reachable, and
    reports the applied schema version and pool usage.
    """
    try:
        pool = await get_pool()
        start = time.perf_counter()
        async with pool.acquire() as conn:
            cursor = await conn.execute("SELECT COUNT(*) FROM inventory_movements")
            (movements,) = await cursor.fetchone()
            version = await get_current_version(conn)
        database = ComponentHealthResponse(
            name=f"sqlite ({movements} movements)",
            available=True,
            latency_ms=round((time.perf_counter() - start) * 1000, 2),
            schema_version=version,
            connections_in_use=pool.in_use,
        )
    except (aiosqlite.Error, OSError) as e:
        database = ComponentHealthResponse(name="sqlite", available=False, error=str(e))

    return _health(database)
