"""System health and cache maintenance endpoints."""

import time

from fastapi import APIRouter, status
from pydantic import BaseModel
from sqlalchemy import text

from app.api.deps import Auth, Cache, Session

router = APIRouter(prefix="/system", tags=["system"])


class ServiceHealth(BaseModel):
    status: str  # "ok" or "error"
    detail: str | None = None
    latency_ms: int | None = None


class HealthResponse(BaseModel):
    status: str
    database: ServiceHealth
    cache_entries: int


@router.get("/health", response_model=HealthResponse)
async def system_health(session: Session, cache: Cache) -> HealthResponse:
    """Check database connectivity and report cache size."""
    db = await _check_database(session)
    return HealthResponse(
        status="ok" if db.status == "ok" else "degraded",
        database=db,
        cache_entries=len(cache),
    )


@router.delete("/cache", status_code=status.HTTP_204_NO_CONTENT)
async def flush_cache(auth: Auth, cache: Cache) -> None:
    """Drop every cached entry; the next reads go to the database."""
    cache.clear()


async def _check_database(session) -> ServiceHealth:
    start = time.monotonic()
    try:
        await session.execute(text("SELECT 1"))
    except Exception as exc:
        return ServiceHealth(status="error", detail=str(exc)[:200])
    return ServiceHealth(status="ok", latency_ms=int((time.monotonic() - start) * 1000))
