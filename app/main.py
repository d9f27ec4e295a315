"""FastAPI application entrypoint."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.v1 import v1_router
from app.core.cache import MemoryCache
from app.core.config import get_settings
from app.core.database import async_session_factory, ensure_bootstrap_admin, init_db


@asynccontextmanager
async def lifespan(application: FastAPI) -> AsyncGenerator[None, None]:
    # Startup: ensure tables exist (use Alembic in production)
    await init_db()
    async with async_session_factory() as session:
        await ensure_bootstrap_admin(session)
    # One cache per process, shared by every request
    application.state.cache = MemoryCache()
    yield
    # Shutdown: cached entries die with the process
    application.state.cache.clear()


app = FastAPI(
    title="License Admin",
    version="0.1.0",
    description="Admin console backend for multi-app users and licenses",
    lifespan=lifespan,
)

# ── CORS ─────────────────────────────────────────────────────
_settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in _settings.allowed_origins.split(",")],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── API routes ───────────────────────────────────────────────
app.include_router(v1_router)


@app.get("/health", tags=["system"])
async def health_check() -> dict:
    return {"status": "ok"}
