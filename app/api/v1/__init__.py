"""V1 API router aggregation."""

from fastapi import APIRouter

from app.api.v1.applications import router as applications_router
from app.api.v1.auth import router as auth_router
from app.api.v1.licenses import router as licenses_router
from app.api.v1.stats import router as stats_router
from app.api.v1.system import router as system_router
from app.api.v1.users import router as users_router

v1_router = APIRouter(prefix="/v1")
v1_router.include_router(auth_router)
v1_router.include_router(applications_router)
v1_router.include_router(users_router)
v1_router.include_router(licenses_router)
v1_router.include_router(stats_router)
v1_router.include_router(system_router)
