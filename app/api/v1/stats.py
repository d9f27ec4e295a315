"""User and license statistics per application."""

from fastapi import APIRouter

from app.api.deps import Admin, Auth
from app.services.stats import AppUsage, LicenseStats, UserStats

router = APIRouter(prefix="/stats", tags=["stats"])


@router.get("/users", response_model=UserStats)
async def get_user_stats(auth: Auth, admin: Admin, app_name: str | None = None) -> UserStats:
    return await admin.user_stats(app_name)


@router.get("/licenses", response_model=LicenseStats)
async def get_license_stats(
    auth: Auth, admin: Admin, app_name: str | None = None
) -> LicenseStats:
    return await admin.license_stats(app_name)


@router.get("/apps", response_model=list[AppUsage])
async def get_app_usage(auth: Auth, admin: Admin) -> list[AppUsage]:
    """Users and licenses for every active application."""
    return await admin.app_usage()
