"""Count-based statistics built from cached counts.

Each figure is two independent read-through counts (all rows vs. rows in one
state) and a subtraction. The two counts may come from different snapshots,
so under concurrent writes a derived figure can be briefly off, or even
negative; it is returned as-is rather than clamped.
"""

from pydantic import BaseModel

from app.core.cache import MemoryCache, get_or_fetch
from app.core.cache_keys import ResourceClass, tenant_scope
from app.models.app_user import UserStatus
from app.services.datastore import DataStore


class UserStats(BaseModel):
    total: int
    active: int
    inactive: int


class LicenseStats(BaseModel):
    total: int
    used: int
    available: int


class AppUsage(BaseModel):
    app_name: str
    display_name: str
    users: UserStats
    licenses: LicenseStats


async def user_stats(
    cache: MemoryCache, store: DataStore, app_name: str | None = None
) -> UserStats:
    scope = tenant_scope(app_name)
    total = await get_or_fetch(
        cache, ResourceClass.USER_STATS, scope,
        lambda: store.count_users(scope),
    )
    active = await get_or_fetch(
        cache, ResourceClass.USER_STATS, scope,
        lambda: store.count_users(scope, status=UserStatus.ACTIVE),
        status=UserStatus.ACTIVE,
    )
    return UserStats(total=total, active=active, inactive=total - active)


async def license_stats(
    cache: MemoryCache, store: DataStore, app_name: str | None = None
) -> LicenseStats:
    scope = tenant_scope(app_name)
    total = await get_or_fetch(
        cache, ResourceClass.LICENSE_STATS, scope,
        lambda: store.count_licenses(scope),
    )
    used = await get_or_fetch(
        cache, ResourceClass.LICENSE_STATS, scope,
        lambda: store.count_licenses(scope, is_used=True),
        is_used=True,
    )
    return LicenseStats(total=total, used=used, available=total - used)


async def app_usage_overview(cache: MemoryCache, store: DataStore) -> list[AppUsage]:
    """User and license stats for every active application."""
    apps = await get_or_fetch(
        cache, ResourceClass.APPLICATIONS, None, store.fetch_applications
    )
    return [
        AppUsage(
            app_name=app.name,
            display_name=app.display_name,
            users=await user_stats(cache, store, app.name),
            licenses=await license_stats(cache, store, app.name),
        )
        for app in apps
    ]
