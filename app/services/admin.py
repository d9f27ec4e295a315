"""Admin operations — cached reads and invalidating writes.

Reads go through the cache. Writes hit the data service first and only
invalidate once the write has committed; a failed write leaves the cache
untouched. Writes addressed by id look the entity up first so invalidation
uses its tenant as it was before the change.
"""

import logging
import uuid
from datetime import timedelta

from app.core.cache import MemoryCache, get_or_fetch
from app.core.cache_keys import ResourceClass, tenant_scope
from app.models.app_user import AppUserPage, AppUserRead, UserStatus
from app.models.application import ApplicationRead
from app.models.base import utcnow
from app.models.license import LicensePage, LicenseRead
from app.services import stats
from app.services.datastore import DataStore, RpcError
from app.services.invalidation import Mutation, invalidate

logger = logging.getLogger(__name__)


class AdminService:
    def __init__(self, store: DataStore, cache: MemoryCache) -> None:
        self.store = store
        self.cache = cache

    # ── Applications ──────────────────────────────────────────

    async def list_applications(self) -> list[ApplicationRead]:
        return await get_or_fetch(
            self.cache, ResourceClass.APPLICATIONS, None, self.store.fetch_applications
        )

    # ── Users ─────────────────────────────────────────────────

    async def list_users(
        self,
        app_name: str | None = None,
        limit: int = 20,
        offset: int = 0,
        status: UserStatus | None = None,
        search: str | None = None,
    ) -> AppUserPage:
        scope = tenant_scope(app_name)
        search = (search or "").strip() or None
        return await get_or_fetch(
            self.cache, ResourceClass.USERS, scope,
            lambda: self.store.fetch_users(scope, limit, offset, status, search),
            limit=limit, offset=offset, status=status, search=search,
        )

    async def get_user(
        self, user_id: uuid.UUID, app_name: str | None = None
    ) -> AppUserRead:
        """One user, cached under its scope so user mutations clear it."""
        scope = tenant_scope(app_name)
        return await get_or_fetch(
            self.cache, ResourceClass.USERS, scope,
            lambda: self.store.fetch_user(user_id, scope),
            user_id=user_id,
        )

    async def update_user_status(
        self, user_id: uuid.UUID, status: UserStatus
    ) -> AppUserRead:
        user = await self.store.get_user(user_id)
        tenant = user.app_name
        updated = await self.store.update_user_status(user, status)
        invalidate(self.cache, Mutation.UPDATE_USER_STATUS, tenant)
        return updated

    async def delete_user(self, user_id: uuid.UUID) -> None:
        user = await self.store.get_user(user_id)
        tenant = user.app_name
        await self.store.delete_user(user)
        invalidate(self.cache, Mutation.DELETE_USER, tenant)

    async def user_stats(self, app_name: str | None = None) -> stats.UserStats:
        return await stats.user_stats(self.cache, self.store, app_name)

    # ── Licenses ──────────────────────────────────────────────

    async def list_licenses(
        self,
        app_name: str | None = None,
        limit: int = 20,
        offset: int = 0,
        is_used: bool | None = None,
    ) -> LicensePage:
        scope = tenant_scope(app_name)
        return await get_or_fetch(
            self.cache, ResourceClass.LICENSES, scope,
            lambda: self.store.fetch_licenses(scope, limit, offset, is_used),
            limit=limit, offset=offset, is_used=is_used,
        )

    async def generate_licenses(
        self,
        app_name: str,
        count: int,
        expires_in_days: int | None = None,
    ) -> list[LicenseRead]:
        tenant = _require_tenant(app_name)
        expires_at = (
            utcnow() + timedelta(days=expires_in_days) if expires_in_days else None
        )
        licenses = await self.store.insert_licenses(tenant, count, expires_at)
        invalidate(self.cache, Mutation.GENERATE_LICENSES, tenant)
        logger.info("Generated %d licenses for %s", len(licenses), tenant)
        return licenses

    async def delete_license(self, license_id: uuid.UUID) -> None:
        lic = await self.store.get_license(license_id)
        tenant = lic.app_name
        await self.store.delete_license(lic)
        invalidate(self.cache, Mutation.DELETE_LICENSE, tenant)

    async def license_stats(self, app_name: str | None = None) -> stats.LicenseStats:
        return await stats.license_stats(self.cache, self.store, app_name)

    async def verify_license(self, app_name: str, license_code: str) -> bool:
        """Check a code is redeemable. Always asks the data service."""
        return await self.store.call("verify_license", {
            "p_app_name": _require_tenant(app_name),
            "p_license_code": license_code,
        })

    async def redeem_license(
        self,
        app_name: str,
        license_code: str,
        email: str,
        name: str = "",
    ) -> AppUserRead:
        tenant = _require_tenant(app_name)
        try:
            user = await self.store.call("redeem_license", {
                "p_app_name": tenant,
                "p_license_code": license_code,
                "p_email": email,
                "p_name": name,
            })
        except RpcError as exc:
            logger.warning("Redemption rejected for %s: %s", tenant, exc.code)
            raise
        invalidate(self.cache, Mutation.REDEEM_LICENSE, tenant)
        logger.info("License redeemed for %s by %s", tenant, email)
        return user

    # ── Cross-app ─────────────────────────────────────────────

    async def app_usage(self) -> list[stats.AppUsage]:
        return await stats.app_usage_overview(self.cache, self.store)


def _require_tenant(app_name: str) -> str:
    tenant = tenant_scope(app_name)
    if tenant is None:
        raise ValueError("app_name must name a single application")
    return tenant
