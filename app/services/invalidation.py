"""Mutation → cache scope table and the single place that applies it.

Every write in ``AdminService`` calls :func:`invalidate` after its commit.
Prefixes come from the static table below, never from what happens to be
cached, so invalidating an empty cache is a silent no-op.
"""

import logging
from enum import StrEnum

from app.core.cache import MemoryCache
from app.core.cache_keys import ALL_TENANTS, SEP, ResourceClass, normalize_tenant, scope_key

logger = logging.getLogger(__name__)


class Mutation(StrEnum):
    UPDATE_USER_STATUS = "update_user_status"
    DELETE_USER = "delete_user"
    GENERATE_LICENSES = "generate_licenses"
    DELETE_LICENSE = "delete_license"
    REDEEM_LICENSE = "redeem_license"


_USERS = (ResourceClass.USERS, ResourceClass.USER_STATS)
_LICENSES = (ResourceClass.LICENSES, ResourceClass.LICENSE_STATS)

INVALIDATION_SCOPES: dict[Mutation, tuple[ResourceClass, ...]] = {
    Mutation.UPDATE_USER_STATUS: _USERS,
    Mutation.DELETE_USER: _USERS,
    Mutation.GENERATE_LICENSES: _LICENSES,
    Mutation.DELETE_LICENSE: _LICENSES,
    # Redeeming marks the license used and creates or activates a user
    Mutation.REDEEM_LICENSE: _LICENSES + _USERS,
}


def affected_scopes(mutation: Mutation, tenant: str | None) -> list[str]:
    """Scope roots made stale by ``mutation`` on ``tenant``.

    Unscoped (``all``) lists and counts include every tenant's rows, so they
    are cleared alongside the tenant's own scope.
    """
    tenants = [tenant]
    if normalize_tenant(tenant) != ALL_TENANTS:
        tenants.append(None)
    return [
        scope_key(resource, t)
        for resource in INVALIDATION_SCOPES[mutation]
        for t in tenants
    ]


def invalidate(cache: MemoryCache, mutation: Mutation, tenant: str | None) -> int:
    """Drop every cache entry ``mutation`` may have made stale.

    Returns the number of entries removed.
    """
    removed = 0
    for root in affected_scopes(mutation, tenant):
        # Exact root plus everything below it; "app1:" does not match "app10:"
        if root in cache:
            removed += 1
        cache.delete(root)
        removed += cache.invalidate_prefix(root + SEP)
    logger.info(
        "Invalidated %d cache entries after %s (tenant=%s)",
        removed, mutation, normalize_tenant(tenant),
    )
    return removed
