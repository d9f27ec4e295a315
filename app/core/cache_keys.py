"""Cache key construction and TTL policy.

Keys look like ``users:app1:l20:o0:status=active``: resource class, tenant
scope, optional pagination, then filters sorted by name. Tenant names and
filter parts are percent-escaped, so the ``:`` separator and the ``=``
delimiter never appear inside a component and two different requests can
not produce the same key.
"""

from enum import StrEnum
from typing import Any
from urllib.parse import quote

from app.core.config import get_settings

SEP = ":"

# Scope used when a request is not limited to one application
ALL_TENANTS = "all"


class ResourceClass(StrEnum):
    APPLICATIONS = "applications"
    USERS = "users"
    LICENSES = "licenses"
    USER_STATS = "stats:users"
    LICENSE_STATS = "stats:licenses"


def ttl_for(resource: ResourceClass) -> float:
    """TTL in seconds for a resource class."""
    settings = get_settings()
    if resource is ResourceClass.APPLICATIONS:
        return settings.cache_ttl_applications
    if resource in (ResourceClass.USER_STATS, ResourceClass.LICENSE_STATS):
        return settings.cache_ttl_stats
    return settings.cache_ttl_list


def tenant_scope(app_name: str | None) -> str | None:
    """Strip an application name; blank or ``all`` means unscoped (``None``).

    The result is both the query filter and the key scope, so the two always
    describe the same rows.
    """
    if app_name is None:
        return None
    app_name = app_name.strip()
    if not app_name or app_name == ALL_TENANTS:
        return None
    return app_name


def _escape(value: str) -> str:
    return quote(value, safe="")


def normalize_tenant(app_name: str | None) -> str:
    scope = tenant_scope(app_name)
    return ALL_TENANTS if scope is None else _escape(scope)


def scope_key(resource: ResourceClass, tenant: str | None) -> str:
    """Root shared by every key of ``resource`` within ``tenant``."""
    return f"{resource}{SEP}{normalize_tenant(tenant)}"


def build_key(
    resource: ResourceClass,
    tenant: str | None,
    *,
    limit: int | None = None,
    offset: int | None = None,
    **filters: Any,
) -> str:
    parts = [scope_key(resource, tenant)]
    if limit is not None:
        parts.append(f"l{int(limit)}")
    if offset is not None:
        parts.append(f"o{int(offset)}")
    for name in sorted(filters):
        value = filters[name]
        if value is None:
            continue
        parts.append(f"{_escape(name)}={_escape(str(value))}")
    return SEP.join(parts)
