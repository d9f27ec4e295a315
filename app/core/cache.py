"""In-process TTL cache with prefix invalidation.

Sits in front of every data-service read. Entries expire lazily: a ``get``
that observes an expired entry deletes it before reporting a miss, so an
expired value is never served even though nothing sweeps the store in the
background. Growth is bounded only by TTLs and explicit invalidation.

All operations are synchronous, so under asyncio each one runs to completion
between suspension points and no locking is needed.
"""

import logging
import time
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from app.core.cache_keys import ResourceClass, build_key, ttl_for

logger = logging.getLogger(__name__)

T = TypeVar("T")

_MISSING = object()


class MemoryCache:
    """Key → (value, expires_at) map with lazy expiry."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._store: dict[str, tuple[Any, float]] = {}
        self._clock = clock

    def get(self, key: str, default: Any = None) -> Any:
        """Return the cached value, or ``default`` if absent or expired.

        An expired entry is removed as a side effect of this call.
        """
        entry = self._store.get(key)
        if entry is None:
            return default
        value, expires_at = entry
        if self._clock() > expires_at:
            self._store.pop(key, None)
            return default
        return value

    def set(self, key: str, value: Any, ttl: float) -> None:
        """Store a value for ``ttl`` seconds, replacing any existing entry."""
        if ttl <= 0:
            raise ValueError(f"ttl must be positive, got {ttl!r}")
        self._store[key] = (value, self._clock() + ttl)

    def delete(self, key: str) -> None:
        self._store.pop(key, None)

    def invalidate_prefix(self, prefix: str) -> int:
        """Remove every entry whose key starts with ``prefix``.

        Returns the number of entries removed (0 when nothing matched).
        """
        # Collect first; the dict must not change size while iterating
        doomed = [key for key in self._store if key.startswith(prefix)]
        for key in doomed:
            del self._store[key]
        return len(doomed)

    def clear(self) -> None:
        self._store.clear()

    def __len__(self) -> int:
        # Counts stored entries, including expired ones not yet observed
        return len(self._store)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.get(key, _MISSING) is not _MISSING

    async def read_through(
        self,
        key: str,
        ttl: float,
        fetch: Callable[[], Awaitable[T]],
    ) -> T:
        """Return the cached value for ``key`` or fetch, store and return it.

        Failures from ``fetch`` propagate unchanged and are never cached.
        Concurrent misses on the same key each call ``fetch``. A fetch still in
        flight when its key is invalidated stores its older result afterwards,
        for a full TTL.
        """
        cached = self.get(key, _MISSING)
        if cached is not _MISSING:
            logger.debug("Cache hit: %s", key)
            return cached

        logger.debug("Cache miss: %s", key)
        value = await fetch()
        self.set(key, value, ttl)
        return value


async def get_or_fetch(
    cache: MemoryCache,
    resource: ResourceClass,
    tenant: str | None,
    fetch: Callable[[], Awaitable[T]],
    *,
    limit: int | None = None,
    offset: int | None = None,
    **filters: Any,
) -> T:
    """Read path: build the key, apply the resource's TTL, read through."""
    key = build_key(resource, tenant, limit=limit, offset=offset, **filters)
    return await cache.read_through(key, ttl_for(resource), fetch)
