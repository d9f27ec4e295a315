"""Tests for AdminService — cached reads and invalidating writes."""

import uuid
from datetime import timedelta

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.cache import MemoryCache
from app.models.app_user import AppUser, UserStatus
from app.models.base import utcnow
from app.models.license import License
from app.services.admin import AdminService
from app.services.datastore import DataStore, NotFoundError, RpcError


class SpyStore(DataStore):
    """DataStore that records which reads reached the database."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.reads: list[tuple] = []

    async def fetch_users(self, app_name, *args, **kwargs):
        self.reads.append(("users", app_name))
        return await super().fetch_users(app_name, *args, **kwargs)

    async def fetch_licenses(self, app_name, *args, **kwargs):
        self.reads.append(("licenses", app_name))
        return await super().fetch_licenses(app_name, *args, **kwargs)

    async def count_users(self, app_name, status=None):
        self.reads.append(("stats:users", app_name))
        return await super().count_users(app_name, status)

    async def count_licenses(self, app_name, is_used=None):
        self.reads.append(("stats:licenses", app_name))
        return await super().count_licenses(app_name, is_used)


@pytest.fixture
def store(session: AsyncSession) -> SpyStore:
    return SpyStore(session)


@pytest.fixture
def service(store: SpyStore, cache: MemoryCache) -> AdminService:
    return AdminService(store, cache)


async def _add_user(session: AsyncSession, app_name: str, email: str, **kw) -> AppUser:
    user = AppUser(app_name=app_name, email=email, **kw)
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user


async def _add_license(session: AsyncSession, app_name: str, code: str, **kw) -> License:
    lic = License(app_name=app_name, license_code=code, **kw)
    session.add(lic)
    await session.commit()
    await session.refresh(lic)
    return lic


async def _read_everything(service: AdminService, app_name: str) -> None:
    await service.list_users(app_name)
    await service.list_licenses(app_name)
    await service.user_stats(app_name)
    await service.license_stats(app_name)


# ── Reads ─────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_list_users_is_served_from_cache(service, store, session):
    await _add_user(session, "app1", "a@app1.com")

    first = await service.list_users("app1")
    await _add_user(session, "app1", "b@app1.com")
    second = await service.list_users("app1")

    assert second.total == first.total == 1
    assert store.reads == [("users", "app1")]


@pytest.mark.asyncio
async def test_list_users_filters_and_pages(service, session):
    await _add_user(session, "app1", "alice@app1.com", name="Alice")
    await _add_user(session, "app1", "bob@app1.com", name="Bob", status=UserStatus.INACTIVE)
    await _add_user(session, "app2", "carol@app2.com")

    assert (await service.list_users("app1")).total == 2
    assert (await service.list_users(None)).total == 3
    assert (await service.list_users("app1", status=UserStatus.INACTIVE)).total == 1
    found = await service.list_users("app1", search="ali")
    assert [u.email for u in found.items] == ["alice@app1.com"]
    page = await service.list_users("app1", limit=1, offset=1)
    assert page.total == 2
    assert len(page.items) == 1


@pytest.mark.asyncio
async def test_read_failure_is_not_cached(service, store, cache, monkeypatch):
    async def broken(*args, **kwargs):
        raise ConnectionError("data service down")

    monkeypatch.setattr(store, "fetch_licenses", broken)
    with pytest.raises(ConnectionError):
        await service.list_licenses("app1")
    assert len(cache) == 0


# ── Writes ────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_update_status_invalidates_user_views(service, store, session):
    user = await _add_user(session, "app1", "a@app1.com")
    await _read_everything(service, "app1")
    store.reads.clear()

    updated = await service.update_user_status(user.id, UserStatus.INACTIVE)
    assert updated.status == UserStatus.INACTIVE

    await _read_everything(service, "app1")
    assert ("users", "app1") in store.reads
    assert ("stats:users", "app1") in store.reads
    # License views were not touched by the mutation
    assert ("licenses", "app1") not in store.reads
    assert ("stats:licenses", "app1") not in store.reads

    user_stats = await service.user_stats("app1")
    assert user_stats.inactive == 1


@pytest.mark.asyncio
async def test_failed_write_skips_invalidation(service, store, cache, session, monkeypatch):
    user = await _add_user(session, "app1", "a@app1.com")
    await service.list_users("app1")
    entries = len(cache)

    async def failing_update(*args, **kwargs):
        raise RuntimeError("write rejected")

    monkeypatch.setattr(store, "update_user_status", failing_update)
    with pytest.raises(RuntimeError):
        await service.update_user_status(user.id, UserStatus.INACTIVE)

    assert len(cache) == entries
    assert "users:app1:l20:o0" in cache


@pytest.mark.asyncio
async def test_missing_entity_raises_before_invalidation(service, cache):
    cache.set("users:app1:l20:o0", "cached", ttl=30)
    with pytest.raises(NotFoundError):
        await service.delete_user(uuid.uuid4())
    with pytest.raises(NotFoundError):
        await service.delete_license(uuid.uuid4())
    assert cache.get("users:app1:l20:o0") == "cached"


@pytest.mark.asyncio
async def test_delete_user_uses_entity_tenant(service, cache, session):
    user = await _add_user(session, "app2", "x@app2.com")
    cache.set("users:app1:l20:o0", "app1 page", ttl=30)
    cache.set("users:app2:l20:o0", "app2 page", ttl=30)

    await service.delete_user(user.id)

    assert "users:app2:l20:o0" not in cache
    assert "users:app1:l20:o0" in cache


@pytest.mark.asyncio
async def test_generate_licenses(service, cache):
    cache.set("stats:licenses:app1", 0, ttl=20)

    licenses = await service.generate_licenses("app1", 3)

    assert len(licenses) == 3
    assert len({lic.license_code for lic in licenses}) == 3
    for lic in licenses:
        assert len(lic.license_code) == 19
        assert lic.license_code.count("-") == 3
        assert lic.app_name == "app1"
        assert lic.is_used is False
    assert "stats:licenses:app1" not in cache
    assert (await service.license_stats("app1")).available == 3


@pytest.mark.asyncio
async def test_generate_licenses_with_expiry(service):
    [lic] = await service.generate_licenses("app1", 1, expires_in_days=30)
    assert lic.expires_at is not None
    assert lic.expires_at > utcnow() + timedelta(days=29)


@pytest.mark.asyncio
async def test_generate_licenses_requires_app(service):
    with pytest.raises(ValueError):
        await service.generate_licenses("  ", 1)


@pytest.mark.asyncio
async def test_delete_license(service, session):
    lic = await _add_license(session, "app1", "AAAA-BBBB-CCCC-DDDD")
    await service.list_licenses("app1")

    await service.delete_license(lic.id)

    assert (await service.list_licenses("app1")).total == 0


# ── Verify / redeem ──────────────────────────────────────────

@pytest.mark.asyncio
async def test_verify_license(service, session):
    await _add_license(session, "app1", "AAAA-BBBB-CCCC-DDDD")
    await _add_license(session, "app1", "USED-USED-USED-USED", is_used=True)
    await _add_license(
        session, "app1", "OLDD-OLDD-OLDD-OLDD", expires_at=utcnow() - timedelta(days=1)
    )

    assert await service.verify_license("app1", "aaaa-bbbb-cccc-dddd") is True
    assert await service.verify_license("app2", "AAAA-BBBB-CCCC-DDDD") is False
    assert await service.verify_license("app1", "USED-USED-USED-USED") is False
    assert await service.verify_license("app1", "OLDD-OLDD-OLDD-OLDD") is False


@pytest.mark.asyncio
async def test_redeem_invalidates_tenant_views_only(service, store, session):
    await _add_license(session, "app1", "AAAA-BBBB-CCCC-DDDD")
    await _read_everything(service, "app1")
    await service.list_users("app2")
    store.reads.clear()

    user = await service.redeem_license("app1", "AAAA-BBBB-CCCC-DDDD", "new@app1.com", "New")
    assert user.status == UserStatus.ACTIVE
    assert user.license_id is not None

    await _read_everything(service, "app1")
    await service.list_users("app2")

    assert ("users", "app1") in store.reads
    assert ("licenses", "app1") in store.reads
    assert ("stats:users", "app1") in store.reads
    assert ("stats:licenses", "app1") in store.reads
    assert ("users", "app2") not in store.reads

    assert (await service.license_stats("app1")).used == 1
    assert (await service.user_stats("app1")).active == 1


@pytest.mark.asyncio
async def test_redeem_reactivates_existing_user(service, session):
    existing = await _add_user(
        session, "app1", "back@app1.com", status=UserStatus.INACTIVE
    )
    await _add_license(session, "app1", "AAAA-BBBB-CCCC-DDDD")

    user = await service.redeem_license("app1", "AAAA-BBBB-CCCC-DDDD", "back@app1.com")

    assert user.id == existing.id
    assert user.status == UserStatus.ACTIVE
    assert (await service.list_users("app1")).total == 1


@pytest.mark.asyncio
@pytest.mark.parametrize(("code", "expected"), [
    ("NOPE-NOPE-NOPE-NOPE", "LICENSE_NOT_FOUND"),
    ("USED-USED-USED-USED", "LICENSE_ALREADY_USED"),
    ("OLDD-OLDD-OLDD-OLDD", "LICENSE_EXPIRED"),
])
async def test_redeem_rejections_leave_cache(service, cache, session, code, expected):
    await _add_license(session, "app1", "USED-USED-USED-USED", is_used=True)
    await _add_license(
        session, "app1", "OLDD-OLDD-OLDD-OLDD", expires_at=utcnow() - timedelta(days=1)
    )
    cache.set("licenses:app1:l20:o0", "cached", ttl=30)

    with pytest.raises(RpcError) as excinfo:
        await service.redeem_license("app1", code, "someone@app1.com")

    assert excinfo.value.code == expected
    assert cache.get("licenses:app1:l20:o0") == "cached"


@pytest.mark.asyncio
async def test_unknown_procedure(store):
    with pytest.raises(RpcError) as excinfo:
        await store.call("migrate_existing_data", {})
    assert excinfo.value.code == "UNKNOWN_PROCEDURE"


@pytest.mark.asyncio
async def test_get_user_is_cached_and_cleared_by_user_writes(service, cache, session):
    user = await _add_user(session, "app1", "a@app1.com")

    first = await service.get_user(user.id)
    assert f"users:all:user_id={user.id}" in cache
    await service.get_user(user.id, "app1")
    assert f"users:app1:user_id={user.id}" in cache
    assert first.status == UserStatus.ACTIVE

    await service.update_user_status(user.id, UserStatus.INACTIVE)

    assert f"users:all:user_id={user.id}" not in cache
    assert f"users:app1:user_id={user.id}" not in cache
    assert (await service.get_user(user.id)).status == UserStatus.INACTIVE


@pytest.mark.asyncio
async def test_get_user_from_other_app_is_not_found(service, cache, session):
    user = await _add_user(session, "app2", "x@app2.com")
    with pytest.raises(NotFoundError):
        await service.get_user(user.id, "app1")
    assert len(cache) == 0
