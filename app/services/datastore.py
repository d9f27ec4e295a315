"""Data service adapter — authoritative reads, writes and stored procedures.

Everything here talks straight to the database; caching lives one layer up
in ``app.services.admin``. Writes commit before returning, so a returned
call means the change is durable and caches may be invalidated.
"""

import secrets
import string
import uuid
from collections.abc import Awaitable, Callable
from datetime import datetime
from typing import Any

from sqlalchemy import func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.models.app_user import AppUser, AppUserPage, AppUserRead, UserStatus
from app.models.application import Application, ApplicationRead
from app.models.base import utcnow
from app.models.license import License, LicensePage, LicenseRead

LICENSE_ALPHABET = string.ascii_uppercase + string.digits


class DataServiceError(Exception):
    """Base class for domain errors raised by the data service."""


class NotFoundError(DataServiceError):
    pass


class RpcError(DataServiceError):
    """A stored procedure rejected its input."""

    def __init__(self, code: str, message: str) -> None:
        super().__init__(f"{code}: {message}")
        self.code = code
        self.message = message


def generate_license_code() -> str:
    """Random ``XXXX-XXXX-XXXX-XXXX`` code."""
    groups = (
        "".join(secrets.choice(LICENSE_ALPHABET) for _ in range(4))
        for _ in range(4)
    )
    return "-".join(groups)


class DataStore:
    """Table access and stored procedures over one async session."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self._procedures: dict[str, Callable[..., Awaitable[Any]]] = {
            "verify_license": self._verify_license,
            "redeem_license": self._redeem_license,
        }

    # ── Reads ─────────────────────────────────────────────────

    async def fetch_applications(self) -> list[ApplicationRead]:
        stmt = (
            select(Application)
            .where(Application.is_active.is_(True))  # type: ignore[attr-defined]
            .order_by(Application.display_name)
        )
        result = await self.session.execute(stmt)
        return [ApplicationRead.model_validate(a) for a in result.scalars().all()]

    async def fetch_users(
        self,
        app_name: str | None,
        limit: int,
        offset: int,
        status: UserStatus | None = None,
        search: str | None = None,
    ) -> AppUserPage:
        filters = _user_filters(app_name, status, search)
        total = (await self.session.execute(
            select(func.count()).select_from(AppUser).where(*filters)
        )).scalar_one()
        stmt = (
            select(AppUser)
            .where(*filters)
            .order_by(AppUser.created_at.desc())  # type: ignore[attr-defined]
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return AppUserPage(
            items=[AppUserRead.model_validate(u) for u in result.scalars().all()],
            total=total,
            limit=limit,
            offset=offset,
        )

    async def count_users(
        self, app_name: str | None, status: UserStatus | None = None
    ) -> int:
        filters = _user_filters(app_name, status, None)
        stmt = select(func.count()).select_from(AppUser).where(*filters)
        return (await self.session.execute(stmt)).scalar_one()

    async def get_user(self, user_id: uuid.UUID) -> AppUser:
        user = await self.session.get(AppUser, user_id)
        if user is None:
            raise NotFoundError(f"User {user_id} not found")
        return user

    async def fetch_user(
        self, user_id: uuid.UUID, app_name: str | None = None
    ) -> AppUserRead:
        user = await self.get_user(user_id)
        if app_name is not None and user.app_name != app_name:
            raise NotFoundError(f"User {user_id} not found in {app_name}")
        return AppUserRead.model_validate(user)

    async def fetch_licenses(
        self,
        app_name: str | None,
        limit: int,
        offset: int,
        is_used: bool | None = None,
    ) -> LicensePage:
        filters = _license_filters(app_name, is_used)
        total = (await self.session.execute(
            select(func.count()).select_from(License).where(*filters)
        )).scalar_one()
        stmt = (
            select(License)
            .where(*filters)
            .order_by(License.created_at.desc())  # type: ignore[attr-defined]
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return LicensePage(
            items=[LicenseRead.model_validate(lic) for lic in result.scalars().all()],
            total=total,
            limit=limit,
            offset=offset,
        )

    async def count_licenses(
        self, app_name: str | None, is_used: bool | None = None
    ) -> int:
        filters = _license_filters(app_name, is_used)
        stmt = select(func.count()).select_from(License).where(*filters)
        return (await self.session.execute(stmt)).scalar_one()

    async def get_license(self, license_id: uuid.UUID) -> License:
        lic = await self.session.get(License, license_id)
        if lic is None:
            raise NotFoundError(f"License {license_id} not found")
        return lic

    # ── Writes ────────────────────────────────────────────────

    async def update_user_status(self, user: AppUser, status: UserStatus) -> AppUserRead:
        user.status = status
        user.touch()
        self.session.add(user)
        await self.session.commit()
        await self.session.refresh(user)
        return AppUserRead.model_validate(user)

    async def delete_user(self, user: AppUser) -> None:
        await self.session.delete(user)
        await self.session.commit()

    async def insert_licenses(
        self,
        app_name: str,
        count: int,
        expires_at: datetime | None = None,
    ) -> list[LicenseRead]:
        licenses = [
            License(
                license_code=generate_license_code(),
                app_name=app_name,
                expires_at=expires_at,
            )
            for _ in range(count)
        ]
        self.session.add_all(licenses)
        await self.session.commit()
        for lic in licenses:
            await self.session.refresh(lic)
        return [LicenseRead.model_validate(lic) for lic in licenses]

    async def delete_license(self, lic: License) -> None:
        await self.session.delete(lic)
        await self.session.commit()

    # ── Stored procedures ─────────────────────────────────────

    async def call(self, procedure: str, params: dict[str, Any]) -> Any:
        """Run a named procedure that reads and writes in one transaction."""
        handler = self._procedures.get(procedure)
        if handler is None:
            raise RpcError("UNKNOWN_PROCEDURE", f"No procedure named {procedure!r}")
        return await handler(**params)

    async def _find_license(self, app_name: str, license_code: str) -> License | None:
        stmt = select(License).where(
            License.app_name == app_name,
            License.license_code == license_code.strip().upper(),
        )
        return (await self.session.execute(stmt)).scalar_one_or_none()

    async def _verify_license(self, p_app_name: str, p_license_code: str) -> bool:
        lic = await self._find_license(p_app_name, p_license_code)
        if lic is None or lic.is_used:
            return False
        return lic.expires_at is None or lic.expires_at > utcnow()

    async def _redeem_license(
        self,
        p_app_name: str,
        p_license_code: str,
        p_email: str,
        p_name: str = "",
    ) -> AppUserRead:
        lic = await self._find_license(p_app_name, p_license_code)
        if lic is None:
            raise RpcError("LICENSE_NOT_FOUND", "License code does not exist")
        if lic.is_used:
            raise RpcError("LICENSE_ALREADY_USED", "License code has already been redeemed")
        now = utcnow()
        if lic.expires_at is not None and lic.expires_at <= now:
            raise RpcError("LICENSE_EXPIRED", "License code has expired")

        # Reactivate an existing user of this app rather than duplicating it
        stmt = select(AppUser).where(
            AppUser.app_name == p_app_name,
            AppUser.email == p_email,
        )
        user = (await self.session.execute(stmt)).scalar_one_or_none()
        if user is None:
            user = AppUser(app_name=p_app_name, email=p_email, name=p_name)
        elif p_name:
            user.name = p_name
        user.status = UserStatus.ACTIVE
        user.license_id = lic.id
        user.touch(now)
        self.session.add(user)
        await self.session.flush()  # populate user.id

        lic.is_used = True
        lic.used_by = user.id
        lic.used_at = now
        lic.touch(now)
        self.session.add(lic)
        await self.session.commit()
        await self.session.refresh(user)
        return AppUserRead.model_validate(user)


# ── Filter helpers ────────────────────────────────────────────

def _user_filters(
    app_name: str | None,
    status: UserStatus | None,
    search: str | None,
) -> list:
    filters = []
    if app_name is not None:
        filters.append(AppUser.app_name == app_name)
    if status is not None:
        filters.append(AppUser.status == status)
    if search:
        pattern = f"%{search}%"
        filters.append(or_(
            AppUser.email.ilike(pattern),  # type: ignore[attr-defined]
            AppUser.name.ilike(pattern),  # type: ignore[attr-defined]
        ))
    return filters


def _license_filters(app_name: str | None, is_used: bool | None) -> list:
    filters = []
    if app_name is not None:
        filters.append(License.app_name == app_name)
    if is_used is not None:
        filters.append(License.is_used == is_used)
    return filters
