"""End user of a downstream application, activated by redeeming a license."""

import uuid
from datetime import datetime
from enum import StrEnum

from sqlmodel import Field, SQLModel

from app.models.base import TimestampMixin, new_uuid


class UserStatus(StrEnum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class AppUser(TimestampMixin, SQLModel, table=True):
    __tablename__ = "app_users"

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    app_name: str = Field(max_length=100, nullable=False, index=True)
    email: str = Field(max_length=320, nullable=False, index=True)
    name: str = Field(default="", max_length=255)
    status: UserStatus = Field(default=UserStatus.ACTIVE, index=True)

    # License redeemed to activate this user (no FK: licenses point back here)
    license_id: uuid.UUID | None = Field(default=None, index=True)


# ── Pydantic schemas ─────────────────────────────────────────

class AppUserRead(SQLModel):
    id: uuid.UUID
    app_name: str
    email: str
    name: str
    status: UserStatus
    license_id: uuid.UUID | None
    created_at: datetime
    updated_at: datetime


class AppUserPage(SQLModel):
    items: list[AppUserRead]
    total: int
    limit: int
    offset: int


class UserStatusUpdate(SQLModel):
    status: UserStatus
