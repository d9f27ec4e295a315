"""License model — a one-shot activation code for one application."""

import uuid
from datetime import datetime

from sqlmodel import Field, SQLModel

from app.models.base import TimestampMixin, new_uuid


class License(TimestampMixin, SQLModel, table=True):
    __tablename__ = "licenses"

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)

    # XXXX-XXXX-XXXX-XXXX over A-Z0-9
    license_code: str = Field(max_length=19, unique=True, nullable=False, index=True)
    app_name: str = Field(max_length=100, nullable=False, index=True)

    is_used: bool = Field(default=False, index=True)
    used_by: uuid.UUID | None = Field(
        default=None, foreign_key="app_users.id", ondelete="SET NULL"
    )
    used_at: datetime | None = Field(default=None)
    expires_at: datetime | None = Field(default=None)


# ── Pydantic schemas ─────────────────────────────────────────

class LicenseRead(SQLModel):
    id: uuid.UUID
    license_code: str
    app_name: str
    is_used: bool
    used_by: uuid.UUID | None
    used_at: datetime | None
    expires_at: datetime | None
    created_at: datetime


class LicensePage(SQLModel):
    items: list[LicenseRead]
    total: int
    limit: int
    offset: int


class LicenseGenerate(SQLModel):
    app_name: str = Field(min_length=1, max_length=100)
    count: int = Field(ge=1, le=1000)
    expires_in_days: int | None = Field(default=None, ge=1)


class LicenseVerify(SQLModel):
    app_name: str = Field(min_length=1, max_length=100)
    license_code: str = Field(min_length=1, max_length=19)


class LicenseRedeem(LicenseVerify):
    email: str = Field(max_length=320)
    name: str = Field(default="", max_length=255)
