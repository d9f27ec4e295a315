"""Application model — a downstream app whose users and licenses we manage."""

import uuid

from sqlmodel import Field, SQLModel

from app.models.base import TimestampMixin, new_uuid


class Application(TimestampMixin, SQLModel, table=True):
    __tablename__ = "applications"

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)

    # Tenant slug, e.g. "productivity" or "cashflow". "all" is reserved for
    # unscoped cache keys.
    name: str = Field(max_length=100, unique=True, nullable=False, index=True)
    display_name: str = Field(max_length=255, nullable=False)
    description: str = Field(default="", max_length=1000)
    is_active: bool = Field(default=True)


class ApplicationRead(SQLModel):
    id: uuid.UUID
    name: str
    display_name: str
    description: str
    is_active: bool
