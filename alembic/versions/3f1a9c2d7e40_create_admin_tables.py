"""create applications, app_users, licenses and admin_users

Revision ID: 3f1a9c2d7e40
Revises: 
Create Date: 2026-10-19 09:12:44.201733

"""
from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = '3f1a9c2d7e40'
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "applications",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("display_name", sa.String(255), nullable=False),
        sa.Column("description", sa.String(1000), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_applications_name", "applications", ["name"], unique=True)

    op.create_table(
        "app_users",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("app_name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("license_id", sa.Uuid(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_app_users_app_name", "app_users", ["app_name"])
    op.create_index("ix_app_users_email", "app_users", ["email"])
    op.create_index("ix_app_users_status", "app_users", ["status"])
    op.create_index("ix_app_users_license_id", "app_users", ["license_id"])

    op.create_table(
        "licenses",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("license_code", sa.String(19), nullable=False),
        sa.Column("app_name", sa.String(100), nullable=False),
        sa.Column("is_used", sa.Boolean(), nullable=False),
        sa.Column(
            "used_by",
            sa.Uuid(),
            sa.ForeignKey("app_users.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("used_at", sa.DateTime(), nullable=True),
        sa.Column("expires_at", sa.DateTime(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_licenses_license_code", "licenses", ["license_code"], unique=True)
    op.create_index("ix_licenses_app_name", "licenses", ["app_name"])
    op.create_index("ix_licenses_is_used", "licenses", ["is_used"])

    op.create_table(
        "admin_users",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("password_hash", sa.String(), nullable=False),
        sa.Column("display_name", sa.String(255), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_admin_users_email", "admin_users", ["email"], unique=True)


def downgrade() -> None:
    op.drop_table("admin_users")
    op.drop_table("licenses")
    op.drop_table("app_users")
    op.drop_table("applications")
