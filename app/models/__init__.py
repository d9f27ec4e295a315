"""Import all models so SQLModel.metadata picks them up."""

from app.models.admin_user import AdminUser, AdminUserRead
from app.models.app_user import AppUser, AppUserPage, AppUserRead, UserStatus, UserStatusUpdate
from app.models.application import Application, ApplicationRead
from app.models.license import (
    License,
    LicenseGenerate,
    LicensePage,
    LicenseRead,
    LicenseRedeem,
    LicenseVerify,
)

__all__ = [
    "AdminUser",
    "AdminUserRead",
    "AppUser",
    "AppUserPage",
    "AppUserRead",
    "Application",
    "ApplicationRead",
    "License",
    "LicenseGenerate",
    "LicensePage",
    "LicenseRead",
    "LicenseRedeem",
    "LicenseVerify",
    "UserStatus",
    "UserStatusUpdate",
]
