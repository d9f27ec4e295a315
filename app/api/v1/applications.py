"""Downstream application catalog."""

from fastapi import APIRouter

from app.api.deps import Admin, Auth
from app.models.application import ApplicationRead

router = APIRouter(prefix="/applications", tags=["applications"])


@router.get("", response_model=list[ApplicationRead])
async def list_applications(auth: Auth, admin: Admin) -> list[ApplicationRead]:
    """Active applications, ordered by display name."""
    return await admin.list_applications()
