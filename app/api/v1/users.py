"""App users — list, change status, delete. Scoped by application."""

import uuid
from typing import Annotated

from fastapi import APIRouter, HTTPException, Query, status

from app.api.deps import Admin, Auth
from app.core.config import get_settings
from app.models.app_user import AppUserPage, AppUserRead, UserStatus, UserStatusUpdate
from app.services.datastore import NotFoundError

router = APIRouter(prefix="/users", tags=["users"])

settings = get_settings()


@router.get("", response_model=AppUserPage)
async def list_users(
    auth: Auth,
    admin: Admin,
    app_name: str | None = None,
    limit: Annotated[int, Query(ge=1, le=settings.max_page_size)] = settings.default_page_size,
    offset: Annotated[int, Query(ge=0)] = 0,
    status_filter: Annotated[UserStatus | None, Query(alias="status")] = None,
    search: str | None = None,
) -> AppUserPage:
    """Newest first. Omit ``app_name`` to list users of every application."""
    return await admin.list_users(app_name, limit, offset, status_filter, search)


@router.get("/{user_id}", response_model=AppUserRead)
async def get_user(
    user_id: uuid.UUID,
    auth: Auth,
    admin: Admin,
    app_name: str | None = None,
) -> AppUserRead:
    """One user. With ``app_name``, a user of another application is a 404."""
    try:
        return await admin.get_user(user_id, app_name)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found") from exc


@router.patch("/{user_id}/status", response_model=AppUserRead)
async def update_user_status(
    user_id: uuid.UUID,
    body: UserStatusUpdate,
    auth: Auth,
    admin: Admin,
) -> AppUserRead:
    try:
        return await admin.update_user_status(user_id, body.status)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found") from exc


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: uuid.UUID,
    auth: Auth,
    admin: Admin,
) -> None:
    try:
        await admin.delete_user(user_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found") from exc
