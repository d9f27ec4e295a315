"""Licenses — list, generate, delete, verify and redeem."""

import uuid
from typing import Annotated

from fastapi import APIRouter, HTTPException, Query, status
from pydantic import BaseModel

from app.api.deps import Admin, Auth
from app.core.config import get_settings
from app.models.app_user import AppUserRead
from app.models.license import LicenseGenerate, LicensePage, LicenseRead, LicenseRedeem, LicenseVerify
from app.services.datastore import NotFoundError, RpcError

router = APIRouter(prefix="/licenses", tags=["licenses"])

settings = get_settings()

# RPC error code → HTTP status
_RPC_STATUS = {
    "LICENSE_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "LICENSE_ALREADY_USED": status.HTTP_409_CONFLICT,
    "LICENSE_EXPIRED": status.HTTP_410_GONE,
}


class VerifyResponse(BaseModel):
    valid: bool


@router.get("", response_model=LicensePage)
async def list_licenses(
    auth: Auth,
    admin: Admin,
    app_name: str | None = None,
    limit: Annotated[int, Query(ge=1, le=settings.max_page_size)] = settings.default_page_size,
    offset: Annotated[int, Query(ge=0)] = 0,
    is_used: bool | None = None,
) -> LicensePage:
    return await admin.list_licenses(app_name, limit, offset, is_used)


@router.post(
    "/generate",
    response_model=list[LicenseRead],
    status_code=status.HTTP_201_CREATED,
)
async def generate_licenses(
    body: LicenseGenerate,
    auth: Auth,
    admin: Admin,
) -> list[LicenseRead]:
    try:
        return await admin.generate_licenses(body.app_name, body.count, body.expires_in_days)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc


@router.delete("/{license_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_license(
    license_id: uuid.UUID,
    auth: Auth,
    admin: Admin,
) -> None:
    try:
        await admin.delete_license(license_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="License not found") from exc


@router.post("/verify", response_model=VerifyResponse)
async def verify_license(body: LicenseVerify, auth: Auth, admin: Admin) -> VerifyResponse:
    """Whether a code exists, is unused and has not expired."""
    try:
        valid = await admin.verify_license(body.app_name, body.license_code)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc
    return VerifyResponse(valid=valid)


@router.post("/redeem", response_model=AppUserRead)
async def redeem_license(body: LicenseRedeem, auth: Auth, admin: Admin) -> AppUserRead:
    """Mark a code used and activate (or create) the user it was redeemed for."""
    try:
        return await admin.redeem_license(
            body.app_name, body.license_code, body.email, body.name
        )
    except RpcError as exc:
        raise HTTPException(
            status_code=_RPC_STATUS.get(exc.code, status.HTTP_400_BAD_REQUEST),
            detail=exc.code,
        ) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc
