"""Authentication endpoints — admin login + current admin."""

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel, EmailStr
from sqlmodel import select

from app.api.deps import Auth, Session
from app.core.security import check_password, create_access_token
from app.models.admin_user import AdminUser, AdminUserRead

router = APIRouter(prefix="/auth", tags=["auth"])


# ── Schemas ──────────────────────────────────────────────────

class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    admin: AdminUserRead


# ── Routes ───────────────────────────────────────────────────

@router.post("/login", response_model=LoginResponse)
async def login(body: LoginRequest, session: Session) -> LoginResponse:
    """Authenticate with email + password, receive a JWT."""
    stmt = select(AdminUser).where(AdminUser.email == body.email)
    result = await session.execute(stmt)
    admin = result.scalar_one_or_none()

    valid, new_hash = (False, None)
    if admin is not None:
        valid, new_hash = check_password(body.password, admin.password_hash)
    if not valid:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )

    if not admin.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is disabled",
        )

    if new_hash:
        admin.password_hash = new_hash
        admin.touch()
        session.add(admin)
        await session.commit()
        await session.refresh(admin)

    return LoginResponse(
        access_token=create_access_token(str(admin.id), admin.email),
        admin=AdminUserRead.model_validate(admin),
    )


@router.get("/me", response_model=AdminUserRead)
async def get_me(auth: Auth, session: Session) -> AdminUserRead:
    """Return the current authenticated admin."""
    admin = await session.get(AdminUser, auth.admin_id)
    if admin is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Admin not found")
    return AdminUserRead.model_validate(admin)
