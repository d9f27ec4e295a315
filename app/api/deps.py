"""FastAPI dependencies for authentication, cache and service wiring."""

import uuid
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.cache import MemoryCache
from app.core.database import get_session
from app.core.security import decode_access_token
from app.models.admin_user import AdminUser
from app.services.admin import AdminService
from app.services.datastore import DataStore

bearer_scheme = HTTPBearer()


class AuthContext:
    """Resolved admin identity carried through a request."""

    __slots__ = ("admin_id", "email")

    def __init__(self, admin_id: uuid.UUID, email: str) -> None:
        self.admin_id = admin_id
        self.email = email


async def get_auth_context(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(bearer_scheme)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> AuthContext:
    """Resolve a bearer JWT to an active admin."""
    try:
        payload = decode_access_token(credentials.credentials)
        admin_id = uuid.UUID(payload["sub"])
    except JWTError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired JWT",
        ) from exc
    except (KeyError, ValueError) as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Malformed JWT payload",
        ) from exc

    admin = await session.get(AdminUser, admin_id)
    if admin is None or not admin.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Admin account is disabled",
        )
    return AuthContext(admin_id=admin.id, email=admin.email)


def get_cache(request: Request) -> MemoryCache:
    """The process-wide cache created in the app lifespan."""
    return request.app.state.cache


def get_admin_service(
    session: Annotated[AsyncSession, Depends(get_session)],
    cache: Annotated[MemoryCache, Depends(get_cache)],
) -> AdminService:
    return AdminService(DataStore(session), cache)


# Typed shorthand for use in route signatures
Auth = Annotated[AuthContext, Depends(get_auth_context)]
Session = Annotated[AsyncSession, Depends(get_session)]
Cache = Annotated[MemoryCache, Depends(get_cache)]
Admin = Annotated[AdminService, Depends(get_admin_service)]
