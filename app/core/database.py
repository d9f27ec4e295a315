"""Async database engine and session factory."""

import logging
from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel, select

from app.core.config import get_settings
from app.core.security import hash_password
from app.models.admin_user import AdminUser

logger = logging.getLogger(__name__)

settings = get_settings()

engine = create_async_engine(
    settings.database_url,
    echo=False,
    pool_size=20,
    max_overflow=10,
)

async_session_factory = sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency that yields an async DB session."""
    async with async_session_factory() as session:
        yield session


async def init_db() -> None:
    """Create all tables. Use Alembic migrations in production."""
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


async def ensure_bootstrap_admin(session: AsyncSession) -> AdminUser | None:
    """Create the configured first admin if it does not exist yet."""
    email = settings.bootstrap_admin_email
    if not email or not settings.bootstrap_admin_password:
        return None

    result = await session.execute(select(AdminUser).where(AdminUser.email == email))
    admin = result.scalar_one_or_none()
    if admin is not None:
        return admin

    admin = AdminUser(
        email=email,
        password_hash=hash_password(settings.bootstrap_admin_password),
        display_name="Administrator",
    )
    session.add(admin)
    await session.commit()
    await session.refresh(admin)
    logger.info("Created bootstrap admin %s", email)
    return admin
