"""Console admin credentials: Argon2 password hashes and access tokens.

Access tokens are HS256 JWTs carrying the admin id (``sub``), the email the
token was issued to and a ``typ`` claim. Tokens of any other type signed
with the same key are rejected.
"""

from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt
from passlib.context import CryptContext

from app.core.config import get_settings

settings = get_settings()

ACCESS_TOKEN_TYPE = "admin-access"

# ── Password hashing (Argon2) ────────────────────────────────

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def check_password(plain: str, hashed: str) -> tuple[bool, str | None]:
    """Verify a password; also return a fresh hash if the stored one is outdated.

    The second element is ``None`` unless the hash was made with parameters
    the context now considers deprecated.
    """
    return pwd_context.verify_and_update(plain, hashed)


# ── Access tokens ─────────────────────────────────────────────

def create_access_token(
    admin_id: str,
    email: str,
    expires_delta: timedelta | None = None,
) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": admin_id,
        "email": email,
        "typ": ACCESS_TOKEN_TYPE,
        "iat": now,
        "exp": now + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes)),
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict:
    """Decode and verify an admin access token. Raises jose.JWTError on failure."""
    payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    if payload.get("typ") != ACCESS_TOKEN_TYPE:
        raise JWTError("Not an admin access token")
    return payload
