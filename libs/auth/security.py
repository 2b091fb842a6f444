"""Token issuing and password hashing."""

from datetime import timedelta
from typing import Optional

from jose import jwt
from passlib.context import CryptContext

from libs.common.config import get_settings
from libs.common.datetime_utils import utc_now

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def _truncate_password(password: str) -> str:
    # bcrypt only looks at the first 72 bytes
    return password.encode("utf-8")[:72].decode("utf-8", errors="ignore")


def hash_password(password: str) -> str:
    return pwd_context.hash(_truncate_password(password))


def verify_password(password: str, hashed: Optional[str]) -> bool:
    if not hashed:
        return False
    return pwd_context.verify(_truncate_password(password), hashed)


def create_access_token(
    *,
    user_id: str,
    wallet_address: str,
    is_admin: bool = False,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Sign an HS256 JWT for the given user."""
    settings = get_settings()
    expires_at = utc_now() + (
        expires_delta or timedelta(minutes=settings.JWT_EXPIRE_MINUTES)
    )
    claims = {
        "sub": user_id,
        "walletAddress": wallet_address,
        "role": "admin" if is_admin else "authenticated",
        "exp": expires_at,
    }
    return jwt.encode(claims, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
