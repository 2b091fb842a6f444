"""Account operations: signup, signin, referral code assignment."""

import secrets
import uuid
from typing import Callable, Optional

from fastapi import HTTPException, status
from libs.auth.security import hash_password, verify_password
from libs.common.datetime_utils import utc_now
from libs.common.logging import get_logger
from services.ledger_service.models import User
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

REFERRAL_CODE_MAX_ATTEMPTS = 10


class ReferralCodeExhaustedError(RuntimeError):
    """No unique referral code could be generated within the attempt limit."""


def generate_referral_code() -> str:
    """Return 8 uppercase hex characters (4 random bytes)."""
    return secrets.token_hex(4).upper()


async def referral_code_taken(
    db: AsyncSession, code: str, *, exclude_user_id: Optional[uuid.UUID] = None
) -> bool:
    query = select(User.id).where(User.referral_code == code)
    if exclude_user_id is not None:
        query = query.where(User.id != exclude_user_id)
    result = await db.execute(query.limit(1))
    return result.scalar_one_or_none() is not None


async def assign_unique_referral_code(
    db: AsyncSession,
    user: User,
    *,
    max_attempts: int = REFERRAL_CODE_MAX_ATTEMPTS,
    generator: Callable[[], str] = generate_referral_code,
) -> str:
    """Give ``user`` a referral code no other user holds.

    The user's current code (if any) is tried first; each collision draws a
    fresh code, up to ``max_attempts`` regenerations. Raises
    ``ReferralCodeExhaustedError`` when every attempt collided. Does not commit.
    """
    code = user.referral_code or generator()
    attempts = 0
    while await referral_code_taken(db, code, exclude_user_id=user.id):
        if attempts >= max_attempts:
            logger.error(
                "Could not generate unique referral code for user %s after %d attempts",
                user.id,
                attempts,
            )
            raise ReferralCodeExhaustedError("Could not generate unique referral code")
        code = generator()
        attempts += 1

    user.referral_code = code
    return code


async def get_user_by_id(db: AsyncSession, user_id) -> User:
    """Get user by ID. Raises 404 if not found."""
    try:
        user_uuid = user_id if isinstance(user_id, uuid.UUID) else uuid.UUID(str(user_id))
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="User not found"
        )

    user = await db.get(User, user_uuid)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="User not found"
        )
    return user


async def create_user(
    db: AsyncSession,
    *,
    username: str,
    wallet_address: str,
    password: Optional[str] = None,
    email: Optional[str] = None,
) -> User:
    """Create an account with a fresh referral code and a zero balance."""
    email = email.strip().lower() if email else None

    conditions = [User.username == username, User.wallet_address == wallet_address]
    if email:
        conditions.append(User.email == email)
    result = await db.execute(select(User).where(or_(*conditions)))
    for existing in result.scalars().all():
        if existing.username == username:
            detail = "Username already exists"
        elif existing.wallet_address == wallet_address:
            detail = "Wallet address already registered"
        else:
            detail = "Email already registered"
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)

    user = User(
        id=uuid.uuid4(),
        username=username,
        wallet_address=wallet_address,
        email=email,
        password_hash=hash_password(password) if password else None,
    )
    await assign_unique_referral_code(db, user)
    db.add(user)
    await db.commit()
    await db.refresh(user)

    logger.info(
        "Registered user %s (%s) referral_code=%s", user.id, username, user.referral_code
    )
    return user


async def authenticate(db: AsyncSession, *, wallet_address: str, password: str) -> User:
    """Check wallet address + password and stamp last_login."""
    result = await db.execute(select(User).where(User.wallet_address == wallet_address))
    user = result.scalar_one_or_none()
    if not user or not verify_password(password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid credentials"
        )
    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Account is disabled"
        )

    user.last_login = utc_now()
    await db.commit()
    await db.refresh(user)
    return user


async def users_missing_referral_code(
    db: AsyncSession, *, limit: Optional[int] = None
) -> list[User]:
    query = select(User).where(User.referral_code.is_(None)).order_by(User.created_at)
    if limit is not None:
        query = query.limit(limit)
    result = await db.execute(query)
    return list(result.scalars().all())


async def backfill_referral_codes(
    db: AsyncSession, *, limit: Optional[int] = None
) -> tuple[list[User], list[User]]:
    """Assign codes to users created before referral codes existed.

    Each user is committed on its own so one failure does not undo the rest.
    Returns ``(updated, failed)``.
    """
    updated: list[User] = []
    failed: list[User] = []
    for user in await users_missing_referral_code(db, limit=limit):
        try:
            await assign_unique_referral_code(db, user)
            await db.commit()
        except ReferralCodeExhaustedError:
            failed.append(user)
            continue
        logger.info("Backfilled referral code %s for user %s", user.referral_code, user.id)
        updated.append(user)
    return updated, failed
