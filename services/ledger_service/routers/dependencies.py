"""Shared router dependencies."""

from fastapi import Depends, HTTPException, status
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.db.session import get_async_db
from services.ledger_service.models import User
from services.ledger_service.services.user_service import get_user_by_id
from sqlalchemy.ext.asyncio import AsyncSession


async def get_current_account(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
) -> User:
    """Load the caller's User row.

    404 if the token outlived the account, 403 once the account is disabled.
    """
    user = await get_user_by_id(db, current_user.user_id)
    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Account is disabled"
        )
    return user
