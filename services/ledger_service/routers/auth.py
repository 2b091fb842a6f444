"""Account endpoints: register, signin, current profile."""

from fastapi import APIRouter, Depends, HTTPException, Request, status
from libs.auth.security import create_access_token
from libs.common.logging import get_logger
from libs.common.rate_limit import auth_limit
from libs.db.session import get_async_db
from services.ledger_service.models import User
from services.ledger_service.routers.dependencies import get_current_account
from services.ledger_service.schemas import (
    MeResponse,
    RegisterRequest,
    RegisterResponse,
    SigninRequest,
    SigninResponse,
    UserProfile,
)
from services.ledger_service.services import referral_service, user_service
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)
router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
)
@auth_limit
async def register(
    request: Request,
    payload: RegisterRequest,
    db: AsyncSession = Depends(get_async_db),
):
    """Create an account. An optional referral code is recorded as a pending referral."""
    user = await user_service.create_user(
        db,
        username=payload.username,
        wallet_address=payload.wallet_address,
        password=payload.password,
        email=payload.email,
    )

    referral_message = None
    if payload.referral_code:
        # The account exists either way; a bad code only loses the referral
        try:
            _, validation = await referral_service.create_referral(
                db, referral_code=payload.referral_code, new_user_id=user.id
            )
            referral_message = f"Referred by {validation.referrer_username}"
        except HTTPException as exc:
            logger.info(
                "Referral code %s rejected for new user %s: %s",
                payload.referral_code,
                user.id,
                exc.detail,
            )
            referral_message = exc.detail

    return RegisterResponse(
        message="User registered successfully",
        user=UserProfile.model_validate(user),
        referral_message=referral_message,
    )


@router.post("/signin", response_model=SigninResponse)
@auth_limit
async def signin(
    request: Request,
    payload: SigninRequest,
    db: AsyncSession = Depends(get_async_db),
):
    """Exchange wallet address + password for a bearer token."""
    user = await user_service.authenticate(
        db, wallet_address=payload.wallet_address, password=payload.password
    )
    token = create_access_token(
        user_id=str(user.id),
        wallet_address=user.wallet_address,
        is_admin=user.is_admin,
    )
    return SigninResponse(token=token, user=UserProfile.model_validate(user))


@router.get("/me", response_model=MeResponse)
async def get_me(user: User = Depends(get_current_account)):
    return MeResponse(user=UserProfile.model_validate(user))
