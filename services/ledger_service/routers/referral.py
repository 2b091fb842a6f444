"""Referral endpoints: code lookup, signup linking, stats, history."""

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from libs.common.config import get_settings
from libs.common.rate_limit import auth_limit
from libs.db.session import get_async_db
from services.ledger_service.models import TransactionType, User
from services.ledger_service.routers.dependencies import get_current_account
from services.ledger_service.schemas import (
    LeaderboardEntry,
    LeaderboardResponse,
    Pagination,
    ReferralCodeResponse,
    ReferralListResponse,
    ReferralResponse,
    ReferralStats,
    ReferralStatsResponse,
    TransactionListResponse,
    TransactionResponse,
    UseReferralRequest,
    UseReferralResponse,
)
from services.ledger_service.services import referral_service, wallet_ops
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/referral", tags=["referral"])

REFERRAL_HISTORY_TYPES = (TransactionType.REFERRAL_REWARD, TransactionType.WITHDRAWAL)


@router.get("/code", response_model=ReferralCodeResponse)
async def get_referral_code(user: User = Depends(get_current_account)):
    """Return the caller's referral code, shareable link and balance."""
    frontend_url = get_settings().FRONTEND_URL.rstrip("/")
    return ReferralCodeResponse(
        referral_code=user.referral_code,
        referral_link=f"{frontend_url}?ref={user.referral_code}",
        wallet_balance=user.wallet_balance,
    )


@router.post("/use", response_model=UseReferralResponse)
@auth_limit
async def use_referral_code(
    request: Request,
    payload: UseReferralRequest,
    db: AsyncSession = Depends(get_async_db),
):
    """Record that ``newUserId`` signed up with ``referralCode``."""
    if not payload.referral_code or not payload.new_user_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing referralCode or newUserId",
        )

    _, validation = await referral_service.create_referral(
        db, referral_code=payload.referral_code, new_user_id=payload.new_user_id
    )
    return UseReferralResponse(
        message="Referral recorded successfully",
        referrer_username=validation.referrer_username,
    )


@router.get("/stats", response_model=ReferralStatsResponse)
async def get_referral_stats(
    user: User = Depends(get_current_account),
    db: AsyncSession = Depends(get_async_db),
):
    stats = await referral_service.get_referral_stats(db, user_id=user.id)
    return ReferralStatsResponse(stats=ReferralStats.model_validate(stats))


@router.get("/transactions", response_model=TransactionListResponse)
async def get_referral_transactions(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    user: User = Depends(get_current_account),
    db: AsyncSession = Depends(get_async_db),
):
    """Referral rewards and withdrawals, newest first."""
    transactions, total = await wallet_ops.list_transactions(
        db, user_id=user.id, page=page, limit=limit, types=REFERRAL_HISTORY_TYPES
    )
    return TransactionListResponse(
        transactions=[TransactionResponse.model_validate(t) for t in transactions],
        pagination=Pagination.build(page=page, limit=limit, total=total),
    )


@router.get("/list", response_model=ReferralListResponse)
async def list_referrals(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    user: User = Depends(get_current_account),
    db: AsyncSession = Depends(get_async_db),
):
    """Users the caller referred, with their public profile."""
    referrals, total = await referral_service.list_referrals(
        db, user_id=user.id, page=page, limit=limit
    )
    return ReferralListResponse(
        referrals=[ReferralResponse.model_validate(r) for r in referrals],
        pagination=Pagination.build(page=page, limit=limit, total=total),
    )


@router.get("/leaderboard", response_model=LeaderboardResponse)
async def get_leaderboard(
    limit: int = Query(10, ge=1, le=100),
    db: AsyncSession = Depends(get_async_db),
):
    """Top referrers by earnings."""
    rows = await referral_service.get_referral_leaderboard(db, limit=limit)
    return LeaderboardResponse(
        leaderboard=[LeaderboardEntry.model_validate(row) for row in rows]
    )
