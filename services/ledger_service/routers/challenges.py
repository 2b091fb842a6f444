"""Challenge activation: the purchase hook that pays out referral rewards."""

from fastapi import APIRouter, Depends, HTTPException, status
from libs.common.logging import get_logger
from libs.db.session import get_async_db
from services.ledger_service.models import User
from services.ledger_service.routers.dependencies import get_current_account
from services.ledger_service.schemas import (
    ActivateChallengeRequest,
    ActivateChallengeResponse,
    ReferralRewardSummary,
)
from services.ledger_service.services import referral_service
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)
router = APIRouter(tags=["challenges"])


@router.post("/activate-challenge", response_model=ActivateChallengeResponse)
async def activate_challenge(
    payload: ActivateChallengeRequest,
    user: User = Depends(get_current_account),
    db: AsyncSession = Depends(get_async_db),
):
    """Activate a purchased challenge and reward the buyer's referrer, if any."""
    if payload.wallet_address != user.wallet_address:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Wallet address does not match the signed-in user",
        )

    logger.info(
        "Challenge activation: user=%s size=%s price=%s signature=%s",
        user.id,
        payload.selected_account_size,
        payload.usd_price,
        payload.transaction_signature,
    )

    reward = await referral_service.process_referral_reward(
        db, user_id=user.id, challenge_price=payload.usd_price
    )
    summary = None
    if reward.success:
        summary = ReferralRewardSummary(
            referrer_id=reward.referrer_id,
            referrer_username=reward.referrer_username,
            reward_amount=reward.reward_amount,
        )

    return ActivateChallengeResponse(
        message="Challenge activated successfully",
        referral_reward=summary,
    )
