"""Referral bookkeeping: code validation, signup linking, reward payout, stats.

Reward flow (``process_referral_reward``):

1. Lock the buyer's *pending* referral (the status filter is what makes a
   second call a no-op once the referral turned active)
2. Lock the referrer row
3. Mark the referral active and cache price + reward on it
4. Credit the referrer with an atomic ``balance = balance + reward`` update
5. Append a completed ``referral_reward`` transaction
6. Commit once; any failure rolls every step back
"""

import uuid
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from fastapi import HTTPException, status
from libs.common.config import get_settings
from libs.common.currency import ZERO, parse_exact_money, percent_of, to_money
from libs.common.logging import get_logger
from services.ledger_service.models import (
    Referral,
    ReferralStatus,
    Transaction,
    TransactionStatus,
    TransactionType,
    User,
)
from sqlalchemy import desc, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

logger = get_logger(__name__)


@dataclass
class ReferralValidation:
    valid: bool
    message: str
    referrer_id: Optional[uuid.UUID] = None
    referrer_username: Optional[str] = None


@dataclass
class ReferralRewardResult:
    success: bool
    message: str
    referrer_id: Optional[uuid.UUID] = None
    referrer_username: Optional[str] = None
    reward_amount: Decimal = ZERO
    new_balance: Optional[Decimal] = None


@dataclass
class ReferralStatsResult:
    total_referrals: int
    pending_referrals: int
    active_referrals: int
    rewarded_referrals: int
    total_earned: Decimal
    pending_earnings: Decimal


# ---------------------------------------------------------------------------
# Validation + signup
# ---------------------------------------------------------------------------


async def validate_referral_code(
    db: AsyncSession,
    *,
    referral_code: Optional[str],
    new_user_id: uuid.UUID,
) -> ReferralValidation:
    """Check whether ``new_user_id`` may be referred with ``referral_code``.

    Read-only. A missing code is valid (referrals are optional).
    """
    if not referral_code:
        return ReferralValidation(valid=True, message="No referral code provided")

    result = await db.execute(select(User).where(User.referral_code == referral_code))
    referrer = result.scalar_one_or_none()
    if not referrer:
        return ReferralValidation(valid=False, message="Invalid referral code")

    if referrer.id == new_user_id:
        return ReferralValidation(valid=False, message="Cannot refer yourself")

    existing = await db.execute(
        select(Referral.id).where(Referral.referred_user_id == new_user_id).limit(1)
    )
    if existing.scalar_one_or_none() is not None:
        return ReferralValidation(valid=False, message="User already has a referral")

    return ReferralValidation(
        valid=True,
        message="Valid referral code",
        referrer_id=referrer.id,
        referrer_username=referrer.username,
    )


async def create_referral(
    db: AsyncSession,
    *,
    referral_code: str,
    new_user_id: uuid.UUID,
) -> tuple[Referral, ReferralValidation]:
    """Record a pending referral for a freshly registered user.

    Raises 404 for an unknown code or user, 400 for self/duplicate referral.
    """
    validation = await validate_referral_code(
        db, referral_code=referral_code, new_user_id=new_user_id
    )
    if not validation.valid:
        code = (
            status.HTTP_404_NOT_FOUND
            if validation.message == "Invalid referral code"
            else status.HTTP_400_BAD_REQUEST
        )
        raise HTTPException(status_code=code, detail=validation.message)

    if await db.get(User, new_user_id) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="User not found"
        )

    referral = Referral(
        referrer_user_id=validation.referrer_id,
        referred_user_id=new_user_id,
        referral_code=referral_code,
        status=ReferralStatus.PENDING,
    )
    db.add(referral)
    try:
        await db.commit()
    except IntegrityError:
        # Lost a race against a concurrent signup for the same user
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="User already has a referral",
        )
    await db.refresh(referral)

    logger.info(
        "Referral %s recorded: referrer=%s referred=%s code=%s",
        referral.id,
        validation.referrer_id,
        new_user_id,
        referral_code,
    )
    return referral, validation


# ---------------------------------------------------------------------------
# Reward payout
# ---------------------------------------------------------------------------


async def process_referral_reward(
    db: AsyncSession,
    *,
    user_id: uuid.UUID,
    challenge_price,
) -> ReferralRewardResult:
    """Pay the referrer of ``user_id`` their share of a challenge purchase."""
    price = parse_exact_money(challenge_price)
    if price is None or price <= ZERO:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid challenge price"
        )

    result = await db.execute(
        select(Referral)
        .where(
            Referral.referred_user_id == user_id,
            Referral.status == ReferralStatus.PENDING,
        )
        .with_for_update()
    )
    referral = result.scalar_one_or_none()
    if not referral:
        return ReferralRewardResult(success=False, message="No pending referral found")

    result = await db.execute(
        select(User).where(User.id == referral.referrer_user_id).with_for_update()
    )
    referrer = result.scalar_one_or_none()
    if not referrer:
        logger.error(
            "Referral %s points at missing referrer %s",
            referral.id,
            referral.referrer_user_id,
        )
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Referrer not found"
        )

    reward_percent = get_settings().REFERRAL_REWARD_PERCENT
    reward_amount = percent_of(price, reward_percent)

    referral.status = ReferralStatus.ACTIVE
    referral.challenge_purchased = True
    referral.challenge_price = price
    referral.reward_amount = reward_amount

    await db.execute(
        update(User)
        .where(User.id == referrer.id)
        .values(wallet_balance=User.wallet_balance + reward_amount)
    )

    db.add(
        Transaction(
            user_id=referrer.id,
            amount=reward_amount,
            transaction_type=TransactionType.REFERRAL_REWARD,
            status=TransactionStatus.COMPLETED,
            description=f"Referral reward for {referral.referred_user_id}",
            reference_id=referral.id,
            reference_type="referral",
            txn_metadata={
                "referredUserId": str(referral.referred_user_id),
                "challengePrice": float(price),
                "rewardPercentage": reward_percent,
                "referralCode": referral.referral_code,
            },
        )
    )

    try:
        await db.commit()
    except Exception:
        await db.rollback()
        logger.exception(
            "Referral reward rolled back: referral=%s referrer=%s amount=%s",
            referral.id,
            referrer.id,
            reward_amount,
        )
        raise

    await db.refresh(referrer)
    logger.info(
        "Referral reward %s credited to %s for referral %s, new balance %s",
        reward_amount,
        referrer.id,
        referral.id,
        referrer.wallet_balance,
    )
    return ReferralRewardResult(
        success=True,
        message="Referral reward processed",
        referrer_id=referrer.id,
        referrer_username=referrer.username,
        reward_amount=reward_amount,
        new_balance=to_money(referrer.wallet_balance),
    )


# ---------------------------------------------------------------------------
# Reporting (read-only)
# ---------------------------------------------------------------------------


async def get_referral_stats(db: AsyncSession, *, user_id: uuid.UUID) -> ReferralStatsResult:
    """Referral counts by status plus earned and estimated pending earnings."""
    settings = get_settings()

    rows = await db.execute(
        select(Referral.status, func.count(Referral.id))
        .where(Referral.referrer_user_id == user_id)
        .group_by(Referral.status)
    )
    counts = {ref_status: count for ref_status, count in rows.all()}
    pending = counts.get(ReferralStatus.PENDING, 0)
    active = counts.get(ReferralStatus.ACTIVE, 0)
    rewarded = counts.get(ReferralStatus.REWARDED, 0)

    total_earned = (
        await db.execute(
            select(func.coalesce(func.sum(Transaction.amount), 0)).where(
                Transaction.user_id == user_id,
                Transaction.transaction_type == TransactionType.REFERRAL_REWARD,
                Transaction.status == TransactionStatus.COMPLETED,
            )
        )
    ).scalar()

    # Estimate only: the real reward depends on the challenge the user picks
    per_referral = percent_of(
        settings.ESTIMATED_CHALLENGE_PRICE, settings.REFERRAL_REWARD_PERCENT
    )
    pending_earnings = to_money(per_referral * pending)

    return ReferralStatsResult(
        total_referrals=pending + active + rewarded,
        pending_referrals=pending,
        active_referrals=active,
        rewarded_referrals=rewarded,
        total_earned=to_money(total_earned),
        pending_earnings=pending_earnings,
    )


async def get_referral_leaderboard(db: AsyncSession, *, limit: int = 10) -> list[dict]:
    """Top referrers by earnings over active referrals."""
    total_referrals = func.count(Referral.id).label("total_referrals")
    total_earnings = func.coalesce(func.sum(Referral.reward_amount), 0).label(
        "total_earnings"
    )
    result = await db.execute(
        select(
            Referral.referrer_user_id,
            User.username,
            total_referrals,
            total_earnings,
        )
        .join(User, User.id == Referral.referrer_user_id)
        .where(Referral.status == ReferralStatus.ACTIVE)
        .group_by(Referral.referrer_user_id, User.username)
        .order_by(desc(total_earnings), desc(total_referrals), User.username)
        .limit(limit)
    )
    return [
        {
            "user_id": row.referrer_user_id,
            "username": row.username,
            "total_referrals": row.total_referrals,
            "total_earnings": to_money(row.total_earnings),
        }
        for row in result.all()
    ]


async def list_referrals(
    db: AsyncSession,
    *,
    user_id: uuid.UUID,
    page: int = 1,
    limit: int = 10,
) -> tuple[list[Referral], int]:
    """Newest-first page of the users that ``user_id`` referred, with their profiles."""
    total = (
        await db.execute(
            select(func.count(Referral.id)).where(Referral.referrer_user_id == user_id)
        )
    ).scalar_one()

    result = await db.execute(
        select(Referral)
        .options(selectinload(Referral.referred_user))
        .where(Referral.referrer_user_id == user_id)
        .order_by(Referral.created_at.desc(), Referral.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    return list(result.scalars().all()), total
