"""Referral request/response schemas."""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import Field
from services.ledger_service.models.enums import ReferralStatus
from services.ledger_service.schemas.common import CamelModel, Pagination


class ReferralCodeResponse(CamelModel):
    success: bool = True
    referral_code: Optional[str]
    referral_link: str
    wallet_balance: float


class UseReferralRequest(CamelModel):
    referral_code: Optional[str] = None
    new_user_id: Optional[uuid.UUID] = None


class UseReferralResponse(CamelModel):
    success: bool = True
    message: str
    referrer_username: str


class ReferralStats(CamelModel):
    total_referrals: int
    pending_referrals: int
    active_referrals: int
    rewarded_referrals: int
    total_earned: float
    pending_earnings: float


class ReferralStatsResponse(CamelModel):
    success: bool = True
    stats: ReferralStats


class ReferredUserSummary(CamelModel):
    id: uuid.UUID
    username: str
    email: Optional[str] = None
    wallet_address: str
    created_at: datetime


class ReferralResponse(CamelModel):
    id: uuid.UUID
    referrer_user_id: uuid.UUID
    referred_user: Optional[ReferredUserSummary] = None
    status: ReferralStatus
    referral_code: str
    reward_amount: float
    challenge_purchased: bool
    challenge_price: float
    created_at: datetime


class ReferralListResponse(CamelModel):
    success: bool = True
    referrals: list[ReferralResponse]
    pagination: Pagination


class LeaderboardEntry(CamelModel):
    user_id: uuid.UUID
    username: str
    total_referrals: int
    total_earnings: float


class LeaderboardResponse(CamelModel):
    success: bool = True
    leaderboard: list[LeaderboardEntry] = Field(default_factory=list)
