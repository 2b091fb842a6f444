"""Challenge activation schemas."""

import uuid
from typing import Optional

from pydantic import Field
from services.ledger_service.schemas.common import CamelModel


class ActivateChallengeRequest(CamelModel):
    wallet_address: str
    selected_account_size: str
    usd_price: float = Field(..., gt=0)
    sol_amount: Optional[float] = None
    transaction_signature: Optional[str] = None


class ReferralRewardSummary(CamelModel):
    referrer_id: uuid.UUID
    referrer_username: str
    reward_amount: float


class ActivateChallengeResponse(CamelModel):
    success: bool = True
    message: str
    referral_reward: Optional[ReferralRewardSummary] = None
