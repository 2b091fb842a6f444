"""Ledger Service schemas package.

Re-exports all schemas so that:
  - ``from services.ledger_service.schemas import UserProfile`` works
  - Router files import from a single place

When adding a new schema, add its import and __all__ entry.
"""

from services.ledger_service.schemas.auth import (  # noqa: F401
    MeResponse,
    RegisterRequest,
    RegisterResponse,
    SigninRequest,
    SigninResponse,
    UserProfile,
)
from services.ledger_service.schemas.challenge import (  # noqa: F401
    ActivateChallengeRequest,
    ActivateChallengeResponse,
    ReferralRewardSummary,
)
from services.ledger_service.schemas.common import (  # noqa: F401
    CamelModel,
    Pagination,
)
from services.ledger_service.schemas.referral import (  # noqa: F401
    LeaderboardEntry,
    LeaderboardResponse,
    ReferralCodeResponse,
    ReferralListResponse,
    ReferralResponse,
    ReferralStats,
    ReferralStatsResponse,
    ReferredUserSummary,
    UseReferralRequest,
    UseReferralResponse,
)
from services.ledger_service.schemas.wallet import (  # noqa: F401
    BalanceResponse,
    ProcessWithdrawalRequest,
    ProcessWithdrawalResponse,
    TransactionListResponse,
    TransactionResponse,
    WithdrawRequest,
    WithdrawResponse,
)

__all__ = [
    # Common
    "CamelModel",
    "Pagination",
    # Auth
    "MeResponse",
    "RegisterRequest",
    "RegisterResponse",
    "SigninRequest",
    "SigninResponse",
    "UserProfile",
    # Referral
    "LeaderboardEntry",
    "LeaderboardResponse",
    "ReferralCodeResponse",
    "ReferralListResponse",
    "ReferralResponse",
    "ReferralStats",
    "ReferralStatsResponse",
    "ReferredUserSummary",
    "UseReferralRequest",
    "UseReferralResponse",
    # Wallet
    "BalanceResponse",
    "ProcessWithdrawalRequest",
    "ProcessWithdrawalResponse",
    "TransactionListResponse",
    "TransactionResponse",
    "WithdrawRequest",
    "WithdrawResponse",
    # Challenge
    "ActivateChallengeRequest",
    "ActivateChallengeResponse",
    "ReferralRewardSummary",
]
