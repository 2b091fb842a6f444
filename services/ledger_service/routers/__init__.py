"""Ledger service routers."""

from services.ledger_service.routers.auth import router as auth_router
from services.ledger_service.routers.challenges import router as challenges_router
from services.ledger_service.routers.referral import router as referral_router
from services.ledger_service.routers.wallet import router as wallet_router

__all__ = [
    "auth_router",
    "challenges_router",
    "referral_router",
    "wallet_router",
]
