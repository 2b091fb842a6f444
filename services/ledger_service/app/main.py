"""FastAPI application for the GainVault ledger service."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from libs.common.config import get_settings
from libs.common.datetime_utils import isoformat_utc, utc_now
from libs.common.error_handler import add_exception_handlers
from libs.common.middleware import add_observability_middleware
from libs.common.rate_limit import limiter, rate_limit_exceeded_handler
from services.ledger_service.routers import (
    auth_router,
    challenges_router,
    referral_router,
    wallet_router,
)
from slowapi.errors import RateLimitExceeded

API_PREFIX = "/api"


def create_app() -> FastAPI:
    """Create and configure the ledger service FastAPI app."""
    settings = get_settings()
    app = FastAPI(
        title="GainVault Ledger Service",
        version="0.1.0",
        description="Accounts, referral rewards and USD wallet ledger for GainVault.",
    )

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    add_observability_middleware(app)
    add_exception_handlers(app)

    @app.get("/health", tags=["system"])
    @app.get(f"{API_PREFIX}/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {
            "status": "ok",
            "service": "ledger",
            "timestamp": isoformat_utc(utc_now()),
        }

    app.include_router(auth_router, prefix=API_PREFIX)
    app.include_router(referral_router, prefix=API_PREFIX)
    app.include_router(wallet_router, prefix=API_PREFIX)
    app.include_router(challenges_router, prefix=API_PREFIX)

    return app


app = create_app()
