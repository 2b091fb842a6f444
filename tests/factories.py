"""
Model factories for creating valid test data.

Every factory produces a valid, insertable SQLAlchemy model instance.
Override any field via kwargs.

Usage:
    user = UserFactory.create(wallet_balance=Decimal("50.00"))
    db_session.add(user)
    await db_session.commit()
"""

import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from decimal import Decimal

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _uuid() -> uuid.UUID:
    return uuid.uuid4()


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _suffix() -> str:
    return uuid.uuid4().hex[:8]


# ---------------------------------------------------------------------------
# Ledger Service
# ---------------------------------------------------------------------------


class UserFactory:
    @staticmethod
    def create(**overrides):
        from services.ledger_service.models import User

        suffix = _suffix()
        defaults = {
            "id": _uuid(),
            "username": f"trader_{suffix}",
            "email": f"trader-{suffix}@test.com",
            "wallet_address": f"Wallet{uuid.uuid4().hex}",
            "password_hash": None,
            "referral_code": suffix.upper(),
            "wallet_balance": Decimal("0.00"),
            "is_active": True,
            "is_admin": False,
            "created_at": _now(),
            "updated_at": _now(),
        }
        defaults.update(overrides)
        return User(**defaults)


class ReferralFactory:
    @staticmethod
    def create(referrer, referred, **overrides):
        from services.ledger_service.models import Referral, ReferralStatus

        defaults = {
            "id": _uuid(),
            "referrer_user_id": referrer.id,
            "referred_user_id": referred.id,
            "referral_code": referrer.referral_code,
            "status": ReferralStatus.PENDING,
            "reward_amount": Decimal("0.00"),
            "challenge_purchased": False,
            "challenge_price": Decimal("0.00"),
            "created_at": _now(),
            "updated_at": _now(),
        }
        defaults.update(overrides)
        return Referral(**defaults)


class TransactionFactory:
    @staticmethod
    def create(user, **overrides):
        from services.ledger_service.models import (
            Transaction,
            TransactionStatus,
            TransactionType,
        )

        defaults = {
            "id": _uuid(),
            "user_id": user.id,
            "amount": Decimal("10.00"),
            "transaction_type": TransactionType.REFERRAL_REWARD,
            "status": TransactionStatus.COMPLETED,
            "description": "Test transaction",
            "txn_metadata": {},
            "created_at": _now(),
            "updated_at": _now(),
        }
        defaults.update(overrides)
        return Transaction(**defaults)


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


def make_auth_user(user=None, *, role: str = "authenticated", **overrides):
    """AuthUser for dependency overrides, optionally mirroring a User row."""
    from libs.auth.models import AuthUser

    defaults = {
        "user_id": str(user.id) if user is not None else str(_uuid()),
        "wallet_address": user.wallet_address if user is not None else None,
        "role": role,
    }
    defaults.update(overrides)
    return AuthUser(**defaults)


def auth_headers(user, *, is_admin: bool = False) -> dict:
    """Bearer header carrying a real signed token for ``user``."""
    from libs.auth.security import create_access_token

    token = create_access_token(
        user_id=str(user.id),
        wallet_address=user.wallet_address,
        is_admin=is_admin,
    )
    return {"Authorization": f"Bearer {token}"}


@contextmanager
def override_auth(app, auth_user):
    """Temporarily replace get_current_user on ``app`` with ``auth_user``."""
    from libs.auth.dependencies import get_current_user

    app.dependency_overrides[get_current_user] = lambda: auth_user
    try:
        yield auth_user
    finally:
        app.dependency_overrides.pop(get_current_user, None)


async def persist(db, *instances):
    """Add, commit and refresh ``instances``; returns the first one."""
    for instance in instances:
        db.add(instance)
    await db.commit()
    for instance in instances:
        await db.refresh(instance)
    return instances[0]
