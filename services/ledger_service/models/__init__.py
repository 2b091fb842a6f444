"""Ledger Service models package.

Re-exports all models and enums so that:
  - ``from services.ledger_service.models import User`` works
  - Alembic env.py sees every table through a single import
  - SQLAlchemy's mapper registry sees every model class on import

When adding a new model, add both its import and its __all__ entry.
"""

from services.ledger_service.models.enums import (  # noqa: F401
    ReferralStatus,
    TransactionStatus,
    TransactionType,
)
from services.ledger_service.models.referral import Referral  # noqa: F401
from services.ledger_service.models.transaction import Transaction  # noqa: F401
from services.ledger_service.models.user import User  # noqa: F401

__all__ = [
    # Enums
    "ReferralStatus",
    "TransactionStatus",
    "TransactionType",
    # Models
    "User",
    "Referral",
    "Transaction",
]
