"""Enums for the Ledger Service models."""

import enum


def enum_values(enum_cls):
    """Return persistent DB values for SAEnum mappings."""
    return [member.value for member in enum_cls]


class ReferralStatus(str, enum.Enum):
    PENDING = "pending"
    ACTIVE = "active"
    # Never assigned by any flow; kept so stored rows and stats stay compatible.
    REWARDED = "rewarded"


class TransactionType(str, enum.Enum):
    REFERRAL_REWARD = "referral_reward"
    WITHDRAWAL = "withdrawal"
    CHALLENGE_PURCHASE = "challenge_purchase"
    REFUND = "refund"


class TransactionStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"
