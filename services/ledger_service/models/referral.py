"""Referral model: one row per referred user."""

import uuid
from datetime import datetime
from decimal import Decimal

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from services.ledger_service.models.enums import ReferralStatus, enum_values
from sqlalchemy import Boolean, CheckConstraint, DateTime
from sqlalchemy import Enum as SAEnum
from sqlalchemy import ForeignKey, Index, Numeric, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship


class Referral(Base):
    """Links a referrer to the user who signed up with their code.

    ``reward_amount`` and ``challenge_price`` are a cached projection of the
    ``referral_reward`` transaction, which stays the source of truth.
    """

    __tablename__ = "referrals"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    referrer_user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=False
    )
    referred_user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), unique=True, nullable=False
    )
    status: Mapped[ReferralStatus] = mapped_column(
        SAEnum(
            ReferralStatus,
            name="referral_status_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        default=ReferralStatus.PENDING,
        nullable=False,
    )
    referral_code: Mapped[str] = mapped_column(String(8), nullable=False)
    reward_amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), default=Decimal("0.00"), nullable=False
    )
    challenge_purchased: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )
    challenge_price: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), default=Decimal("0.00"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False
    )

    referrer: Mapped["User"] = relationship(  # noqa: F821
        foreign_keys=[referrer_user_id], lazy="raise"
    )
    referred_user: Mapped["User"] = relationship(  # noqa: F821
        foreign_keys=[referred_user_id], lazy="raise"
    )

    __table_args__ = (
        CheckConstraint(
            "referrer_user_id <> referred_user_id", name="ck_referral_not_self"
        ),
        Index("ix_referrals_referrer_status", "referrer_user_id", "status"),
        Index("ix_referrals_referral_code", "referral_code"),
    )

    def __repr__(self) -> str:
        return f"<Referral {self.id} {self.status.value}>"
