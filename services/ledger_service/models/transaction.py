"""Transaction model: append-only audit trail of balance events."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from services.ledger_service.models.enums import (
    TransactionStatus,
    TransactionType,
    enum_values,
)
from sqlalchemy import JSON, CheckConstraint, DateTime
from sqlalchemy import Enum as SAEnum
from sqlalchemy import ForeignKey, Index, Numeric, String, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column


class Transaction(Base):
    """One balance-affecting event. Signed amount: credits > 0, debits < 0.

    Only ``status`` and ``txn_metadata`` change after insert.
    """

    __tablename__ = "transactions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=False
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    transaction_type: Mapped[TransactionType] = mapped_column(
        SAEnum(
            TransactionType,
            name="transaction_type_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        nullable=False,
    )
    status: Mapped[TransactionStatus] = mapped_column(
        SAEnum(
            TransactionStatus,
            name="transaction_status_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        default=TransactionStatus.COMPLETED,
        nullable=False,
    )
    description: Mapped[str] = mapped_column(String, nullable=False)
    # Points at a Referral or a User depending on reference_type
    reference_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True)
    reference_type: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    txn_metadata: Mapped[dict] = mapped_column(
        "txn_metadata",
        JSON().with_variant(JSONB(), "postgresql"),
        default=dict,
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False
    )

    __table_args__ = (
        CheckConstraint("amount <> 0", name="ck_transaction_amount_nonzero"),
        Index("ix_transactions_user_type", "user_id", "transaction_type"),
        Index("ix_transactions_user_created", "user_id", "created_at"),
        Index("ix_transactions_type_status", "transaction_type", "status"),
    )

    def __repr__(self) -> str:
        return f"<Transaction {self.id} {self.transaction_type.value} {self.amount}>"
