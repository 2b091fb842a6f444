"""Wallet and transaction schemas."""

import uuid
from datetime import datetime
from typing import Any, Optional

from pydantic import AliasChoices, Field
from services.ledger_service.models.enums import TransactionStatus, TransactionType
from services.ledger_service.schemas.common import CamelModel, Pagination


class BalanceResponse(CamelModel):
    success: bool = True
    wallet_balance: float
    currency: str = "USD"


class WithdrawRequest(CamelModel):
    # Validated by the service so the caller gets the original error messages
    amount: Optional[float] = None
    withdrawal_method: Optional[str] = None
    account_details: Any = None


class WithdrawResponse(CamelModel):
    success: bool = True
    message: str
    transaction_id: uuid.UUID
    new_balance: float
    withdrawal_amount: float


class TransactionResponse(CamelModel):
    id: uuid.UUID
    user_id: uuid.UUID
    amount: float
    # ORM attribute names differ from the wire names ("metadata" would also
    # collide with the declarative Base.metadata on the model)
    transaction_type: TransactionType = Field(
        validation_alias=AliasChoices("transaction_type", "type"),
        serialization_alias="type",
    )
    status: TransactionStatus
    description: str
    reference_id: Optional[uuid.UUID] = None
    reference_type: Optional[str] = None
    txn_metadata: dict = Field(
        default_factory=dict,
        validation_alias=AliasChoices("txn_metadata", "metadata"),
        serialization_alias="metadata",
    )
    created_at: datetime
    updated_at: datetime


class TransactionListResponse(CamelModel):
    success: bool = True
    transactions: list[TransactionResponse]
    pagination: Pagination


class ProcessWithdrawalRequest(CamelModel):
    status: TransactionStatus
    notes: Optional[str] = None


class ProcessWithdrawalResponse(CamelModel):
    success: bool = True
    message: str
    transaction: TransactionResponse
