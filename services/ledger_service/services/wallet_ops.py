"""Core wallet operations: balance reads, withdrawal requests, admin settlement.

Debits run with the user row locked (``SELECT ... FOR UPDATE``) and the balance
is changed with a guarded ``UPDATE`` so two concurrent withdrawals can never
overdraw the wallet.
"""

import uuid
from decimal import Decimal
from typing import Any, Optional, Sequence

from fastapi import HTTPException, status
from libs.common.currency import ZERO, money_to_float, parse_exact_money, to_money
from libs.common.datetime_utils import isoformat_utc, utc_now
from libs.common.logging import get_logger
from services.ledger_service.models import (
    Transaction,
    TransactionStatus,
    TransactionType,
    User,
)
from services.ledger_service.services.user_service import get_user_by_id
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Balance
# ---------------------------------------------------------------------------


async def get_balance(db: AsyncSession, user_id: uuid.UUID) -> Decimal:
    user = await get_user_by_id(db, user_id)
    return to_money(user.wallet_balance)


# ---------------------------------------------------------------------------
# Withdrawal request (atomic debit)
# ---------------------------------------------------------------------------


async def request_withdrawal(
    db: AsyncSession,
    *,
    user_id: uuid.UUID,
    amount,
    withdrawal_method: Optional[str],
    account_details: Any = None,
) -> tuple[Transaction, Decimal]:
    """Debit ``amount`` and record a pending withdrawal.

    1. Validate amount + method
    2. SELECT FOR UPDATE on the user row
    3. Reject if the balance does not cover the amount (no writes)
    4. Guarded balance update + pending withdrawal transaction
    5. Commit atomically

    Returns ``(transaction, new_balance)``.
    """
    value = parse_exact_money(amount)
    if value is None or value <= ZERO:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid withdrawal amount",
        )
    if not withdrawal_method:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Withdrawal method is required",
        )

    result = await db.execute(select(User).where(User.id == user_id).with_for_update())
    user = result.scalar_one_or_none()
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="User not found"
        )

    balance_before = to_money(user.wallet_balance)
    if balance_before < value:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Insufficient wallet balance",
        )
    balance_after = balance_before - value

    debit = await db.execute(
        update(User)
        .where(User.id == user.id, User.wallet_balance >= value)
        .values(wallet_balance=User.wallet_balance - value)
    )
    if debit.rowcount != 1:
        # Balance moved between the read and the update
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Insufficient wallet balance",
        )

    txn = Transaction(
        user_id=user.id,
        amount=-value,
        transaction_type=TransactionType.WITHDRAWAL,
        status=TransactionStatus.PENDING,
        description=f"Withdrawal request via {withdrawal_method}",
        txn_metadata={
            "withdrawalMethod": withdrawal_method,
            "accountDetails": account_details,
            "originalBalance": money_to_float(balance_before),
            "newBalance": money_to_float(balance_after),
        },
    )
    db.add(txn)

    try:
        await db.commit()
    except Exception:
        await db.rollback()
        logger.exception(
            "Withdrawal rolled back for user %s amount=%s", user_id, value
        )
        raise

    await db.refresh(txn)
    await db.refresh(user)
    new_balance = to_money(user.wallet_balance)
    logger.info(
        "Withdrawal %s requested by %s: amount=%s balance %s -> %s",
        txn.id,
        user_id,
        value,
        balance_before,
        new_balance,
    )
    return txn, new_balance


# ---------------------------------------------------------------------------
# Admin settlement
# ---------------------------------------------------------------------------


async def process_withdrawal(
    db: AsyncSession,
    *,
    transaction_id,
    new_status: TransactionStatus,
    notes: Optional[str] = None,
    admin_user_id: Optional[str] = None,
) -> Transaction:
    """Set the status of a withdrawal and annotate its metadata.

    The balance is never touched here: a failed or cancelled withdrawal keeps
    the amount debited at request time.
    """
    try:
        txn_uuid = (
            transaction_id
            if isinstance(transaction_id, uuid.UUID)
            else uuid.UUID(str(transaction_id))
        )
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Transaction not found"
        )

    result = await db.execute(
        select(Transaction).where(Transaction.id == txn_uuid).with_for_update()
    )
    txn = result.scalar_one_or_none()
    if not txn:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Transaction not found"
        )
    if txn.transaction_type != TransactionType.WITHDRAWAL:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid transaction type",
        )

    previous_status = txn.status
    metadata = dict(txn.txn_metadata or {})
    if notes:
        metadata["adminNotes"] = notes
    if admin_user_id is not None:
        metadata["processedBy"] = str(admin_user_id)
    metadata["processedAt"] = isoformat_utc(utc_now())

    txn.status = new_status
    # New dict so the JSON column registers the change
    txn.txn_metadata = metadata

    await db.commit()
    await db.refresh(txn)

    logger.info(
        "Withdrawal %s moved %s -> %s by %s",
        txn.id,
        previous_status.value,
        new_status.value,
        admin_user_id,
    )
    if new_status in (TransactionStatus.FAILED, TransactionStatus.CANCELLED):
        logger.warning(
            "Withdrawal %s marked %s; %s stays debited from user %s",
            txn.id,
            new_status.value,
            -txn.amount,
            txn.user_id,
        )
    return txn


# ---------------------------------------------------------------------------
# History
# ---------------------------------------------------------------------------


async def list_transactions(
    db: AsyncSession,
    *,
    user_id: uuid.UUID,
    page: int = 1,
    limit: int = 20,
    types: Optional[Sequence[TransactionType]] = None,
) -> tuple[list[Transaction], int]:
    """Newest-first page of a user's transactions plus the total count."""
    conditions = [Transaction.user_id == user_id]
    if types:
        conditions.append(Transaction.transaction_type.in_(list(types)))

    total = (
        await db.execute(select(func.count(Transaction.id)).where(*conditions))
    ).scalar_one()

    result = await db.execute(
        select(Transaction)
        .where(*conditions)
        .order_by(Transaction.created_at.desc(), Transaction.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    return list(result.scalars().all()), total
