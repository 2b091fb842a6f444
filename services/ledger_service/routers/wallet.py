"""Wallet endpoints: balance, withdrawals, history, admin settlement."""

from fastapi import APIRouter, Depends, Query
from libs.auth.dependencies import require_admin
from libs.auth.models import AuthUser
from libs.common.currency import CURRENCY
from libs.db.session import get_async_db
from services.ledger_service.models import User
from services.ledger_service.routers.dependencies import get_current_account
from services.ledger_service.schemas import (
    BalanceResponse,
    Pagination,
    ProcessWithdrawalRequest,
    ProcessWithdrawalResponse,
    TransactionListResponse,
    TransactionResponse,
    WithdrawRequest,
    WithdrawResponse,
)
from services.ledger_service.services import wallet_ops
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/wallet", tags=["wallet"])


@router.get("/balance", response_model=BalanceResponse)
async def get_wallet_balance(
    user: User = Depends(get_current_account),
    db: AsyncSession = Depends(get_async_db),
):
    balance = await wallet_ops.get_balance(db, user.id)
    return BalanceResponse(wallet_balance=balance, currency=CURRENCY)


@router.post("/withdraw", response_model=WithdrawResponse)
async def request_withdrawal(
    payload: WithdrawRequest,
    user: User = Depends(get_current_account),
    db: AsyncSession = Depends(get_async_db),
):
    """Debit the wallet and queue a withdrawal for admin processing."""
    txn, new_balance = await wallet_ops.request_withdrawal(
        db,
        user_id=user.id,
        amount=payload.amount,
        withdrawal_method=payload.withdrawal_method,
        account_details=payload.account_details,
    )
    return WithdrawResponse(
        message="Withdrawal request submitted successfully",
        transaction_id=txn.id,
        new_balance=new_balance,
        withdrawal_amount=-txn.amount,
    )


@router.get("/transactions", response_model=TransactionListResponse)
async def get_wallet_transactions(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    user: User = Depends(get_current_account),
    db: AsyncSession = Depends(get_async_db),
):
    """All of the caller's transactions, newest first."""
    transactions, total = await wallet_ops.list_transactions(
        db, user_id=user.id, page=page, limit=limit
    )
    return TransactionListResponse(
        transactions=[TransactionResponse.model_validate(t) for t in transactions],
        pagination=Pagination.build(page=page, limit=limit, total=total),
    )


# ---------------------------------------------------------------------------
# Admin
# ---------------------------------------------------------------------------


@router.post(
    "/admin/process-withdrawal/{transaction_id}",
    response_model=ProcessWithdrawalResponse,
)
async def process_withdrawal(
    transaction_id: str,
    payload: ProcessWithdrawalRequest,
    admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Set a withdrawal's status. The balance is not adjusted."""
    txn = await wallet_ops.process_withdrawal(
        db,
        transaction_id=transaction_id,
        new_status=payload.status,
        notes=payload.notes,
        admin_user_id=admin.user_id,
    )
    return ProcessWithdrawalResponse(
        message="Withdrawal status updated successfully",
        transaction=TransactionResponse.model_validate(txn),
    )
