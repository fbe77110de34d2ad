"""
Transactions router - balance use, cancel, and lookup.

    POST /transaction/use                 - Debit an account
    POST /transaction/cancel              - Cancel an earlier transaction
    GET  /transaction/{transaction_id}    - Look up a transaction

These handlers are the callers responsible for failure bookkeeping: when
the service rejects a use or cancel and the account number exists,
the handler records a FAIL transaction before re-raising. get_db commits
that record even though the request fails.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.exceptions import AccountError, ErrorCode
from app.schemas.transaction import (
    BalanceChangeResponse,
    CancelBalanceRequest,
    QueryTransactionResponse,
    UseBalanceRequest,
)
from app.services import transaction_service

router = APIRouter()

# Without an account there is nothing to attach a FAIL record to
_UNRECORDED_ERRORS = {ErrorCode.ACCOUNT_NOT_FOUND}


@router.post(
    "/use",
    response_model=BalanceChangeResponse,
    summary="Use (debit) an account balance",
)
async def use_balance(
    request: UseBalanceRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    Debit `amount` from the account. The account must belong to `user_id`,
    be IN_USE, and hold at least `amount`.

    A rejected attempt is still recorded as a FAIL transaction.
    """
    try:
        transaction = await transaction_service.use_balance(
            db=db,
            user_id=request.user_id,
            account_number=request.account_number,
            amount=request.amount,
        )
    except AccountError as exc:
        if exc.error_code not in _UNRECORDED_ERRORS:
            await transaction_service.save_failed_use_transaction(
                db, request.account_number, request.amount
            )
        raise

    return BalanceChangeResponse(
        account_number=transaction.account_number,
        transaction_result=transaction.transaction_result,
        transaction_id=transaction.transaction_id,
        amount=transaction.amount,
        balance_snapshot=transaction.balance_snapshot,
        transacted_at=transaction.transacted_at,
    )


@router.post(
    "/cancel",
    response_model=BalanceChangeResponse,
    summary="Cancel a balance use",
)
async def cancel_balance(
    request: CancelBalanceRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    Cancel an earlier transaction on this account. The amount must equal
    the original amount, and the original must be at most a year old.

    A rejected attempt is still recorded as a FAIL transaction.
    """
    try:
        transaction = await transaction_service.cancel_balance(
            db=db,
            transaction_id=request.transaction_id,
            account_number=request.account_number,
            amount=request.amount,
        )
    except AccountError as exc:
        if exc.error_code not in _UNRECORDED_ERRORS:
            await transaction_service.save_failed_cancel_transaction(
                db, request.account_number, request.amount
            )
        raise

    return BalanceChangeResponse(
        account_number=transaction.account_number,
        transaction_result=transaction.transaction_result,
        transaction_id=transaction.transaction_id,
        amount=transaction.amount,
        balance_snapshot=transaction.balance_snapshot,
        transacted_at=transaction.transacted_at,
    )


@router.get(
    "/{transaction_id}",
    response_model=QueryTransactionResponse,
    summary="Look up a transaction",
)
async def query_transaction(
    transaction_id: str,
    db: AsyncSession = Depends(get_db),
):
    """
    Get a transaction by its public id.

    No ownership check is made here: anyone with the id can read it.
    """
    transaction = await transaction_service.query_transaction(db, transaction_id)
    return QueryTransactionResponse(
        account_number=transaction.account_number,
        transaction_type=transaction.transaction_type,
        transaction_result=transaction.transaction_result,
        transaction_id=transaction.transaction_id,
        amount=transaction.amount,
        transacted_at=transaction.transacted_at,
    )
