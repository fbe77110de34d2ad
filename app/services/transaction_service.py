"""
Transaction service - the balance use/cancel rules.

THIS IS WHERE BALANCES CHANGE. It handles:
  - Using (debiting) an account balance
  - Cancelling an earlier use, crediting the full amount back
  - Recording failed use/cancel attempts
  - Looking up a transaction by its public id

Every use or cancel attempt is meant to leave exactly one Transaction row:
SUCCESS rows are written here as part of the operation, FAIL rows are
written by the caller through save_failed_use_transaction /
save_failed_cancel_transaction once it has seen the AccountError.
use_balance and cancel_balance never write a FAIL row themselves.

Atomicity:
  The balance change and its SUCCESS transaction are flushed in the same
  session, and the session owner (get_db) commits or rolls back both.
  All checks run before any mutation, so a rejected call leaves the account
  exactly as it was.

Cancellation window:
  A transaction can be cancelled until CANCEL_WINDOW_DAYS have elapsed,
  measured timestamp to timestamp. Exactly 365 days old is still
  cancellable; 365 days and one hour is not.
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from app import repository
from app.config import settings
from app.exceptions import AccountError, ErrorCode
from app.models.account import Account, AccountStatus
from app.models.transaction import Transaction, TransactionResultType, TransactionType
from app.schemas.transaction import TransactionDto

logger = logging.getLogger(__name__)


async def _get_account_by_number(
    db: AsyncSession,
    account_number: str,
    for_update: bool = False,
) -> Account:
    account = await repository.find_account_by_number(db, account_number, for_update=for_update)
    if account is None:
        raise AccountError(ErrorCode.ACCOUNT_NOT_FOUND)
    return account


async def _save_transaction(
    db: AsyncSession,
    account: Account,
    transaction_type: TransactionType,
    result_type: TransactionResultType,
    amount: int,
) -> Transaction:
    """Build and persist a transaction stamped with the account's current balance."""
    transaction = Transaction(
        account=account,
        transaction_type=transaction_type,
        transaction_result_type=result_type,
        amount=amount,
        balance_snapshot=account.balance,
        transaction_id=uuid.uuid4().hex,
        transacted_at=datetime.now(timezone.utc),
    )
    await repository.save(db, transaction)

    logger.info(
        "Transaction recorded",
        extra={
            "account_number": account.account_number,
            "transaction_id": transaction.transaction_id,
            "transaction_type": transaction_type.value,
            "transaction_result": result_type.value,
            "amount": amount,
            "balance_snapshot": transaction.balance_snapshot,
        },
    )
    return transaction


def _is_outside_cancel_window(transacted_at: datetime, now: datetime) -> bool:
    # SQLite hands back naive UTC datetimes
    if transacted_at.tzinfo is None:
        transacted_at = transacted_at.replace(tzinfo=timezone.utc)
    return now - transacted_at > timedelta(days=settings.CANCEL_WINDOW_DAYS)


async def use_balance(
    db: AsyncSession,
    user_id: uuid.UUID,
    account_number: str,
    amount: int,
) -> TransactionDto:
    """
    Debit `amount` from an account.

    Checks, in order:
      1. The account belongs to the requesting user
      2. The account is IN_USE
      3. The amount does not exceed the balance

    Returns:
        TransactionDto for the new USE/SUCCESS transaction, whose
        balance_snapshot is the balance after the debit.

    Raises:
        AccountError: USER_NOT_FOUND, ACCOUNT_NOT_FOUND, OWNER_MISMATCH,
            ACCOUNT_ALREADY_CLOSED or AMOUNT_EXCEEDS_BALANCE. The caller
            records the failed attempt with save_failed_use_transaction.
    """
    user = await repository.find_account_user_by_id(db, user_id)
    if user is None:
        raise AccountError(ErrorCode.USER_NOT_FOUND)
    account = await _get_account_by_number(db, account_number, for_update=True)

    if account.account_user_id != user.id:
        raise AccountError(ErrorCode.OWNER_MISMATCH)
    if account.account_status != AccountStatus.IN_USE:
        raise AccountError(ErrorCode.ACCOUNT_ALREADY_CLOSED)
    if amount > account.balance:
        raise AccountError(
            ErrorCode.AMOUNT_EXCEEDS_BALANCE,
            f"Amount exceeds the account balance: requested {amount}, "
            f"available {account.balance}",
        )

    account.balance -= amount
    await repository.save(db, account)

    transaction = await _save_transaction(
        db, account, TransactionType.USE, TransactionResultType.SUCCESS, amount
    )
    return TransactionDto.from_transaction(transaction)


async def save_failed_use_transaction(
    db: AsyncSession,
    account_number: str,
    amount: int,
) -> None:
    """
    Record a USE attempt that failed, leaving the balance untouched.

    No ownership or status check: the failure has already been diagnosed
    by whoever calls this.

    Raises:
        AccountError(ACCOUNT_NOT_FOUND): If the account doesn't exist.
    """
    account = await _get_account_by_number(db, account_number)
    await _save_transaction(
        db, account, TransactionType.USE, TransactionResultType.FAIL, amount
    )


async def cancel_balance(
    db: AsyncSession,
    transaction_id: str,
    account_number: str,
    amount: int,
) -> TransactionDto:
    """
    Cancel an earlier transaction, crediting its full amount back.

    Checks, in order:
      1. The original transaction was made on this account
      2. The amount equals the original amount (no partial cancels)
      3. The original is within the cancellation window
      4. The account is still IN_USE

    Known gap: the original's type and result are not checked. Cancelling
    a USE/FAIL row, a CANCEL row, or the same USE twice credits money that
    was never debited. Callers must only cancel successful uses.

    Returns:
        TransactionDto for the new CANCEL/SUCCESS transaction, whose
        balance_snapshot is the balance after the credit.

    Raises:
        AccountError: TRANSACTION_NOT_FOUND, ACCOUNT_NOT_FOUND,
            TRANSACTION_ACCOUNT_MISMATCH, CANCEL_MUST_BE_FULL,
            ORDER_TOO_OLD_TO_CANCEL or ACCOUNT_ALREADY_CLOSED.
    """
    original = await repository.find_transaction_by_transaction_id(db, transaction_id)
    if original is None:
        raise AccountError(ErrorCode.TRANSACTION_NOT_FOUND)
    account = await _get_account_by_number(db, account_number, for_update=True)

    if original.account_id != account.id:
        raise AccountError(ErrorCode.TRANSACTION_ACCOUNT_MISMATCH)
    if amount != original.amount:
        raise AccountError(ErrorCode.CANCEL_MUST_BE_FULL)
    if _is_outside_cancel_window(original.transacted_at, datetime.now(timezone.utc)):
        raise AccountError(ErrorCode.ORDER_TOO_OLD_TO_CANCEL)
    if account.account_status != AccountStatus.IN_USE:
        raise AccountError(ErrorCode.ACCOUNT_ALREADY_CLOSED)

    account.balance += amount
    await repository.save(db, account)

    transaction = await _save_transaction(
        db, account, TransactionType.CANCEL, TransactionResultType.SUCCESS, amount
    )
    return TransactionDto.from_transaction(transaction)


async def save_failed_cancel_transaction(
    db: AsyncSession,
    account_number: str,
    amount: int,
) -> None:
    """
    Record a CANCEL attempt that failed, leaving the balance untouched.

    Raises:
        AccountError(ACCOUNT_NOT_FOUND): If the account doesn't exist.
    """
    account = await _get_account_by_number(db, account_number)
    await _save_transaction(
        db, account, TransactionType.CANCEL, TransactionResultType.FAIL, amount
    )


async def query_transaction(db: AsyncSession, transaction_id: str) -> TransactionDto:
    """
    Look up a transaction by its public id.

    This is a plain read: it does not check who owns the account. Anyone
    holding a transaction id can read the transaction. Callers exposing this
    to end users should add their own authorization in front of it.

    Raises:
        AccountError(TRANSACTION_NOT_FOUND): If no such transaction exists.
    """
    transaction = await repository.find_transaction_by_transaction_id(db, transaction_id)
    if transaction is None:
        raise AccountError(ErrorCode.TRANSACTION_NOT_FOUND)
    return TransactionDto.from_transaction(transaction)
