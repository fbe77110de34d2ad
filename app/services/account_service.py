"""
Account service - lifecycle rules for accounts.

This module handles:
  - Opening an account (per-user limit, sequential account numbers)
  - Closing an account (ownership, status and zero-balance checks)
  - Account lookups (by id, and all accounts of a user)

Every operation loads what it needs through app.repository, runs its checks
in a fixed order (the first failing check wins, raising AccountError), and
only then mutates state. Results are AccountDto copies; the ORM entities
never leave this module.

Account numbering:
  The first account ever opened gets ACCOUNT_NUMBER_SEED (1000000000).
  Every later account gets the current highest number plus one, regardless
  of which user owns it. Numbers are 10-digit zero-padded strings.
"""

import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from app import repository
from app.config import settings
from app.exceptions import AccountError, ErrorCode
from app.models.account import Account, AccountStatus
from app.models.account_user import AccountUser
from app.schemas.account import AccountDto

logger = logging.getLogger(__name__)

ACCOUNT_NUMBER_LENGTH = 10


async def _get_user(db: AsyncSession, user_id: uuid.UUID) -> AccountUser:
    user = await repository.find_account_user_by_id(db, user_id)
    if user is None:
        raise AccountError(ErrorCode.USER_NOT_FOUND)
    return user


async def _next_account_number(db: AsyncSession) -> str:
    newest = await repository.find_account_with_highest_number(db)
    if newest is None:
        return str(settings.ACCOUNT_NUMBER_SEED).zfill(ACCOUNT_NUMBER_LENGTH)
    return str(int(newest.account_number) + 1).zfill(ACCOUNT_NUMBER_LENGTH)


async def open_account(
    db: AsyncSession,
    user_id: uuid.UUID,
    initial_balance: int = 0,
) -> AccountDto:
    """
    Open a new account for a user.

    The account starts IN_USE with a zero balance. `initial_balance` is
    accepted for API compatibility but not applied: money only enters an
    account through cancellation of an earlier use.

    Raises:
        AccountError(USER_NOT_FOUND): No such user.
        AccountError(MAX_ACCOUNTS_PER_USER_EXCEEDED): The user already owns
            MAX_ACCOUNTS_PER_USER accounts.
    """
    user = await _get_user(db, user_id)

    if await repository.count_accounts_by_user(db, user.id) >= settings.MAX_ACCOUNTS_PER_USER:
        raise AccountError(ErrorCode.MAX_ACCOUNTS_PER_USER_EXCEEDED)

    account = Account(
        account_user_id=user.id,
        account_number=await _next_account_number(db),
        account_status=AccountStatus.IN_USE,
        balance=0,
        registered_at=datetime.now(timezone.utc),
    )
    await repository.save(db, account)

    logger.info(
        "Account opened",
        extra={"user_id": str(user.id), "account_number": account.account_number},
    )
    return AccountDto.from_account(account)


async def close_account(
    db: AsyncSession,
    user_id: uuid.UUID,
    account_number: str,
) -> AccountDto:
    """
    Close (unregister) an account.

    Checks, in order:
      1. The account belongs to the requesting user
      2. The account is not already UNREGISTERED
      3. The balance is exactly zero

    Raises:
        AccountError: USER_NOT_FOUND, ACCOUNT_NOT_FOUND, OWNER_MISMATCH,
            ACCOUNT_ALREADY_CLOSED or BALANCE_NOT_EMPTY.
    """
    user = await _get_user(db, user_id)
    account = await repository.find_account_by_number(db, account_number, for_update=True)
    if account is None:
        raise AccountError(ErrorCode.ACCOUNT_NOT_FOUND)

    if account.account_user_id != user.id:
        raise AccountError(ErrorCode.OWNER_MISMATCH)
    if account.account_status == AccountStatus.UNREGISTERED:
        raise AccountError(ErrorCode.ACCOUNT_ALREADY_CLOSED)
    if account.balance != 0:
        raise AccountError(ErrorCode.BALANCE_NOT_EMPTY)

    account.account_status = AccountStatus.UNREGISTERED
    account.unregistered_at = datetime.now(timezone.utc)
    await repository.save(db, account)

    logger.info(
        "Account closed",
        extra={"user_id": str(user.id), "account_number": account.account_number},
    )
    return AccountDto.from_account(account)


async def get_account(db: AsyncSession, account_id: uuid.UUID) -> AccountDto:
    """
    Get a single account by its internal id.

    Raises:
        AccountError(ACCOUNT_NOT_FOUND): If the account doesn't exist.
    """
    account = await repository.find_account_by_id(db, account_id)
    if account is None:
        raise AccountError(ErrorCode.ACCOUNT_NOT_FOUND)
    return AccountDto.from_account(account)


async def get_accounts_by_user(
    db: AsyncSession,
    user_id: uuid.UUID,
) -> list[AccountDto]:
    """List every account a user owns, open or closed."""
    user = await _get_user(db, user_id)
    accounts = await repository.list_accounts_by_user(db, user.id)
    return [AccountDto.from_account(account) for account in accounts]
