"""
Named storage queries used by the account and transaction services.

Each function here is one lookup the rule engine needs, expressed as an
explicit SQLAlchemy statement. Services never build queries themselves;
they call these and work with the returned entities.

Row locking:
  find_account_by_number(..., for_update=True) issues SELECT ... FOR UPDATE
  so two requests mutating the same balance serialize on the account row.
  This is a no-op on SQLite, whose single-writer transactions already
  serialize, but it holds the lock on PostgreSQL.
"""

import uuid

from sqlalchemy import BigInteger, cast, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from app.database import Base
from app.models.account import Account
from app.models.account_user import AccountUser
from app.models.transaction import Transaction


async def find_account_user_by_id(
    db: AsyncSession,
    user_id: uuid.UUID,
) -> AccountUser | None:
    result = await db.execute(select(AccountUser).where(AccountUser.id == user_id))
    return result.scalar_one_or_none()


async def find_account_by_id(
    db: AsyncSession,
    account_id: uuid.UUID,
) -> Account | None:
    result = await db.execute(select(Account).where(Account.id == account_id))
    return result.scalar_one_or_none()


async def find_account_by_number(
    db: AsyncSession,
    account_number: str,
    for_update: bool = False,
) -> Account | None:
    query = select(Account).where(Account.account_number == account_number)
    if for_update:
        query = query.with_for_update()
    result = await db.execute(query)
    return result.scalar_one_or_none()


async def find_transaction_by_transaction_id(
    db: AsyncSession,
    transaction_id: str,
) -> Transaction | None:
    """Look up a transaction by its public id, with its account loaded."""
    result = await db.execute(
        select(Transaction)
        .options(joinedload(Transaction.account))
        .where(Transaction.transaction_id == transaction_id)
    )
    return result.scalar_one_or_none()


async def find_account_with_highest_number(db: AsyncSession) -> Account | None:
    """
    Return the account holding the numerically largest account number.

    Numbers are fixed-width strings, but the cast keeps the ordering numeric
    even if a shorter number was ever inserted by hand.
    """
    result = await db.execute(
        select(Account)
        .order_by(cast(Account.account_number, BigInteger).desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def count_accounts_by_user(db: AsyncSession, user_id: uuid.UUID) -> int:
    result = await db.execute(
        select(func.count(Account.id)).where(Account.account_user_id == user_id)
    )
    return result.scalar_one()


async def list_accounts_by_user(
    db: AsyncSession,
    user_id: uuid.UUID,
) -> list[Account]:
    """All accounts owned by a user, in insertion order."""
    result = await db.execute(
        select(Account)
        .where(Account.account_user_id == user_id)
        .order_by(Account.created_at)
    )
    return list(result.scalars().all())


async def save(db: AsyncSession, entity: Base) -> Base:
    """
    Stage an entity and flush it so generated columns (id, defaults) are set.

    Committing is left to the session owner (get_db, or the caller in tests).
    """
    db.add(entity)
    await db.flush()
    return entity
