"""
AccountUser provisioning.

Users are not created through the public API. This helper is what the demo
seed script and the test suite use to put an identity in place before any
account operation can run.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app import repository
from app.models.account_user import AccountUser

logger = logging.getLogger(__name__)


async def create_account_user(db: AsyncSession, name: str) -> AccountUser:
    user = AccountUser(name=name)
    await repository.save(db, user)
    logger.info("Account user created", extra={"user_id": str(user.id)})
    return user
