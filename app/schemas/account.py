"""
Pydantic schemas for Account endpoints and service results.

AccountDto is what the account service hands back: a detached copy of an
account's public fields, never the ORM entity itself. The request/response
classes below define the HTTP contract on top of it.

All monetary amounts are integers in minor units.
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, Field

from app.models.account import Account, AccountStatus


class AccountDto(BaseModel):
    """Detached result of an account operation."""
    id: uuid.UUID
    user_id: uuid.UUID
    account_number: str
    account_status: AccountStatus
    balance: int
    registered_at: datetime
    unregistered_at: datetime | None = None

    @classmethod
    def from_account(cls, account: Account) -> "AccountDto":
        return cls(
            id=account.id,
            user_id=account.account_user_id,
            account_number=account.account_number,
            account_status=account.account_status,
            balance=account.balance,
            registered_at=account.registered_at,
            unregistered_at=account.unregistered_at,
        )


# ---------------------------------------------------------------------------
# POST /account
# ---------------------------------------------------------------------------

class CreateAccountRequest(BaseModel):
    user_id: uuid.UUID
    initial_balance: int = Field(
        default=0,
        ge=0,
        description="Accepted for compatibility; new accounts always open at 0",
    )


class CreateAccountResponse(BaseModel):
    user_id: uuid.UUID
    account_number: str
    registered_at: datetime


# ---------------------------------------------------------------------------
# DELETE /account
# ---------------------------------------------------------------------------

class DeleteAccountRequest(BaseModel):
    user_id: uuid.UUID
    account_number: str = Field(min_length=10, max_length=10)


class DeleteAccountResponse(BaseModel):
    user_id: uuid.UUID
    account_number: str
    account_status: AccountStatus
    unregistered_at: datetime


# ---------------------------------------------------------------------------
# GET /account?user_id=... (GET /account/{id} returns AccountDto as-is)
# ---------------------------------------------------------------------------

class AccountInfo(BaseModel):
    """One row of a user's account list."""
    account_number: str
    balance: int
