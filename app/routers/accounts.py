"""
Accounts router - account lifecycle endpoints.

    POST   /account                 - Open a new account for a user
    DELETE /account                 - Close (unregister) an account
    GET    /account?user_id=...     - List a user's accounts
    GET    /account/{account_id}    - Get one account by internal id

Every rule lives in account_service; the handlers only translate between
HTTP shapes and service calls. Rule violations surface as AccountError and
are rendered by the handlers in app/exceptions.py.
"""

import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.schemas.account import (
    AccountDto,
    AccountInfo,
    CreateAccountRequest,
    CreateAccountResponse,
    DeleteAccountRequest,
    DeleteAccountResponse,
)
from app.services import account_service

router = APIRouter()


@router.post(
    "",
    response_model=CreateAccountResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Open a new account",
)
async def create_account(
    request: CreateAccountRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    Open an account for a user. It starts IN_USE with a zero balance and
    the next sequential 10-digit account number.

    Rejected with 422 once the user already owns 10 accounts.
    """
    account = await account_service.open_account(
        db=db,
        user_id=request.user_id,
        initial_balance=request.initial_balance,
    )
    return CreateAccountResponse(
        user_id=account.user_id,
        account_number=account.account_number,
        registered_at=account.registered_at,
    )


# DELETE with a body: FastAPI accepts it, clients must send JSON explicitly
@router.delete(
    "",
    response_model=DeleteAccountResponse,
    summary="Close an account",
)
async def delete_account(
    request: DeleteAccountRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    Close an account. Only the owner can close it, and only once its
    balance is exactly zero. Closed accounts cannot be reopened.
    """
    account = await account_service.close_account(
        db=db,
        user_id=request.user_id,
        account_number=request.account_number,
    )
    return DeleteAccountResponse(
        user_id=account.user_id,
        account_number=account.account_number,
        account_status=account.account_status,
        unregistered_at=account.unregistered_at,
    )


@router.get(
    "",
    response_model=list[AccountInfo],
    summary="List a user's accounts",
)
async def list_accounts(
    user_id: uuid.UUID = Query(..., description="Owner of the accounts"),
    db: AsyncSession = Depends(get_db),
):
    """List every account the user owns with its current balance."""
    accounts = await account_service.get_accounts_by_user(db, user_id)
    return [
        AccountInfo(account_number=account.account_number, balance=account.balance)
        for account in accounts
    ]


@router.get(
    "/{account_id}",
    response_model=AccountDto,
    summary="Get account details",
)
async def get_account(
    account_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    """Get the public fields of a single account."""
    return await account_service.get_account(db, account_id)
