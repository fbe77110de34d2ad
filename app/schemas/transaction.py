"""
Pydantic schemas for Transaction endpoints and service results.

TransactionDto is the detached result of use, cancel, and query. Amounts
are integers in minor units; the request bounds mirror what the service
is willing to process in a single call.
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, Field

from app.models.transaction import Transaction, TransactionResultType, TransactionType

MIN_AMOUNT = 10
MAX_AMOUNT = 1_000_000_000


class TransactionDto(BaseModel):
    """Detached result of a transaction operation."""
    account_number: str
    transaction_type: TransactionType
    transaction_result: TransactionResultType
    transaction_id: str
    amount: int
    balance_snapshot: int
    transacted_at: datetime

    @classmethod
    def from_transaction(cls, transaction: Transaction) -> "TransactionDto":
        return cls(
            account_number=transaction.account.account_number,
            transaction_type=transaction.transaction_type,
            transaction_result=transaction.transaction_result_type,
            transaction_id=transaction.transaction_id,
            amount=transaction.amount,
            balance_snapshot=transaction.balance_snapshot,
            transacted_at=transaction.transacted_at,
        )


class UseBalanceRequest(BaseModel):
    """Request body for POST /transaction/use."""
    user_id: uuid.UUID
    account_number: str = Field(min_length=10, max_length=10)
    amount: int = Field(ge=MIN_AMOUNT, le=MAX_AMOUNT)


class CancelBalanceRequest(BaseModel):
    """Request body for POST /transaction/cancel."""
    transaction_id: str = Field(min_length=1)
    account_number: str = Field(min_length=10, max_length=10)
    amount: int = Field(ge=MIN_AMOUNT, le=MAX_AMOUNT)


class BalanceChangeResponse(BaseModel):
    """Response body for a successful use or cancel."""
    account_number: str
    transaction_result: TransactionResultType
    transaction_id: str
    amount: int
    balance_snapshot: int
    transacted_at: datetime


class QueryTransactionResponse(BaseModel):
    """Response body for GET /transaction/{transaction_id}."""
    account_number: str
    transaction_type: TransactionType
    transaction_result: TransactionResultType
    transaction_id: str
    amount: int
    transacted_at: datetime
