"""
Domain error type and FastAPI exception handlers.

Every rule the account and transaction services enforce fails the same way:
by raising AccountError with an ErrorCode. There is one class, not a
hierarchy: the code says what went wrong, the detail says it in words, and
the handler layer translates the code into an HTTP status. Services never
build HTTP responses themselves.

Error codes:
    USER_NOT_FOUND                 - no AccountUser with that id
    ACCOUNT_NOT_FOUND              - no account with that id / number
    TRANSACTION_NOT_FOUND          - no transaction with that transaction id
    OWNER_MISMATCH                 - the account belongs to another user
    ACCOUNT_ALREADY_CLOSED         - the account is UNREGISTERED
    BALANCE_NOT_EMPTY              - closing an account that still holds money
    MAX_ACCOUNTS_PER_USER_EXCEEDED - the user already owns the maximum
    AMOUNT_EXCEEDS_BALANCE         - using more than the account holds
    TRANSACTION_ACCOUNT_MISMATCH   - cancelling against a different account
    CANCEL_MUST_BE_FULL            - partial cancellation attempted
    ORDER_TOO_OLD_TO_CANCEL        - original transaction is past the window
"""

import enum
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

logger = logging.getLogger(__name__)


class ErrorCode(str, enum.Enum):
    """Discrete error kinds. Values double as the `error_type` in responses."""
    USER_NOT_FOUND = "user_not_found"
    ACCOUNT_NOT_FOUND = "account_not_found"
    TRANSACTION_NOT_FOUND = "transaction_not_found"
    OWNER_MISMATCH = "owner_mismatch"
    ACCOUNT_ALREADY_CLOSED = "account_already_closed"
    BALANCE_NOT_EMPTY = "balance_not_empty"
    MAX_ACCOUNTS_PER_USER_EXCEEDED = "max_accounts_per_user_exceeded"
    AMOUNT_EXCEEDS_BALANCE = "amount_exceeds_balance"
    TRANSACTION_ACCOUNT_MISMATCH = "transaction_account_mismatch"
    CANCEL_MUST_BE_FULL = "cancel_must_be_full"
    ORDER_TOO_OLD_TO_CANCEL = "order_too_old_to_cancel"

    @property
    def message(self) -> str:
        return _MESSAGES[self]


_MESSAGES = {
    ErrorCode.USER_NOT_FOUND: "User not found",
    ErrorCode.ACCOUNT_NOT_FOUND: "Account not found",
    ErrorCode.TRANSACTION_NOT_FOUND: "Transaction not found",
    ErrorCode.OWNER_MISMATCH: "Account does not belong to this user",
    ErrorCode.ACCOUNT_ALREADY_CLOSED: "Account is already unregistered",
    ErrorCode.BALANCE_NOT_EMPTY: "Account still has a remaining balance",
    ErrorCode.MAX_ACCOUNTS_PER_USER_EXCEEDED: "User already owns the maximum number of accounts",
    ErrorCode.AMOUNT_EXCEEDS_BALANCE: "Amount exceeds the account balance",
    ErrorCode.TRANSACTION_ACCOUNT_MISMATCH: "Transaction does not belong to this account",
    ErrorCode.CANCEL_MUST_BE_FULL: "Cancellation must be for the full transaction amount",
    ErrorCode.ORDER_TOO_OLD_TO_CANCEL: "Transaction is too old to cancel",
}

# Anything not listed here is a business-rule rejection (422)
_STATUS_CODES = {
    ErrorCode.USER_NOT_FOUND: 404,
    ErrorCode.ACCOUNT_NOT_FOUND: 404,
    ErrorCode.TRANSACTION_NOT_FOUND: 404,
    ErrorCode.OWNER_MISMATCH: 403,
}


class AccountError(Exception):
    """
    Raised by the service layer whenever an operation is rejected.

    Attributes:
        error_code: The ErrorCode describing the failure.
        detail: Human-readable message (defaults to the code's message).
    """

    def __init__(self, error_code: ErrorCode, detail: str | None = None):
        self.error_code = error_code
        self.detail = detail or error_code.message
        super().__init__(self.detail)

    @property
    def status_code(self) -> int:
        return _STATUS_CODES.get(self.error_code, 422)


# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------

def register_exception_handlers(app: FastAPI) -> None:
    """
    Register custom exception handlers with the FastAPI application.

    Responses share one shape: {"detail": "...", "error_type": "..."}.
    This is called once during app startup in main.py.
    """

    @app.exception_handler(AccountError)
    async def account_error_handler(
        request: Request, exc: AccountError
    ) -> JSONResponse:
        logger.warning(
            "Request rejected: %s",
            exc.detail,
            extra={"action": request.url.path, "error_code": exc.error_code.value},
        )
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail, "error_type": exc.error_code.value},
        )

    @app.exception_handler(IntegrityError)
    async def integrity_error_handler(
        request: Request, exc: IntegrityError
    ) -> JSONResponse:
        # e.g. two concurrent opens racing for the same account number
        logger.error("Integrity violation on %s", request.url.path, exc_info=exc)
        return JSONResponse(
            status_code=409,
            content={
                "detail": "The request conflicts with existing data",
                "error_type": "invalid_request",
            },
        )
