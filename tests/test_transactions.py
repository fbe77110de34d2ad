"""
Tests for the transaction endpoints.

These tests verify:
  - POST /transaction/use debits the account
  - Rejected uses are still recorded as FAIL transactions (audit trail)
  - POST /transaction/cancel credits a full use back
  - Rejected cancels are recorded as CANCEL/FAIL transactions
  - Only an unknown account number records nothing
  - GET /transaction/{id} returns any transaction without an owner check
"""

import uuid

import pytest
from sqlalchemy import select

from app.models.transaction import Transaction, TransactionResultType, TransactionType


async def _failed_transactions(db_session) -> list[Transaction]:
    result = await db_session.execute(
        select(Transaction).where(
            Transaction.transaction_result_type == TransactionResultType.FAIL
        )
    )
    return list(result.scalars().all())


async def _use(client, user, account, amount):
    return await client.post(
        "/transaction/use",
        json={
            "user_id": str(user.id),
            "account_number": account.account_number,
            "amount": amount,
        },
    )


class TestUseBalance:
    """Tests for POST /transaction/use."""

    async def test_use_balance(self, client, user, funded_account):
        response = await _use(client, user, funded_account, 500)
        assert response.status_code == 200
        data = response.json()
        assert data["account_number"] == funded_account.account_number
        assert data["transaction_result"] == "SUCCESS"
        assert data["amount"] == 500
        assert len(data["transaction_id"]) == 32
        assert data["balance_snapshot"] == 9500

        account = await client.get(f"/account/{funded_account.id}")
        assert account.json()["balance"] == 9500

    async def test_exceeding_use_is_recorded(self, client, db_session, user, funded_account):
        response = await _use(client, user, funded_account, 20_000)
        assert response.status_code == 422
        assert response.json()["error_type"] == "amount_exceeds_balance"

        failed = await _failed_transactions(db_session)
        assert len(failed) == 1
        assert failed[0].transaction_type == TransactionType.USE
        assert failed[0].amount == 20_000
        assert failed[0].balance_snapshot == 10_000

        account = await client.get(f"/account/{funded_account.id}")
        assert account.json()["balance"] == 10_000

    async def test_owner_mismatch_is_recorded(self, client, db_session, other_user, funded_account):
        response = await _use(client, other_user, funded_account, 500)
        assert response.status_code == 403
        assert len(await _failed_transactions(db_session)) == 1

    async def test_unknown_user_is_recorded(self, client, db_session, funded_account):
        """The account exists, so the attempt still leaves a FAIL row."""
        response = await client.post(
            "/transaction/use",
            json={
                "user_id": str(uuid.uuid4()),
                "account_number": funded_account.account_number,
                "amount": 500,
            },
        )
        assert response.status_code == 404
        assert response.json()["error_type"] == "user_not_found"

        failed = await _failed_transactions(db_session)
        assert len(failed) == 1
        assert failed[0].transaction_type == TransactionType.USE
        assert failed[0].account_id == funded_account.id
        assert failed[0].balance_snapshot == 10_000

    async def test_unknown_account_not_recorded(self, client, db_session, user):
        response = await client.post(
            "/transaction/use",
            json={"user_id": str(user.id), "account_number": "1000000000", "amount": 500},
        )
        assert response.status_code == 404
        assert response.json()["error_type"] == "account_not_found"
        assert await _failed_transactions(db_session) == []

    @pytest.mark.parametrize("amount", [0, 9, 1_000_000_001])
    async def test_amount_bounds(self, client, user, funded_account, amount):
        response = await _use(client, user, funded_account, amount)
        assert response.status_code == 422


class TestCancelBalance:
    """Tests for POST /transaction/cancel."""

    async def test_cancel_restores_balance(self, client, user, funded_account):
        used = (await _use(client, user, funded_account, 500)).json()

        response = await client.post(
            "/transaction/cancel",
            json={
                "transaction_id": used["transaction_id"],
                "account_number": funded_account.account_number,
                "amount": 500,
            },
        )
        assert response.status_code == 200
        data = response.json()
        assert data["transaction_result"] == "SUCCESS"
        assert data["amount"] == 500
        assert data["transaction_id"] != used["transaction_id"]
        assert data["balance_snapshot"] == 10_000

        account = await client.get(f"/account/{funded_account.id}")
        assert account.json()["balance"] == 10_000

    async def test_partial_cancel_is_recorded(self, client, db_session, user, funded_account):
        used = (await _use(client, user, funded_account, 500)).json()

        response = await client.post(
            "/transaction/cancel",
            json={
                "transaction_id": used["transaction_id"],
                "account_number": funded_account.account_number,
                "amount": 100,
            },
        )
        assert response.status_code == 422
        assert response.json()["error_type"] == "cancel_must_be_full"

        failed = await _failed_transactions(db_session)
        assert len(failed) == 1
        assert failed[0].transaction_type == TransactionType.CANCEL
        assert failed[0].balance_snapshot == 9500

    async def test_unknown_transaction_is_recorded(self, client, db_session, funded_account):
        response = await client.post(
            "/transaction/cancel",
            json={
                "transaction_id": "does-not-exist",
                "account_number": funded_account.account_number,
                "amount": 500,
            },
        )
        assert response.status_code == 404
        assert response.json()["error_type"] == "transaction_not_found"

        failed = await _failed_transactions(db_session)
        assert len(failed) == 1
        assert failed[0].transaction_type == TransactionType.CANCEL

    async def test_cancel_on_closed_account(self, client, db_session, user, funded_account):
        used = (await _use(client, user, funded_account, 10_000)).json()
        closed = await client.request(
            "DELETE",
            "/account",
            json={"user_id": str(user.id), "account_number": funded_account.account_number},
        )
        assert closed.status_code == 200

        response = await client.post(
            "/transaction/cancel",
            json={
                "transaction_id": used["transaction_id"],
                "account_number": funded_account.account_number,
                "amount": 10_000,
            },
        )
        assert response.status_code == 422
        assert response.json()["error_type"] == "account_already_closed"
        assert len(await _failed_transactions(db_session)) == 1

        account = await client.get(f"/account/{funded_account.id}")
        assert account.json()["balance"] == 0
        assert account.json()["account_status"] == "UNREGISTERED"


class TestQueryTransaction:
    """Tests for GET /transaction/{transaction_id}."""

    async def test_query_transaction(self, client, user, funded_account):
        used = (await _use(client, user, funded_account, 700)).json()

        response = await client.get(f"/transaction/{used['transaction_id']}")
        assert response.status_code == 200
        data = response.json()
        assert data["account_number"] == funded_account.account_number
        assert data["transaction_type"] == "USE"
        assert data["transaction_result"] == "SUCCESS"
        assert data["transaction_id"] == used["transaction_id"]
        assert data["amount"] == 700
        assert data["transacted_at"] is not None

    async def test_query_failed_transaction(self, client, db_session, user, funded_account):
        await _use(client, user, funded_account, 50_000)
        failed = await _failed_transactions(db_session)

        response = await client.get(f"/transaction/{failed[0].transaction_id}")
        assert response.status_code == 200
        assert response.json()["transaction_result"] == "FAIL"

    async def test_query_unknown_transaction(self, client):
        response = await client.get("/transaction/does-not-exist")
        assert response.status_code == 404
        assert response.json()["error_type"] == "transaction_not_found"
