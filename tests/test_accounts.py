"""
Tests for the account endpoints.

These tests verify:
  - POST /account opens sequentially numbered accounts
  - DELETE /account closes empty accounts and rejects the rest
  - GET /account lists a user's accounts with balances
  - GET /account/{id} returns one account
  - AccountError codes map to the right HTTP status and error_type
"""

import uuid

import pytest


async def _open(client, user_id) -> dict:
    response = await client.post("/account", json={"user_id": str(user_id)})
    assert response.status_code == 201, response.text
    return response.json()


class TestCreateAccount:
    """Tests for POST /account."""

    async def test_open_first_account(self, client, user):
        response = await client.post(
            "/account",
            json={"user_id": str(user.id), "initial_balance": 1000},
        )
        assert response.status_code == 201
        data = response.json()
        assert data["user_id"] == str(user.id)
        assert data["account_number"] == "1000000000"
        assert data["registered_at"] is not None

    async def test_numbers_increase(self, client, user, other_user):
        first = await _open(client, user.id)
        second = await _open(client, other_user.id)
        assert first["account_number"] == "1000000000"
        assert second["account_number"] == "1000000001"

    async def test_unknown_user(self, client):
        response = await client.post("/account", json={"user_id": str(uuid.uuid4())})
        assert response.status_code == 404
        assert response.json()["error_type"] == "user_not_found"

    async def test_limit_of_ten(self, client, user):
        for _ in range(10):
            await _open(client, user.id)

        response = await client.post("/account", json={"user_id": str(user.id)})
        assert response.status_code == 422
        assert response.json()["error_type"] == "max_accounts_per_user_exceeded"

    async def test_negative_initial_balance_rejected(self, client, user):
        response = await client.post(
            "/account",
            json={"user_id": str(user.id), "initial_balance": -1},
        )
        assert response.status_code == 422


class TestDeleteAccount:
    """Tests for DELETE /account."""

    async def test_close_account(self, client, user):
        opened = await _open(client, user.id)

        response = await client.request(
            "DELETE",
            "/account",
            json={"user_id": str(user.id), "account_number": opened["account_number"]},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["account_status"] == "UNREGISTERED"
        assert data["account_number"] == opened["account_number"]
        assert data["unregistered_at"] is not None

    async def test_close_twice(self, client, user):
        opened = await _open(client, user.id)
        body = {"user_id": str(user.id), "account_number": opened["account_number"]}

        await client.request("DELETE", "/account", json=body)
        response = await client.request("DELETE", "/account", json=body)

        assert response.status_code == 422
        assert response.json()["error_type"] == "account_already_closed"

    async def test_close_with_balance(self, client, user, funded_account):
        response = await client.request(
            "DELETE",
            "/account",
            json={"user_id": str(user.id), "account_number": funded_account.account_number},
        )
        assert response.status_code == 422
        assert response.json()["error_type"] == "balance_not_empty"

    async def test_close_someone_elses_account(self, client, other_user, funded_account):
        response = await client.request(
            "DELETE",
            "/account",
            json={
                "user_id": str(other_user.id),
                "account_number": funded_account.account_number,
            },
        )
        assert response.status_code == 403
        assert response.json()["error_type"] == "owner_mismatch"

    async def test_close_unknown_account(self, client, user):
        response = await client.request(
            "DELETE",
            "/account",
            json={"user_id": str(user.id), "account_number": "1234567890"},
        )
        assert response.status_code == 404
        assert response.json()["error_type"] == "account_not_found"

    @pytest.mark.parametrize("account_number", ["123456789", "12345678901"])
    async def test_account_number_length_validated(self, client, user, account_number):
        response = await client.request(
            "DELETE",
            "/account",
            json={"user_id": str(user.id), "account_number": account_number},
        )
        assert response.status_code == 422


class TestReadAccounts:
    """Tests for GET /account and GET /account/{id}."""

    async def test_list_accounts(self, client, user, other_user, funded_account):
        await _open(client, user.id)
        await _open(client, other_user.id)

        response = await client.get("/account", params={"user_id": str(user.id)})
        assert response.status_code == 200
        accounts = {a["account_number"]: a["balance"] for a in response.json()}
        assert accounts == {"1000000000": 10_000, "1000000001": 0}

    async def test_list_unknown_user(self, client):
        response = await client.get("/account", params={"user_id": str(uuid.uuid4())})
        assert response.status_code == 404

    async def test_get_account(self, client, funded_account):
        response = await client.get(f"/account/{funded_account.id}")
        assert response.status_code == 200
        data = response.json()
        assert data["account_number"] == funded_account.account_number
        assert data["account_status"] == "IN_USE"
        assert data["balance"] == 10_000
        assert data["unregistered_at"] is None

    async def test_get_unknown_account(self, client):
        response = await client.get(f"/account/{uuid.uuid4()}")
        assert response.status_code == 404
        assert response.json()["error_type"] == "account_not_found"


async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"
