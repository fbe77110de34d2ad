#!/usr/bin/env python3
"""
Demo seed script - populates the database with sample data for demos.

!! NOT FOR PRODUCTION !!
Users and starting balances are written straight into the database (there
is no user endpoint and no deposit operation); accounts and transaction
history are then created through the running API.

Usage:
    # With the API server running on localhost:8000:
    python demo/seed.py

    # Delete the database file:
    python demo/seed.py --reset

    # Custom server URL:
    python demo/seed.py --base-url http://localhost:9000
"""

import argparse
import asyncio
import os
import random
import sys

import httpx

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

BASE_URL = "http://localhost:8000"

# ---------------------------------------------------------------------------
# Demo users: name -> starting balance of each account they open
# ---------------------------------------------------------------------------

MEMBERS = [
    {"name": "Alice Chen", "balances": [850_00, 5_000_00]},
    {"name": "Bob Martinez", "balances": [1_200_00]},
    {"name": "Carol Nguyen", "balances": [3_200_00, 12_000_00]},
    {"name": "Dave Johnson", "balances": [600_00]},
    {"name": "Erin Patel", "balances": [0]},
]


def log(msg: str) -> None:
    print(f"  {msg}")


# ---------------------------------------------------------------------------
# Direct database access
# ---------------------------------------------------------------------------

async def create_users(names: list[str]) -> dict[str, str]:
    """Provision account users, return {name: user_id}."""
    from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
    from app.config import settings
    from app.database import Base
    from app.services.account_user_service import create_account_user

    engine = create_async_engine(settings.DATABASE_URL)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    user_ids = {}
    async with session_factory() as session:
        for name in names:
            user = await create_account_user(session, name)
            user_ids[name] = str(user.id)
        await session.commit()

    await engine.dispose()
    return user_ids


async def set_balances(balances: dict[str, int]) -> None:
    """Write starting balances keyed by account number."""
    from sqlalchemy import update
    from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
    from app.config import settings
    from app.models.account import Account

    engine = create_async_engine(settings.DATABASE_URL)
    session_factory = async_sessionmaker(engine, class_=AsyncSession)

    async with session_factory() as session:
        for account_number, balance in balances.items():
            await session.execute(
                update(Account)
                .where(Account.account_number == account_number)
                .values(balance=balance)
            )
        await session.commit()

    await engine.dispose()


# ---------------------------------------------------------------------------
# API calls
# ---------------------------------------------------------------------------

async def open_account(client: httpx.AsyncClient, user_id: str) -> str:
    resp = await client.post(f"{BASE_URL}/account", json={"user_id": user_id})
    resp.raise_for_status()
    return resp.json()["account_number"]


async def use_balance(client: httpx.AsyncClient, user_id: str,
                      account_number: str, amount: int) -> httpx.Response:
    return await client.post(f"{BASE_URL}/transaction/use", json={
        "user_id": user_id,
        "account_number": account_number,
        "amount": amount,
    })


async def cancel_balance(client: httpx.AsyncClient, transaction_id: str,
                         account_number: str, amount: int) -> httpx.Response:
    return await client.post(f"{BASE_URL}/transaction/cancel", json={
        "transaction_id": transaction_id,
        "account_number": account_number,
        "amount": amount,
    })


async def seed_history(client: httpx.AsyncClient, user_id: str,
                       account_number: str, balance: int) -> None:
    """A few uses, one cancel, and one deliberately rejected use."""
    used = []
    for _ in range(random.randint(2, 5)):
        if balance < 10:
            break
        amount = random.randint(10, max(10, balance // 4))
        resp = await use_balance(client, user_id, account_number, amount)
        if resp.status_code == 200:
            used.append(resp.json())
            balance -= amount

    if used:
        first = used[0]
        await cancel_balance(client, first["transaction_id"], account_number, first["amount"])
        balance += first["amount"]

    # Recorded as a FAIL transaction
    await use_balance(client, user_id, account_number, balance + 100)


async def seed(base_url: str) -> None:
    global BASE_URL
    BASE_URL = base_url

    print("\n========================================")
    print("  Seeding demo data")
    print("========================================")

    user_ids = await create_users([m["name"] for m in MEMBERS])
    starting_balances = {}

    async with httpx.AsyncClient(timeout=30) as client:
        accounts = []
        for member in MEMBERS:
            user_id = user_ids[member["name"]]
            for balance in member["balances"]:
                account_number = await open_account(client, user_id)
                starting_balances[account_number] = balance
                accounts.append((member["name"], user_id, account_number, balance))
                log(f"{member['name']:<15s} opened {account_number}")

        await set_balances(starting_balances)

        for name, user_id, account_number, balance in accounts:
            await seed_history(client, user_id, account_number, balance)

        print("\n========================================")
        print("  SEED COMPLETE")
        print("========================================")
        print(f"\n  {'Name':<15s} {'User id':<38s} {'Account':<12s} {'Balance'}")
        for name, user_id, account_number, _ in accounts:
            resp = await client.get(f"{BASE_URL}/account", params={"user_id": user_id})
            balance = next(
                a["balance"] for a in resp.json() if a["account_number"] == account_number
            )
            print(f"  {name:<15s} {user_id:<38s} {account_number:<12s} {balance:>10,d}")
        print()


def reset_database() -> None:
    """Delete the SQLite database file so the server recreates it on restart."""
    db_path = os.path.join(os.path.dirname(__file__), "..", "data", "accounts.db")
    db_path = os.path.normpath(db_path)

    if os.path.exists(db_path):
        os.remove(db_path)
        print(f"\n  Deleted {db_path}")
        print("  Restart the server to recreate empty tables.\n")
    else:
        print(f"\n  No database found at {db_path}\n")


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

async def main() -> None:
    parser = argparse.ArgumentParser(
        description="Demo seed script (NOT FOR PRODUCTION)",
        epilog="Creates sample users, accounts, and transactions for demos.",
    )
    parser.add_argument(
        "--base-url", default="http://localhost:8000",
        help="Base URL of the running API (default: http://localhost:8000)",
    )
    parser.add_argument(
        "--reset", action="store_true",
        help="Delete the database file and exit (restart server to recreate)",
    )
    args = parser.parse_args()

    if args.reset:
        reset_database()
        return

    await seed(args.base_url)


if __name__ == "__main__":
    asyncio.run(main())
