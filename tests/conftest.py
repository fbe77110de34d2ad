"""
Test fixtures for the Account API test suite.

This module provides shared fixtures used across all test files:

  - db_engine / db_session: Fresh in-memory SQLite database for each test
  - client: Async HTTP test client wired to the same database
  - user / other_user: Two provisioned AccountUsers
  - funded_account: An open account owned by `user` holding 10,000

Key design decisions:
  - In-memory SQLite (sqlite+aiosqlite://) is used for speed and isolation.
    Each test gets a completely fresh database.
  - get_db is overridden with a session factory bound to the test engine.
    The override keeps get_db's commit-on-AccountError behaviour so FAIL
    transactions recorded by the routers are visible to assertions.
  - There is no deposit operation, so funded_account sets the balance
    directly in the database.
"""

import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

from app.database import Base, get_db
from app.exceptions import AccountError
from app.main import app
from app.services import account_service, account_user_service
from app import repository


# In-memory SQLite for fast, isolated tests
TEST_DATABASE_URL = "sqlite+aiosqlite://"

INITIAL_BALANCE = 10_000


@pytest_asyncio.fixture
async def db_engine():
    """Create a fresh async engine with all tables for each test."""
    engine = create_async_engine(TEST_DATABASE_URL)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine):
    """Provide an async session bound to the test engine."""
    async_session = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    async with async_session() as session:
        yield session


@pytest_asyncio.fixture
async def client(db_engine):
    """Async HTTP test client with the test database injected."""
    async_session = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async def override_get_db():
        async with async_session() as session:
            try:
                yield session
                await session.commit()
            except AccountError:
                await session.commit()
                raise
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def user(db_session):
    """The account user most tests act as."""
    account_user = await account_user_service.create_account_user(db_session, "Pobi")
    await db_session.commit()
    return account_user


@pytest_asyncio.fixture
async def other_user(db_session):
    """A second account user for ownership tests."""
    account_user = await account_user_service.create_account_user(db_session, "Harry")
    await db_session.commit()
    return account_user


@pytest_asyncio.fixture
async def funded_account(db_session, user):
    """An IN_USE account owned by `user` with INITIAL_BALANCE on it."""
    opened = await account_service.open_account(db_session, user.id)
    account = await repository.find_account_by_number(db_session, opened.account_number)
    account.balance = INITIAL_BALANCE
    await db_session.commit()
    return account
