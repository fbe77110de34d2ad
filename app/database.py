"""
Database engine, session management, and base model class.

This module sets up SQLAlchemy 2.0 with async support. Key components:

  - engine: The async database engine (connection pool for production DBs)
  - AsyncSessionLocal: Factory for creating async database sessions
  - Base: Declarative base class that all ORM models inherit from
  - get_db(): FastAPI dependency that provides a session per request

Session lifecycle:
  Each API request gets its own session via get_db(), and that session is the
  all-or-nothing boundary around one account or transaction operation. It
  commits on success and rolls back on unexpected exceptions.

  Domain errors (AccountError) are the exception: the rule engine never
  mutates an account before every check has passed, so the only pending
  writes at that point are failure records the caller chose to save
  (see save_failed_use_transaction). Those are committed before the error
  propagates so the failed attempt stays on record.
"""

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase

from app.config import settings
from app.exceptions import AccountError


# echo=True in debug mode logs all SQL statements
engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
)

# expire_on_commit=False prevents lazy-load errors after commit, which would
# otherwise trigger a synchronous DB call from async context.
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models."""
    pass


async def get_db():
    """
    FastAPI dependency that provides a database session.

    Usage in a route:
        @router.get("/items")
        async def list_items(db: AsyncSession = Depends(get_db)):
            ...
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except AccountError:
            # Rule violations: keep explicitly recorded FAIL transactions
            await session.commit()
            raise
        except Exception:
            await session.rollback()
            raise
