"""
FastAPI application factory and entry point.

This module creates and configures the FastAPI application:
  1. Logging: JSON log lines at settings.LOG_LEVEL
  2. Lifespan manager: handles startup/shutdown (DB table creation, cleanup)
  3. CORS middleware
  4. Exception handlers: maps AccountError codes to HTTP responses
  5. Router registration: /account and /transaction

Running locally:
    uvicorn app.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import settings
from app.database import engine, Base
from app.exceptions import register_exception_handlers
from app.logging_config import setup_logging
from app.routers import accounts, transactions

from app import models  # noqa: F401  (registers every table on Base.metadata)

setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup:
      Creates all database tables if they don't exist. Convenient for local
      runs; a real deployment would manage schema with migrations.

    Shutdown:
      Disposes of the database engine, closing all connections cleanly.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Application started", extra={"version": settings.APP_VERSION})
    yield
    await engine.dispose()


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Account lifecycle and balance use/cancel API",
    lifespan=lifespan,
)

# ---------------------------------------------------------------------------
# Middleware
# ---------------------------------------------------------------------------

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------------------------------------------------------------------------
# Exception handlers
# ---------------------------------------------------------------------------

register_exception_handlers(app)

# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------

app.include_router(accounts.router, prefix="/account", tags=["Accounts"])
app.include_router(transactions.router, prefix="/transaction", tags=["Transactions"])


# ---------------------------------------------------------------------------
# Health check
# ---------------------------------------------------------------------------

@app.get("/health", tags=["Health"])
async def health_check():
    """Liveness probe for load balancers and orchestrators."""
    return {"status": "ok", "version": settings.APP_VERSION}
