"""
Application configuration using Pydantic Settings.

All configuration is loaded from environment variables, with an optional .env file
as a fallback. Every setting has a default, so the service starts without any
environment at all; .env.example lists what can be overridden.

Pydantic Settings automatically:
  1. Reads from environment variables (highest priority)
  2. Falls back to .env file values
  3. Uses defaults defined here (lowest priority)

Usage:
    from app.config import settings
    print(settings.MAX_ACCOUNTS_PER_USER)
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Central configuration for the Account API."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # --- Application ---
    APP_NAME: str = "Account API"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # --- Database ---
    # SQLite for local use; swap to a PostgreSQL (asyncpg) URL for production
    DATABASE_URL: str = "sqlite+aiosqlite:///./data/accounts.db"

    # --- Account rules ---
    # A user may own at most this many accounts (closed ones included)
    MAX_ACCOUNTS_PER_USER: int = 10
    # Number given to the very first account ever opened
    ACCOUNT_NUMBER_SEED: int = 1_000_000_000

    # --- Transaction rules ---
    # A USE transaction can be cancelled until this many days have elapsed
    CANCEL_WINDOW_DAYS: int = 365

    # --- CORS ---
    ALLOWED_ORIGINS: list[str] = ["http://localhost:3000"]


# Singleton: import this instance everywhere instead of creating new Settings()
settings = Settings()
