"""
Account model - a balance-holding account owned by an AccountUser.

Each account has:
  - A unique 10-digit account number, assigned sequentially at open time
  - A status: IN_USE while open, UNREGISTERED once closed
  - A balance in integer minor units (never negative)
  - Registration and unregistration timestamps

Lifecycle:
    IN_USE --close (balance == 0)--> UNREGISTERED

  UNREGISTERED is terminal. Accounts are never deleted; a closed account
  keeps its row, its number, and its (zero) balance forever.

A CHECK constraint at the database level enforces that the balance can
never go negative, backing up the balance check in the transaction service.
"""

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Integer, DateTime, Enum, ForeignKey, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base


class AccountStatus(str, enum.Enum):
    """Account lifecycle state. Inherits from str so it serializes as-is."""
    IN_USE = "IN_USE"
    UNREGISTERED = "UNREGISTERED"


class Account(Base):
    __tablename__ = "accounts"

    __table_args__ = (
        CheckConstraint("balance >= 0", name="ck_accounts_non_negative_balance"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=uuid.uuid4,
    )

    # Owner of this account, set once at open time
    account_user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("account_users.id"),
        nullable=False,
        index=True,
    )

    account_number: Mapped[str] = mapped_column(
        String(10),
        unique=True,
        nullable=False,
    )

    account_status: Mapped[AccountStatus] = mapped_column(
        Enum(AccountStatus),
        default=AccountStatus.IN_USE,
        nullable=False,
    )

    balance: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )

    registered_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    # Only set when the account is closed
    unregistered_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    # Audit timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    # --- Relationships ---
    account_user: Mapped["AccountUser"] = relationship(
        back_populates="accounts",
    )
