"""
Transaction model - one record per attempt to use or cancel a balance.

Every call to use or cancel a balance leaves exactly one row here, whether
it succeeded or not:

  - type: USE (money out) or CANCEL (a USE given back)
  - result: SUCCESS or FAIL
  - amount: what was attempted, always positive, recorded even on failure
  - balance_snapshot: the account balance after the attempt; on failure
    this is simply the unchanged balance
  - transaction_id: the externally visible identifier (32 hex chars),
    distinct from the primary key and never reassigned

The account link is a plain reference, not ownership: transactions point at
their account, but an account does not cascade to or depend on them.
"""

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Integer, DateTime, Enum, ForeignKey, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base


class TransactionType(str, enum.Enum):
    USE = "USE"
    CANCEL = "CANCEL"


class TransactionResultType(str, enum.Enum):
    SUCCESS = "SUCCESS"
    FAIL = "FAIL"


class Transaction(Base):
    __tablename__ = "transactions"

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_transactions_positive_amount"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=uuid.uuid4,
    )

    transaction_type: Mapped[TransactionType] = mapped_column(
        Enum(TransactionType),
        nullable=False,
    )

    transaction_result_type: Mapped[TransactionResultType] = mapped_column(
        Enum(TransactionResultType),
        nullable=False,
    )

    account_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("accounts.id"),
        nullable=False,
        index=True,
    )

    amount: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )

    balance_snapshot: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )

    # Externally visible identifier, e.g. "9f1c0a7e2b4d4c6fa0e1d2c3b4a59687"
    transaction_id: Mapped[str] = mapped_column(
        String(32),
        unique=True,
        nullable=False,
        default=lambda: uuid.uuid4().hex,
    )

    # Indexed for the cancellation-window check and date-range reads
    transacted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
        index=True,
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
    account: Mapped["Account"] = relationship()
