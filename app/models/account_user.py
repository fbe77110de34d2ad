"""
AccountUser model - the identity that owns accounts.

An AccountUser is deliberately minimal: an id and a display name. It is
provisioned out of band (see app/services/account_user_service.py and the
demo seed script) and never modified afterwards.

One AccountUser can own many Accounts; every Account has exactly one owner,
fixed when the account is opened.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, DateTime
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base


class AccountUser(Base):
    __tablename__ = "account_users"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=uuid.uuid4,
    )

    name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
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
    accounts: Mapped[list["Account"]] = relationship(
        back_populates="account_user",
    )
