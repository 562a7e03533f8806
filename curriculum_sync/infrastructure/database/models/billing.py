# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""User and entitlement models.

Entitlement.plan is a plain string column rather than a database enum so
that legacy values (ELITE, or anything hand-edited) can still be read and
reclassified by the plan migration.
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from curriculum_sync.infrastructure.database.models.base import (
    Base,
    TimestampMixin,
    UUIDPrimaryKeyMixin,
)
from curriculum_sync.utils.datetime import utc_now


class User(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Application user, referenced here for audit output only."""

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    entitlement: Mapped["Entitlement"] = relationship(back_populates="user", uselist=False)

    def __repr__(self) -> str:
        return f"User(id={self.id!r}, email={self.email!r})"


class Entitlement(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A user's access plan."""

    __tablename__ = "entitlements"

    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    plan: Mapped[str] = mapped_column(String(32), nullable=False, default="FREE", index=True)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default="ACTIVE")
    granted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )
    expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    user: Mapped[User] = relationship(back_populates="entitlement")

    def __repr__(self) -> str:
        return f"Entitlement(id={self.id!r}, plan={self.plan!r}, status={self.status!r})"
