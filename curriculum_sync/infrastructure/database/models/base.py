# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Declarative base and shared mixins for ORM models."""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Uuid
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from curriculum_sync.utils.datetime import utc_now


class Base(DeclarativeBase):
    """Declarative base for all tables."""


class UUIDPrimaryKeyMixin:
    """Generated identity, distinct from any natural key."""

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)


class TimestampMixin:
    """Audit timestamps maintained on every write."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now
    )


class PublishableMixin:
    """Publication flags shared by every curriculum entity.

    is_published is re-asserted on every sync; is_locked is only set when a
    row is first created so manual locking survives later syncs.
    """

    is_published: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    is_locked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
