# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""SQLAlchemy ORM models.

- base: Declarative base and shared mixins
- curriculum: Course, Week, Topic, Lesson, Question
- billing: User, Entitlement
"""

from curriculum_sync.infrastructure.database.models.base import (
    Base,
    PublishableMixin,
    TimestampMixin,
    UUIDPrimaryKeyMixin,
)
from curriculum_sync.infrastructure.database.models.billing import Entitlement, User
from curriculum_sync.infrastructure.database.models.curriculum import (
    Course,
    Lesson,
    Question,
    Topic,
    Week,
)

__all__ = [
    "Base",
    "PublishableMixin",
    "TimestampMixin",
    "UUIDPrimaryKeyMixin",
    # Curriculum
    "Course",
    "Week",
    "Topic",
    "Lesson",
    "Question",
    # Billing
    "User",
    "Entitlement",
]
