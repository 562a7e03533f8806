# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Curriculum hierarchy models.

Course -> Week -> Topic -> {Lesson, Question}

Every model carries a generated UUID identity plus a natural key made of
its scoping parent column and a business identifier. The natural key is
declared on the class so the repository can resolve lookups generically:

- Course: slug
- Week: (course_id, week_number)
- Topic: (week_id, slug)
- Lesson: (topic_id, slug)
- Question: (topic_id, slug)
"""

import uuid
from typing import Any, ClassVar

from sqlalchemy import (
    JSON,
    Boolean,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from curriculum_sync.infrastructure.database.models.base import (
    Base,
    PublishableMixin,
    TimestampMixin,
    UUIDPrimaryKeyMixin,
)


class Course(UUIDPrimaryKeyMixin, TimestampMixin, PublishableMixin, Base):
    """A course, identified by its globally unique slug."""

    __tablename__ = "courses"

    natural_key_scope: ClassVar[str | None] = None
    natural_key_field: ClassVar[str] = "slug"

    slug: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    language: Mapped[str] = mapped_column(String(20), nullable=False, default="java")
    order_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    weeks: Mapped[list["Week"]] = relationship(back_populates="course")

    def __repr__(self) -> str:
        return f"Course(id={self.id!r}, slug={self.slug!r})"


class Week(UUIDPrimaryKeyMixin, TimestampMixin, PublishableMixin, Base):
    """A numbered week within a course."""

    __tablename__ = "weeks"
    __table_args__ = (UniqueConstraint("course_id", "week_number", name="uq_weeks_course_week_number"),)

    natural_key_scope: ClassVar[str | None] = "course_id"
    natural_key_field: ClassVar[str] = "week_number"

    course_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True
    )
    week_number: Mapped[int] = mapped_column(Integer, nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    order_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    course: Mapped[Course] = relationship(back_populates="weeks")
    topics: Mapped[list["Topic"]] = relationship(back_populates="week")

    def __repr__(self) -> str:
        return f"Week(id={self.id!r}, week_number={self.week_number!r})"


class Topic(UUIDPrimaryKeyMixin, TimestampMixin, PublishableMixin, Base):
    """A topic within a week."""

    __tablename__ = "topics"
    __table_args__ = (UniqueConstraint("week_id", "slug", name="uq_topics_week_slug"),)

    natural_key_scope: ClassVar[str | None] = "week_id"
    natural_key_field: ClassVar[str] = "slug"

    week_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("weeks.id", ondelete="CASCADE"), nullable=False, index=True
    )
    slug: Mapped[str] = mapped_column(String(100), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    intro_markdown: Mapped[str | None] = mapped_column(Text, nullable=True)
    order_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    week: Mapped[Week] = relationship(back_populates="topics")
    lessons: Mapped[list["Lesson"]] = relationship(back_populates="topic")
    questions: Mapped[list["Question"]] = relationship(back_populates="topic")

    def __repr__(self) -> str:
        return f"Topic(id={self.id!r}, slug={self.slug!r})"


class Lesson(UUIDPrimaryKeyMixin, TimestampMixin, PublishableMixin, Base):
    """A reading lesson attached to a topic."""

    __tablename__ = "lessons"
    __table_args__ = (UniqueConstraint("topic_id", "slug", name="uq_lessons_topic_slug"),)

    natural_key_scope: ClassVar[str | None] = "topic_id"
    natural_key_field: ClassVar[str] = "slug"

    topic_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("topics.id", ondelete="CASCADE"), nullable=False, index=True
    )
    slug: Mapped[str] = mapped_column(String(100), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    order_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    topic: Mapped[Topic] = relationship(back_populates="lessons")

    def __repr__(self) -> str:
        return f"Lesson(id={self.id!r}, slug={self.slug!r})"


class Question(UUIDPrimaryKeyMixin, TimestampMixin, PublishableMixin, Base):
    """A practice question attached to a topic.

    Test cases, hints and tags are stored as JSON documents.
    """

    __tablename__ = "questions"
    __table_args__ = (UniqueConstraint("topic_id", "slug", name="uq_questions_topic_slug"),)

    natural_key_scope: ClassVar[str | None] = "topic_id"
    natural_key_field: ClassVar[str] = "slug"

    topic_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("topics.id", ondelete="CASCADE"), nullable=False, index=True
    )
    slug: Mapped[str] = mapped_column(String(100), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[str] = mapped_column(String(30), nullable=False)
    prompt: Mapped[str] = mapped_column(Text, nullable=False)
    constraints: Mapped[str | None] = mapped_column(Text, nullable=True)
    difficulty: Mapped[int] = mapped_column(Integer, nullable=False)
    estimated_minutes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    points: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    xp_reward: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    time_limit: Mapped[int] = mapped_column(Integer, nullable=False, default=5000)
    memory_limit: Mapped[int] = mapped_column(Integer, nullable=False, default=256)
    starter_code: Mapped[str] = mapped_column(Text, nullable=False)
    solution_code: Mapped[str] = mapped_column(Text, nullable=False)
    tests: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    hints: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    explanation: Mapped[str | None] = mapped_column(Text, nullable=True)
    tags: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    order_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    topic: Mapped[Topic] = relationship(back_populates="questions")

    def __repr__(self) -> str:
        return f"Question(id={self.id!r}, slug={self.slug!r}, type={self.type!r})"
