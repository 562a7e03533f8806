# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Initial curriculum and entitlement schema.

Revision ID: 001_initial_schema
Revises: None
Create Date: 2025-01-15
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
    ]


def _flags() -> list[sa.Column]:
    return [
        sa.Column("is_published", sa.Boolean, nullable=False, server_default=sa.text("true")),
        sa.Column("is_locked", sa.Boolean, nullable=False, server_default=sa.text("false")),
    ]


def upgrade() -> None:
    """Create curriculum and entitlement tables."""
    # =========================================================================
    # CURRICULUM
    # =========================================================================

    op.create_table(
        "courses",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column("slug", sa.String(100), nullable=False, unique=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("language", sa.String(20), nullable=False, server_default="java"),
        sa.Column("order_index", sa.Integer, nullable=False, server_default="0"),
        *_flags(),
        *_timestamps(),
    )

    op.create_table(
        "weeks",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column("course_id", sa.Uuid, sa.ForeignKey("courses.id", ondelete="CASCADE"), nullable=False),
        sa.Column("week_number", sa.Integer, nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("order_index", sa.Integer, nullable=False, server_default="0"),
        *_flags(),
        *_timestamps(),
        sa.UniqueConstraint("course_id", "week_number", name="uq_weeks_course_week_number"),
    )
    op.create_index("ix_weeks_course_id", "weeks", ["course_id"])

    op.create_table(
        "topics",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column("week_id", sa.Uuid, sa.ForeignKey("weeks.id", ondelete="CASCADE"), nullable=False),
        sa.Column("slug", sa.String(100), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("intro_markdown", sa.Text, nullable=True),
        sa.Column("order_index", sa.Integer, nullable=False, server_default="0"),
        *_flags(),
        *_timestamps(),
        sa.UniqueConstraint("week_id", "slug", name="uq_topics_week_slug"),
    )
    op.create_index("ix_topics_week_id", "topics", ["week_id"])

    op.create_table(
        "lessons",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column("topic_id", sa.Uuid, sa.ForeignKey("topics.id", ondelete="CASCADE"), nullable=False),
        sa.Column("slug", sa.String(100), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("content", sa.Text, nullable=False),
        sa.Column("order_index", sa.Integer, nullable=False, server_default="0"),
        *_flags(),
        *_timestamps(),
        sa.UniqueConstraint("topic_id", "slug", name="uq_lessons_topic_slug"),
    )
    op.create_index("ix_lessons_topic_id", "lessons", ["topic_id"])

    op.create_table(
        "questions",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column("topic_id", sa.Uuid, sa.ForeignKey("topics.id", ondelete="CASCADE"), nullable=False),
        sa.Column("slug", sa.String(100), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("type", sa.String(30), nullable=False),
        sa.Column("prompt", sa.Text, nullable=False),
        sa.Column("constraints", sa.Text, nullable=True),
        sa.Column("difficulty", sa.Integer, nullable=False),
        sa.Column("estimated_minutes", sa.Integer, nullable=False, server_default="0"),
        sa.Column("points", sa.Integer, nullable=False, server_default="0"),
        sa.Column("xp_reward", sa.Integer, nullable=False, server_default="0"),
        sa.Column("time_limit", sa.Integer, nullable=False, server_default="5000"),
        sa.Column("memory_limit", sa.Integer, nullable=False, server_default="256"),
        sa.Column("starter_code", sa.Text, nullable=False),
        sa.Column("solution_code", sa.Text, nullable=False),
        sa.Column("tests", sa.JSON, nullable=False),
        sa.Column("hints", sa.JSON, nullable=False),
        sa.Column("explanation", sa.Text, nullable=True),
        sa.Column("tags", sa.JSON, nullable=False),
        sa.Column("order_index", sa.Integer, nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.text("true")),
        *_flags(),
        *_timestamps(),
        sa.UniqueConstraint("topic_id", "slug", name="uq_questions_topic_slug"),
    )
    op.create_index("ix_questions_topic_id", "questions", ["topic_id"])

    # =========================================================================
    # USERS & ENTITLEMENTS
    # =========================================================================

    op.create_table(
        "users",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("name", sa.String(255), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "entitlements",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column("user_id", sa.Uuid, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True),
        sa.Column("plan", sa.String(32), nullable=False, server_default="FREE"),
        sa.Column("status", sa.String(32), nullable=False, server_default="ACTIVE"),
        sa.Column("granted_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_entitlements_plan", "entitlements", ["plan"])


def downgrade() -> None:
    """Drop all tables."""
    op.drop_index("ix_entitlements_plan", table_name="entitlements")
    op.drop_table("entitlements")
    op.drop_table("users")
    op.drop_index("ix_questions_topic_id", table_name="questions")
    op.drop_table("questions")
    op.drop_index("ix_lessons_topic_id", table_name="lessons")
    op.drop_table("lessons")
    op.drop_index("ix_topics_week_id", table_name="topics")
    op.drop_table("topics")
    op.drop_index("ix_weeks_course_id", table_name="weeks")
    op.drop_table("weeks")
    op.drop_table("courses")
