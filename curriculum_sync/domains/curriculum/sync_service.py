# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Curriculum sync service.

This module reconciles an authored course tree into the database.

The sync process:
1. Upsert the course by slug
2. Upsert each week by (course, week number)
3. Upsert each topic by (week, slug)
4. Upsert each topic's lessons and questions by (topic, slug)
5. Re-read the row counts reachable from the course

Traversal is strictly parent-before-child because every child lookup is
scoped by its parent's generated id. Writes are issued one at a time and
committed individually; a store failure aborts the rest of the traversal
and leaves already committed rows in place.

Sync is additive: rows whose natural key no longer appears in the authored
tree are left untouched (still published).

The course must already have passed validate_course().

Example:
    >>> sync = CurriculumSyncService(db)
    >>> result = await sync.sync_course(course)
    >>> result.question_count
    42
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from curriculum_sync.domains.curriculum.question_types import resolve_question_type
from curriculum_sync.domains.curriculum.schemas import (
    CourseSpec,
    LessonSpec,
    QuestionSpec,
    TestCaseSpec,
    TopicSpec,
    WeekSpec,
)
from curriculum_sync.infrastructure.database.connection import DatabaseError
from curriculum_sync.infrastructure.database.models import (
    Course,
    Lesson,
    Question,
    Topic,
    Week,
)
from curriculum_sync.infrastructure.database.repository import NaturalKeyRepository
from curriculum_sync.utils.datetime import elapsed_seconds, utc_now

logger = logging.getLogger(__name__)

DEFAULT_TIME_LIMIT_MS = 5000
DEFAULT_MEMORY_LIMIT_MB = 256

# Only written when a row is first created
CREATE_DEFAULTS: dict[str, Any] = {"is_locked": False}


@dataclass
class SyncResult:
    """Result of a sync run.

    Attributes:
        success: Whether sync completed successfully.
        course_id: Generated id of the synced course.
        course_slug: Natural key of the synced course.
        weeks_synced: Number of weeks upserted this run.
        topics_synced: Number of topics upserted this run.
        lessons_synced: Number of lessons upserted this run.
        questions_synced: Number of questions upserted this run.
        created: Rows created this run.
        updated: Rows updated this run.
        unmapped_question_types: "topic/question: TAG" for every question
            whose type tag fell back to FULL_PROGRAM.
        week_count: Weeks associated with the course after the run.
        topic_count: Topics reachable from the course after the run.
        lesson_count: Lessons reachable from the course after the run.
        question_count: Questions reachable from the course after the run.
        error: Error message if sync failed.
        started_at: When sync started.
        completed_at: When sync completed.
    """

    success: bool
    course_id: uuid.UUID | None = None
    course_slug: str | None = None
    weeks_synced: int = 0
    topics_synced: int = 0
    lessons_synced: int = 0
    questions_synced: int = 0
    created: int = 0
    updated: int = 0
    unmapped_question_types: list[str] = field(default_factory=list)
    week_count: int = 0
    topic_count: int = 0
    lesson_count: int = 0
    question_count: int = 0
    error: str | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None

    @property
    def duration_seconds(self) -> float | None:
        """Get sync duration in seconds."""
        return elapsed_seconds(self.started_at, self.completed_at)


class CurriculumSyncError(Exception):
    """Exception raised when curriculum sync fails.

    Attributes:
        result: Partial SyncResult at the point of failure.
    """

    def __init__(self, message: str, result: SyncResult) -> None:
        super().__init__(message)
        self.result = result


def normalize_test_case(test: TestCaseSpec) -> dict[str, Any]:
    """Convert an authored test case to its stored JSON form.

    input defaults to "" and isHidden to False; unset optional keys are
    omitted.
    """
    stored: dict[str, Any] = {
        "input": test.input or "",
        "expectedOutput": test.expected_output,
        "isHidden": bool(test.is_hidden),
    }
    optional = {
        "description": test.description,
        "timeLimit": test.time_limit,
        "memoryLimit": test.memory_limit,
    }
    stored.update({key: value for key, value in optional.items() if value is not None})
    return stored


class CurriculumSyncService:
    """Service for syncing an authored course into the database.

    Attributes:
        _db: Async database session.
        _repo: Natural-key repository bound to the session.
    """

    def __init__(self, db: AsyncSession) -> None:
        """Initialize the sync service.

        Args:
            db: Async database session.
        """
        self._db = db
        self._repo = NaturalKeyRepository(db)

    async def sync_course(self, course: CourseSpec) -> SyncResult:
        """Sync a course and all its children.

        Args:
            course: Validated authored course.

        Returns:
            SyncResult with counts and status.

        Raises:
            CurriculumSyncError: If any store operation fails. Rows written
                before the failure stay committed.
        """
        result = SyncResult(success=False, course_slug=course.slug, started_at=utc_now())

        try:
            db_course = await self._upsert_course(course, result)
            result.course_id = db_course.id

            for week in course.weeks:
                db_week = await self._upsert_week(db_course.id, week, result)
                result.weeks_synced += 1

                for topic_index, topic in enumerate(week.topics):
                    db_topic = await self._upsert_topic(db_week.id, topic_index, topic, result)
                    result.topics_synced += 1

                    for lesson_index, lesson in enumerate(topic.lessons or ()):
                        await self._upsert_lesson(db_topic.id, lesson_index, lesson, result)
                        result.lessons_synced += 1

                    for question_index, question in enumerate(topic.questions):
                        await self._upsert_question(
                            db_topic.id, question_index, question, topic.slug, result
                        )
                        result.questions_synced += 1

            await self._verify(db_course.id, result)

            result.success = True
            result.completed_at = utc_now()

            logger.info(
                "Curriculum sync completed: %s - weeks=%d, topics=%d, lessons=%d, "
                "questions=%d, created=%d, updated=%d",
                course.slug,
                result.weeks_synced,
                result.topics_synced,
                result.lessons_synced,
                result.questions_synced,
                result.created,
                result.updated,
            )

            return result

        except DatabaseError as e:
            result.error = str(e)
            result.completed_at = utc_now()
            logger.error("Curriculum sync failed: %s - %s", course.slug, str(e))
            raise CurriculumSyncError(f"Sync failed for {course.slug}: {e}", result) from e

    # =========================================================================
    # Upsert Methods
    # =========================================================================

    async def _upsert_course(self, course: CourseSpec, result: SyncResult) -> Course:
        """Upsert a course by slug."""
        db_course, created = await self._repo.create_or_update(
            Course,
            None,
            course.slug,
            fields={
                "name": course.name,
                "description": course.description,
                "language": course.language,
                "is_published": True,
            },
            create_defaults={**CREATE_DEFAULTS, "order_index": 0},
        )
        self._tally(result, created)
        return db_course

    async def _upsert_week(
        self, course_id: uuid.UUID, week: WeekSpec, result: SyncResult
    ) -> Week:
        """Upsert a week by (course, week number).

        Week order follows the week number, not the authored position.
        """
        db_week, created = await self._repo.create_or_update(
            Week,
            course_id,
            week.week_number,
            fields={
                "title": week.title,
                "description": week.description,
                "order_index": week.week_number - 1,
                "is_published": True,
            },
            create_defaults=CREATE_DEFAULTS,
        )
        self._tally(result, created)
        return db_week

    async def _upsert_topic(
        self, week_id: uuid.UUID, index: int, topic: TopicSpec, result: SyncResult
    ) -> Topic:
        """Upsert a topic by (week, slug)."""
        db_topic, created = await self._repo.create_or_update(
            Topic,
            week_id,
            topic.slug,
            fields={
                "title": topic.title,
                "description": topic.description,
                "intro_markdown": topic.intro_markdown,
                "order_index": index,
                "is_published": True,
            },
            create_defaults=CREATE_DEFAULTS,
        )
        self._tally(result, created)
        return db_topic

    async def _upsert_lesson(
        self, topic_id: uuid.UUID, index: int, lesson: LessonSpec, result: SyncResult
    ) -> Lesson:
        """Upsert a lesson by (topic, slug)."""
        db_lesson, created = await self._repo.create_or_update(
            Lesson,
            topic_id,
            lesson.slug,
            fields={
                "title": lesson.title,
                "content": lesson.content,
                "order_index": index,
                "is_published": True,
            },
            create_defaults=CREATE_DEFAULTS,
        )
        self._tally(result, created)
        return db_lesson

    async def _upsert_question(
        self,
        topic_id: uuid.UUID,
        index: int,
        question: QuestionSpec,
        topic_slug: str,
        result: SyncResult,
    ) -> Question:
        """Upsert a question by (topic, slug)."""
        resolution = resolve_question_type(question.type)
        if not resolution.is_mapped:
            logger.warning(
                "Unmapped question type %r for %s/%s, storing as %s",
                resolution.unmapped_tag,
                topic_slug,
                question.slug,
                resolution.question_type.value,
            )
            result.unmapped_question_types.append(
                f"{topic_slug}/{question.slug}: {resolution.unmapped_tag}"
            )

        db_question, created = await self._repo.create_or_update(
            Question,
            topic_id,
            question.slug,
            fields={
                "title": question.title,
                "type": resolution.question_type.value,
                "prompt": question.prompt,
                "constraints": question.constraints or None,
                "difficulty": question.difficulty,
                "estimated_minutes": question.estimated_minutes,
                "points": question.points,
                "xp_reward": question.xp_reward or question.points,
                "time_limit": question.time_limit or DEFAULT_TIME_LIMIT_MS,
                "memory_limit": question.memory_limit or DEFAULT_MEMORY_LIMIT_MB,
                "starter_code": question.starter_code,
                "solution_code": question.solution_code,
                "tests": [normalize_test_case(test) for test in question.tests],
                "hints": list(question.hints),
                "explanation": question.explanation or None,
                "tags": list(question.tags),
                "order_index": index,
                "is_active": True,
                "is_published": True,
            },
            create_defaults=CREATE_DEFAULTS,
        )
        self._tally(result, created)
        return db_question

    # =========================================================================
    # Verification
    # =========================================================================

    async def _verify(self, course_id: uuid.UUID, result: SyncResult) -> None:
        """Record the row counts now reachable from the course."""
        result.week_count = await self._repo.count_by_course(Week, course_id)
        result.topic_count = await self._repo.count_by_course(Topic, course_id)
        result.lesson_count = await self._repo.count_by_course(Lesson, course_id)
        result.question_count = await self._repo.count_by_course(Question, course_id)

    @staticmethod
    def _tally(result: SyncResult, created: bool) -> None:
        if created:
            result.created += 1
        else:
            result.updated += 1
