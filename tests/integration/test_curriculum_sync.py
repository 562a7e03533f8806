# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Integration tests for curriculum sync against SQLite."""

import logging

import pytest
from sqlalchemy import func, select

from curriculum_sync.domains.curriculum import (
    CurriculumSyncError,
    CurriculumSyncService,
    normalize_test_case,
)
from curriculum_sync.domains.curriculum.schemas import TestCaseSpec
from curriculum_sync.infrastructure.database import DatabaseError
from curriculum_sync.infrastructure.database.models import (
    Course,
    Lesson,
    Question,
    Topic,
    Week,
)

pytestmark = pytest.mark.integration


async def count_rows(session, model) -> int:
    result = await session.execute(select(func.count()).select_from(model))
    return result.scalar_one()


async def fetch(session, model, **filters):
    result = await session.execute(
        select(model).filter_by(**filters).order_by(model.order_index)
    )
    return result.scalars().all()


@pytest.fixture
def two_week_course(make_course, make_week, make_topic, make_question):
    """Course with two weeks, three topics, a lesson and four questions."""
    return make_course(
        weeks=[
            make_week(
                1,
                topics=[
                    make_topic(
                        "strings",
                        lessons=[{"slug": "intro", "title": "Intro", "content": "Text"}],
                        questions=[make_question("length"), make_question("upper")],
                    ),
                    make_topic("conditionals", questions=[make_question("simple-if")]),
                ],
            ),
            make_week(2, topics=[make_topic("functions", questions=[make_question("square")])]),
        ]
    )


class TestSyncCourse:
    """Tests for a first sync into an empty database."""

    @pytest.mark.asyncio
    async def test_creates_whole_tree(self, db_session, two_week_course):
        result = await CurriculumSyncService(db_session).sync_course(two_week_course)

        assert result.success
        assert result.created == 1 + 2 + 3 + 1 + 4
        assert result.updated == 0
        assert (result.week_count, result.topic_count) == (2, 3)
        assert (result.lesson_count, result.question_count) == (1, 4)
        assert result.duration_seconds is not None
        assert await count_rows(db_session, Question) == 4

    @pytest.mark.asyncio
    async def test_create_defaults(self, db_session, two_week_course):
        await CurriculumSyncService(db_session).sync_course(two_week_course)

        course = (await fetch(db_session, Course, slug="java-weeks-1-5"))[0]
        assert course.order_index == 0
        assert course.is_published is True
        assert course.is_locked is False

        question = (await fetch(db_session, Question, slug="length"))[0]
        assert question.type == "FULL_PROGRAM"
        assert question.is_active is True
        assert question.xp_reward == question.points == 15
        assert question.time_limit == 5000
        assert question.memory_limit == 256
        assert question.tests == [{"input": "", "expectedOutput": "11", "isHidden": False}]


class TestOrdering:
    """Stored order reflects authored order."""

    @pytest.mark.asyncio
    async def test_week_order_follows_week_number(self, db_session, make_course, make_week):
        """Weeks authored out of order still get order_index = week_number - 1."""
        course = make_course(weeks=[make_week(3), make_week(1)])

        await CurriculumSyncService(db_session).sync_course(course)

        weeks = await fetch(db_session, Week)
        assert [(w.week_number, w.order_index) for w in weeks] == [(1, 0), (3, 2)]

    @pytest.mark.asyncio
    async def test_children_indexed_by_position(self, db_session, two_week_course):
        await CurriculumSyncService(db_session).sync_course(two_week_course)

        topics = await fetch(db_session, Topic)
        strings = next(t for t in topics if t.slug == "strings")
        conditionals = next(t for t in topics if t.slug == "conditionals")
        assert (strings.order_index, conditionals.order_index) == (0, 1)

        questions = await fetch(db_session, Question, topic_id=strings.id)
        assert [(q.slug, q.order_index) for q in questions] == [("length", 0), ("upper", 1)]

        lessons = await fetch(db_session, Lesson, topic_id=strings.id)
        assert [(l.slug, l.order_index) for l in lessons] == [("intro", 0)]

    @pytest.mark.asyncio
    async def test_resync_recomputes_order_from_authored_position(
        self, db_session, make_course, make_week, make_topic, make_question
    ):
        """Reversing the authored list reverses order_index on the same rows."""

        def course_with(slugs):
            topic = make_topic("loops", questions=[make_question(slug) for slug in slugs])
            return make_course(weeks=[make_week(1, topics=[topic])])

        service = CurriculumSyncService(db_session)
        await service.sync_course(course_with(["q1", "q2", "q3"]))
        ids_before = {q.slug: q.id for q in await fetch(db_session, Question)}

        result = await service.sync_course(course_with(["q3", "q2", "q1"]))

        questions = await fetch(db_session, Question)
        assert {q.slug: q.order_index for q in questions} == {"q1": 2, "q2": 1, "q3": 0}
        assert {q.slug: q.id for q in questions} == ids_before
        assert await count_rows(db_session, Question) == 3
        assert result.created == 0


class TestIdempotence:
    """Re-running the sync converges on the same rows."""

    @pytest.mark.asyncio
    async def test_second_sync_creates_nothing(self, db_session, two_week_course):
        service = CurriculumSyncService(db_session)
        first = await service.sync_course(two_week_course)
        ids_before = {q.slug: q.id for q in await fetch(db_session, Question)}

        second = await service.sync_course(two_week_course)

        assert second.created == 0
        assert second.updated == first.created
        assert second.course_id == first.course_id
        assert await count_rows(db_session, Week) == 2
        assert await count_rows(db_session, Topic) == 3
        assert await count_rows(db_session, Lesson) == 1
        assert await count_rows(db_session, Question) == 4
        assert {q.slug: q.id for q in await fetch(db_session, Question)} == ids_before

    @pytest.mark.asyncio
    async def test_edit_keeps_identity(
        self, db_session, make_course, make_week, make_topic, make_question
    ):
        """Changing a prompt updates the existing row instead of adding one."""

        def course_with(prompt):
            question = make_question("sum-to-n", prompt=prompt)
            return make_course(
                weeks=[make_week(1, topics=[make_topic("loops", questions=[question])])]
            )

        service = CurriculumSyncService(db_session)
        await service.sync_course(course_with("Sum 1..n"))
        before = (await fetch(db_session, Question, slug="sum-to-n"))[0]
        original_id = before.id

        await service.sync_course(course_with("Sum the numbers 1 through n"))

        after = await fetch(db_session, Question, slug="sum-to-n")
        assert len(after) == 1
        assert after[0].id == original_id
        assert after[0].prompt == "Sum the numbers 1 through n"

    @pytest.mark.asyncio
    async def test_removed_content_is_kept(
        self, db_session, make_course, make_week, make_topic, make_question
    ):
        """Sync is additive: dropping a question from the source leaves the row."""
        full = make_topic("loops", questions=[make_question("a"), make_question("b")])
        trimmed = make_topic("loops", questions=[make_question("a")])
        service = CurriculumSyncService(db_session)

        await service.sync_course(make_course(weeks=[make_week(1, topics=[full])]))
        result = await service.sync_course(make_course(weeks=[make_week(1, topics=[trimmed])]))

        assert result.question_count == 2
        remaining = await fetch(db_session, Question, slug="b")
        assert remaining[0].is_published is True

    @pytest.mark.asyncio
    async def test_lock_survives_and_publish_is_reasserted(self, db_session, two_week_course):
        service = CurriculumSyncService(db_session)
        await service.sync_course(two_week_course)

        week = (await fetch(db_session, Week, week_number=2))[0]
        week.is_locked = True
        question = (await fetch(db_session, Question, slug="square"))[0]
        question.is_published = False
        question.is_active = False
        await db_session.commit()

        await service.sync_course(two_week_course)

        assert (await fetch(db_session, Week, week_number=2))[0].is_locked is True
        question = (await fetch(db_session, Question, slug="square"))[0]
        assert question.is_published is True
        assert question.is_active is True

    @pytest.mark.asyncio
    async def test_same_slug_in_different_topics(
        self, db_session, make_course, make_week, make_topic, make_question
    ):
        """Question slugs are only unique within their topic."""
        course = make_course(
            weeks=[
                make_week(
                    1,
                    topics=[
                        make_topic("a", questions=[make_question("warmup")]),
                        make_topic("b", questions=[make_question("warmup")]),
                    ],
                )
            ]
        )
        service = CurriculumSyncService(db_session)

        await service.sync_course(course)
        await service.sync_course(course)

        assert len(await fetch(db_session, Question, slug="warmup")) == 2


class TestQuestionFields:
    """Tests for question type mapping and field defaults."""

    @pytest.mark.asyncio
    async def test_unmapped_type_falls_back_and_warns(
        self, db_session, make_course, make_week, make_topic, make_question, caplog
    ):
        course = make_course(
            weeks=[
                make_week(
                    1,
                    topics=[make_topic("essays", questions=[make_question("e1", type="ESSAY")])],
                )
            ]
        )

        with caplog.at_level(logging.WARNING, logger="curriculum_sync"):
            result = await CurriculumSyncService(db_session).sync_course(course)

        assert result.unmapped_question_types == ["essays/e1: ESSAY"]
        assert (await fetch(db_session, Question, slug="e1"))[0].type == "FULL_PROGRAM"
        assert any("ESSAY" in r.getMessage() for r in caplog.records)

    @pytest.mark.asyncio
    async def test_explicit_limits_and_xp(
        self, db_session, make_course, make_week, make_topic, make_question
    ):
        question = make_question(
            "tight", type="FUNCTION", xpReward=40, timeLimit=1000, memoryLimit=64
        )
        course = make_course(
            weeks=[make_week(1, topics=[make_topic("limits", questions=[question])])]
        )

        await CurriculumSyncService(db_session).sync_course(course)

        stored = (await fetch(db_session, Question, slug="tight"))[0]
        assert stored.type == "FUNCTION"
        assert (stored.xp_reward, stored.time_limit, stored.memory_limit) == (40, 1000, 64)

    def test_normalize_test_case_keeps_optional_keys(self):
        test = TestCaseSpec.model_validate(
            {"expectedOutput": "ok", "isHidden": True, "timeLimit": 200}
        )

        assert normalize_test_case(test) == {
            "input": "",
            "expectedOutput": "ok",
            "isHidden": True,
            "timeLimit": 200,
        }


class TestStoreFailure:
    """A store error aborts the traversal and keeps earlier rows."""

    @pytest.mark.asyncio
    async def test_failure_keeps_committed_rows(self, db_session, two_week_course, monkeypatch):
        service = CurriculumSyncService(db_session)
        original = service._repo.create_or_update

        async def failing_create_or_update(model, *args, **kwargs):
            if model is Question:
                raise DatabaseError("Failed to create Question")
            return await original(model, *args, **kwargs)

        monkeypatch.setattr(service._repo, "create_or_update", failing_create_or_update)

        with pytest.raises(CurriculumSyncError) as exc_info:
            await service.sync_course(two_week_course)

        partial = exc_info.value.result
        assert partial.success is False
        assert partial.questions_synced == 0
        assert partial.error is not None
        # Course, week 1, topic "strings" and its lesson were committed first
        assert await count_rows(db_session, Course) == 1
        assert await count_rows(db_session, Week) == 1
        assert await count_rows(db_session, Topic) == 1
        assert await count_rows(db_session, Lesson) == 1
        assert await count_rows(db_session, Question) == 0
