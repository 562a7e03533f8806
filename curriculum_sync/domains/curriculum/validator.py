# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Authored curriculum validation.

Validation walks the entire course tree and reports every defect it finds.
Nothing short-circuits: a course-level defect does not stop the weeks from
being checked, and a duplicate week number or topic slug is reported while
the duplicate's own contents are still validated.

Each helper returns its own list of errors and callers concatenate them,
so every rule can be exercised on its own. Error messages carry enough
context (week number, topic slug, question slug) to locate the defect:

    Week 3, Topic "loops", Question "sum-to-n": Difficulty must be 1-5, got 6

Example:
    >>> result = validate_course(course)
    >>> if not result.is_valid:
    ...     for error in result.errors:
    ...         print(error)
"""

from dataclasses import dataclass, field

from curriculum_sync.domains.curriculum.question_types import resolve_question_type
from curriculum_sync.domains.curriculum.schemas import (
    CourseSpec,
    LessonSpec,
    QuestionSpec,
    TopicSpec,
    WeekSpec,
)

MIN_DIFFICULTY = 1
MAX_DIFFICULTY = 5


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating a course.

    Attributes:
        errors: Every defect found, in traversal order.
    """

    errors: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


def _is_blank(value: str | None) -> bool:
    return value is None or value.strip() == ""


def _duplicates(values: list, describe: str, prefix: str) -> list[str]:
    """Report every repeat occurrence of a value, in order."""
    seen = set()
    errors = []
    for value in values:
        if value in seen:
            errors.append(f"{prefix}: Duplicate {describe} {value}")
        seen.add(value)
    return errors


def validate_question(
    question: QuestionSpec,
    topic_slug: str,
    week_number: int,
    strict_question_types: bool = False,
) -> list[str]:
    """Validate a single question.

    Args:
        question: Authored question.
        topic_slug: Slug of the containing topic, for context.
        week_number: Number of the containing week, for context.
        strict_question_types: Report unmapped type tags as errors.

    Returns:
        List of defects, empty if the question is valid.
    """
    prefix = f'Week {week_number}, Topic "{topic_slug}", Question "{question.slug}"'
    errors = []

    if _is_blank(question.slug):
        errors.append(f"{prefix}: Missing slug")
    if _is_blank(question.title):
        errors.append(f"{prefix}: Missing title")
    if _is_blank(question.prompt):
        errors.append(f"{prefix}: Missing prompt")
    if _is_blank(question.starter_code):
        errors.append(f"{prefix}: Missing starterCode")
    if _is_blank(question.solution_code):
        errors.append(f"{prefix}: Missing solutionCode")

    if not question.tests:
        errors.append(f"{prefix}: No test cases defined")
    else:
        for idx, test in enumerate(question.tests):
            if test.expected_output is None:
                errors.append(f"{prefix}: Test {idx} missing expectedOutput")

    if not MIN_DIFFICULTY <= question.difficulty <= MAX_DIFFICULTY:
        errors.append(
            f"{prefix}: Difficulty must be {MIN_DIFFICULTY}-{MAX_DIFFICULTY}, "
            f"got {question.difficulty}"
        )

    if strict_question_types:
        resolution = resolve_question_type(question.type)
        if not resolution.is_mapped:
            errors.append(f'{prefix}: Unknown question type "{resolution.unmapped_tag}"')

    return errors


def validate_lesson(lesson: LessonSpec, topic_slug: str, week_number: int) -> list[str]:
    """Validate a single lesson."""
    prefix = f'Week {week_number}, Topic "{topic_slug}", Lesson "{lesson.slug}"'
    errors = []

    if _is_blank(lesson.slug):
        errors.append(f"{prefix}: Missing slug")
    if _is_blank(lesson.title):
        errors.append(f"{prefix}: Missing title")
    if _is_blank(lesson.content):
        errors.append(f"{prefix}: Missing content")

    return errors


def validate_topic(
    topic: TopicSpec,
    week_number: int,
    strict_question_types: bool = False,
) -> list[str]:
    """Validate a topic and everything below it."""
    prefix = f'Week {week_number}, Topic "{topic.slug}"'
    errors = []

    if _is_blank(topic.slug):
        errors.append(f"{prefix}: Missing slug")
    if _is_blank(topic.title):
        errors.append(f"{prefix}: Missing title")
    if not topic.questions:
        errors.append(f"{prefix}: No questions defined")

    lessons = topic.lessons or ()
    errors.extend(
        _duplicates([f'"{lesson.slug}"' for lesson in lessons], "lesson slug", prefix)
    )
    for lesson in lessons:
        errors.extend(validate_lesson(lesson, topic.slug, week_number))

    errors.extend(
        _duplicates([f'"{q.slug}"' for q in topic.questions], "question slug", prefix)
    )
    for question in topic.questions:
        errors.extend(
            validate_question(question, topic.slug, week_number, strict_question_types)
        )

    return errors


def validate_week(week: WeekSpec, strict_question_types: bool = False) -> list[str]:
    """Validate a week and everything below it.

    Duplicate topic slugs are reported at the position of the repeat, and
    the repeated topic is still validated.
    """
    prefix = f"Week {week.week_number}"
    errors = []

    if _is_blank(week.title):
        errors.append(f"{prefix}: Missing title")
    if not week.topics:
        errors.append(f"{prefix}: No topics defined")

    seen_slugs: set[str] = set()
    for topic in week.topics:
        if topic.slug in seen_slugs:
            errors.append(f'{prefix}: Duplicate topic slug "{topic.slug}"')
        seen_slugs.add(topic.slug)

        errors.extend(validate_topic(topic, week.week_number, strict_question_types))

    return errors


def validate_course(course: CourseSpec, strict_question_types: bool = False) -> ValidationResult:
    """Validate an entire authored course.

    Args:
        course: Authored course tree.
        strict_question_types: Report unmapped question type tags as
            errors instead of leaving them to the FULL_PROGRAM fallback.

    Returns:
        ValidationResult listing every defect found anywhere in the tree.
    """
    errors = []

    if _is_blank(course.slug):
        errors.append("Course: Missing slug")
    if _is_blank(course.name):
        errors.append("Course: Missing name")
    if not course.weeks:
        errors.append("Course: No weeks defined")

    seen_numbers: set[int] = set()
    for week in course.weeks:
        if week.week_number in seen_numbers:
            errors.append(f"Course: Duplicate week number {week.week_number}")
        seen_numbers.add(week.week_number)

        errors.extend(validate_week(week, strict_question_types))

    return ValidationResult(errors=errors)
