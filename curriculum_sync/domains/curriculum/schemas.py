# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Authored curriculum schemas.

This module defines the immutable Pydantic models for authored content:
- CourseSpec: Top-level course with ordered weeks
- WeekSpec: Numbered week with ordered topics
- TopicSpec: Topic with optional lessons and ordered questions
- LessonSpec: Reading lesson
- QuestionSpec: Practice question with test cases
- TestCaseSpec: Single input/expected output pair

Field names accept both the authored camelCase form (weekNumber,
starterCode, expectedOutput) and snake_case.

Parsing only enforces structure. Value defects such as empty slugs,
an out-of-range difficulty, a missing expectedOutput or a null title are
accepted here
and reported by the validator, so a single run lists every defect.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel

_SPEC_CONFIG = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    frozen=True,
    extra="ignore",
    coerce_numbers_to_str=True,
)


class _AuthoredModel(BaseModel):
    """Base for authored content models.

    An empty YAML value (`title:`) loads as null. Null takes the field's
    default, so a blank title reaches the validator as "" and is reported
    as missing alongside every other defect.
    """

    model_config = _SPEC_CONFIG

    @field_validator("*", mode="before")
    @classmethod
    def _null_as_default(cls, value: Any, info: ValidationInfo) -> Any:
        if value is not None:
            return value
        field = cls.model_fields[info.field_name]
        if field.is_required():
            return value
        return field.get_default(call_default_factory=True)


class TestCaseSpec(_AuthoredModel):
    """A single test case for a question."""

    __test__ = False  # not a pytest test class

    input: str = ""
    expected_output: str | None = Field(
        default=None,
        description="Required; left optional so the validator can report it",
    )
    is_hidden: bool = False
    description: str | None = None
    time_limit: int | None = None
    memory_limit: int | None = None


class QuestionSpec(_AuthoredModel):
    """An authored practice question."""

    slug: str = ""
    type: str = "FULL_PROGRAM"
    title: str = ""
    prompt: str = ""
    constraints: str | None = None
    starter_code: str = ""
    solution_code: str = ""
    tests: tuple[TestCaseSpec, ...] = ()
    hints: tuple[str, ...] = ()
    explanation: str | None = None
    tags: tuple[str, ...] = ()
    difficulty: int
    estimated_minutes: int = 0
    points: int = 0
    xp_reward: int | None = None
    time_limit: int | None = None
    memory_limit: int | None = None


class LessonSpec(_AuthoredModel):
    """An authored reading lesson."""

    slug: str = ""
    title: str = ""
    content: str = ""


class TopicSpec(_AuthoredModel):
    """An authored topic."""

    slug: str = ""
    title: str = ""
    description: str = ""
    intro_markdown: str | None = None
    lessons: tuple[LessonSpec, ...] | None = None
    questions: tuple[QuestionSpec, ...] = ()


class WeekSpec(_AuthoredModel):
    """An authored week."""

    week_number: int
    title: str = ""
    description: str = ""
    topics: tuple[TopicSpec, ...] = ()


class CourseSpec(_AuthoredModel):
    """An authored course, the root of the content tree."""

    slug: str = ""
    name: str = ""
    description: str = ""
    language: str = "java"
    weeks: tuple[WeekSpec, ...] = ()
