# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pytest configuration and shared fixtures.

This module provides fixtures used across all test types:
- Builders for authored course trees (plain dicts, camelCase keys as
  written in content files)
- Settings isolation
"""

from collections.abc import Callable, Iterator
from typing import Any

import pytest

from curriculum_sync.core.config import clear_settings_cache
from curriculum_sync.domains.curriculum import CourseSpec


# =============================================================================
# Marker Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test (uses a SQLite database)"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )


# =============================================================================
# Environment Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Keep cached settings and configuration env vars from leaking between tests."""
    for name in (
        "DATABASE_URL",
        "DATABASE_ECHO",
        "CURRICULUM_FILE",
        "CURRICULUM_STRICT_QUESTION_TYPES",
        "ENVIRONMENT",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    clear_settings_cache()
    yield
    clear_settings_cache()


# =============================================================================
# Authored Content Builders
# =============================================================================


@pytest.fixture
def make_question() -> Callable[..., dict[str, Any]]:
    """Build a valid authored question; keyword arguments override fields."""

    def _make(slug: str = "string-length", **overrides: Any) -> dict[str, Any]:
        question = {
            "slug": slug,
            "type": "CODE",
            "title": f"Question {slug}",
            "prompt": "Print the length of the string.",
            "difficulty": 1,
            "estimatedMinutes": 3,
            "points": 15,
            "starterCode": "public class Solution {}",
            "solutionCode": "public class Solution { /* solved */ }",
            "tests": [{"input": "", "expectedOutput": "11", "isHidden": False}],
            "hints": ["Use length()"],
            "tags": ["strings"],
        }
        question.update(overrides)
        return question

    return _make


@pytest.fixture
def make_topic(make_question) -> Callable[..., dict[str, Any]]:
    """Build a valid authored topic with one question by default."""

    def _make(slug: str = "string-methods", **overrides: Any) -> dict[str, Any]:
        topic = {
            "slug": slug,
            "title": f"Topic {slug}",
            "description": "Working with strings",
            "questions": [make_question(f"{slug}-q1")],
        }
        topic.update(overrides)
        return topic

    return _make


@pytest.fixture
def make_week(make_topic) -> Callable[..., dict[str, Any]]:
    """Build a valid authored week with one topic by default."""

    def _make(week_number: int = 1, **overrides: Any) -> dict[str, Any]:
        week = {
            "weekNumber": week_number,
            "title": f"Week {week_number}",
            "description": "Weekly material",
            "topics": [make_topic(f"topic-w{week_number}")],
        }
        week.update(overrides)
        return week

    return _make


@pytest.fixture
def make_course(make_week) -> Callable[..., CourseSpec]:
    """Build a validated-shape CourseSpec; keyword arguments override fields."""

    def _make(**overrides: Any) -> CourseSpec:
        course = {
            "slug": "java-weeks-1-5",
            "name": "Java Fundamentals",
            "description": "Java basics",
            "language": "java",
            "weeks": [make_week(1), make_week(2)],
        }
        course.update(overrides)
        return CourseSpec.model_validate(course)

    return _make
