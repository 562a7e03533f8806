# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Curriculum domain services.

This package provides:
- schemas: Immutable authored content models (CourseSpec and children)
- loader: Load authored content from YAML/JSON files
- validator: Aggregating validation of the authored tree
- question_types: Authored type tag to QuestionType mapping
- CurriculumSyncService: Idempotent natural-key sync into the database
"""

from curriculum_sync.domains.curriculum.loader import (
    CurriculumLoadError,
    load_course_file,
    parse_course,
)
from curriculum_sync.domains.curriculum.question_types import (
    QUESTION_TYPE_MAP,
    QuestionType,
    QuestionTypeResolution,
    resolve_question_type,
)
from curriculum_sync.domains.curriculum.schemas import (
    CourseSpec,
    LessonSpec,
    QuestionSpec,
    TestCaseSpec,
    TopicSpec,
    WeekSpec,
)
from curriculum_sync.domains.curriculum.sync_service import (
    CurriculumSyncError,
    CurriculumSyncService,
    SyncResult,
    normalize_test_case,
)
from curriculum_sync.domains.curriculum.validator import (
    ValidationResult,
    validate_course,
)

__all__ = [
    # Schemas
    "CourseSpec",
    "WeekSpec",
    "TopicSpec",
    "LessonSpec",
    "QuestionSpec",
    "TestCaseSpec",
    # Loading
    "CurriculumLoadError",
    "load_course_file",
    "parse_course",
    # Validation
    "ValidationResult",
    "validate_course",
    # Question types
    "QuestionType",
    "QuestionTypeResolution",
    "QUESTION_TYPE_MAP",
    "resolve_question_type",
    # Sync
    "CurriculumSyncService",
    "CurriculumSyncError",
    "SyncResult",
    "normalize_test_case",
]
