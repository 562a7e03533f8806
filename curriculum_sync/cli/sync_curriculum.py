# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""curriculum-sync: validate the authored course, then sync it.

Reads the course from CURRICULUM_FILE (default: the bundled Java course),
validates the whole tree and stops with exit code 1 if anything is wrong.
Nothing is written to the database unless validation passes.

Usage:
    DATABASE_URL="postgresql://..." curriculum-sync
"""

import asyncio
import sys

from curriculum_sync.core.config import Settings, get_settings
from curriculum_sync.domains.curriculum import (
    CurriculumLoadError,
    CurriculumSyncError,
    CurriculumSyncService,
    SyncResult,
    load_course_file,
    validate_course,
)
from curriculum_sync.infrastructure.database import DatabaseError, get_session, open_database
from curriculum_sync.utils.logging import bind_context, clear_context, get_logger, setup_logging

logger = get_logger(__name__)


def print_validation_errors(errors: list[str]) -> None:
    """Print every validation defect as part of the run report."""
    print("")
    print("Validation failed with errors:")
    for error in errors:
        print(f"   - {error}")
    print("")
    print("Please fix the errors above and try again.")


def print_sync_summary(result: SyncResult) -> None:
    """Print the post-sync counts."""
    print("")
    print("Curriculum sync completed!")
    print(f"   {result.week_count} weeks")
    print(f"   {result.topic_count} topics")
    print(f"   {result.lesson_count} lessons")
    print(f"   {result.question_count} questions")
    print(f"   ({result.created} created, {result.updated} updated)")
    if result.unmapped_question_types:
        print("")
        print("Unmapped question types (stored as FULL_PROGRAM):")
        for entry in result.unmapped_question_types:
            print(f"   - {entry}")
    print("")


async def sync_curriculum(settings: Settings) -> int:
    """Load, validate and sync the configured course.

    Args:
        settings: Application settings.

    Returns:
        Process exit code.
    """
    print("Starting curriculum sync...")
    print("")
    print("Validating curriculum schema...")

    try:
        course = load_course_file(settings.content.file)
    except CurriculumLoadError as e:
        logger.error("Curriculum load failed", path=str(e.path), reason=e.reason)
        print(f"Failed to load curriculum: {e}", file=sys.stderr)
        return 1

    validation = validate_course(
        course, strict_question_types=settings.content.strict_question_types
    )
    if not validation.is_valid:
        logger.error("Curriculum validation failed", errors=len(validation.errors))
        print_validation_errors(validation.errors)
        return 1

    print("Validation passed")
    print("")
    print(f"Syncing course {course.slug}...")

    try:
        async with open_database(settings):
            async with get_session() as session:
                result = await CurriculumSyncService(session).sync_course(course)
    except CurriculumSyncError as e:
        logger.error(
            "Curriculum sync aborted",
            error=str(e),
            created=e.result.created,
            updated=e.result.updated,
        )
        print(f"Sync error: {e}", file=sys.stderr)
        return 1
    except DatabaseError as e:
        logger.error("Database error", error=str(e))
        print(f"Sync error: {e}", file=sys.stderr)
        return 1

    logger.info(
        "Curriculum synced",
        course=course.slug,
        duration_seconds=result.duration_seconds,
    )
    print_sync_summary(result)
    return 0


async def main(settings: Settings | None = None) -> int:
    """Entry point returning the exit code."""
    settings = settings or get_settings()
    setup_logging(settings)
    bind_context(run="curriculum-sync")
    try:
        return await sync_curriculum(settings)
    finally:
        clear_context()


def run() -> None:
    """Console script entry point."""
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
