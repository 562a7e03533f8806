# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""migrate-legacy-plans: move legacy entitlement plans to FREE/BASIC/PRO.

Safe to run repeatedly; a second run performs no updates. Exits 1 if any
non-canonical plan remains afterwards or if the database fails.

Usage:
    DATABASE_URL="postgresql://..." migrate-legacy-plans
"""

import asyncio
import sys

from curriculum_sync.core.config import Settings, get_settings
from curriculum_sync.domains.entitlement import (
    VALID_PLANS,
    PlanMigrationResult,
    PlanMigrationService,
    PlanPostconditionError,
)
from curriculum_sync.infrastructure.database import DatabaseError, get_session, open_database
from curriculum_sync.utils.datetime import format_iso, utc_now
from curriculum_sync.utils.logging import bind_context, clear_context, get_logger, setup_logging

logger = get_logger(__name__)

RULE = "=" * 60


def print_header() -> None:
    print(RULE)
    print("ENTITLEMENT PLAN MIGRATION")
    print(RULE)
    print(f"Started at: {format_iso(utc_now())}")
    print("")


def print_report(result: PlanMigrationResult) -> None:
    """Print analysis, per-record migrations and the final distribution."""
    print(f"Found {result.total} total entitlements")
    print("")

    print("ANALYSIS:")
    print(f"  - Already valid ({'/'.join(VALID_PLANS)}): {result.already_valid}")
    print(f"  - Legacy plan migrations needed: {len(result.legacy)}")
    print(f"  - Unknown plans (-> FREE): {len(result.unknown)}")
    print("")

    if result.unknown:
        print("WARNING: Unknown plans found:")
        for change in result.unknown:
            print(
                f"  - User {change.email} ({change.user_id}): "
                f'plan="{change.current_plan}" -> {change.new_plan}'
            )
        print("")

    pending = result.pending
    if not pending:
        print("No migrations needed. All entitlements are valid.")
    else:
        print(f"MIGRATING {len(pending)} entitlements...")
        print("")
        for change in pending:
            print(f"  Migrating {change.email}: {change.current_plan} -> {change.new_plan}")
        print("")
        print(f"Successfully migrated {result.updated} entitlements")

    print("")
    print("VERIFICATION:")
    print("  Current plan distribution:")
    for plan, count in result.distribution:
        print(f"    - {plan}: {count}")


async def migrate_plans(settings: Settings) -> int:
    """Run the migration and report it.

    Args:
        settings: Application settings.

    Returns:
        Process exit code.
    """
    print_header()

    try:
        async with open_database(settings):
            async with get_session() as session:
                result = await PlanMigrationService(session).run()
    except PlanPostconditionError as e:
        if e.result is not None:
            print_report(e.result)
        print("")
        print("ERROR: Invalid plans still exist after migration!")
        for plan, count in e.invalid_plans:
            print(f"  - {plan}: {count}")
        logger.error("Plan postcondition violated", invalid_plans=e.invalid_plans)
        return 1
    except DatabaseError as e:
        logger.error("Migration failed", error=str(e))
        print(f"Migration failed: {e}", file=sys.stderr)
        return 1

    logger.info(
        "Plans migrated",
        updated=result.updated,
        duration_seconds=result.duration_seconds,
    )
    print_report(result)
    print("")
    print("Migration completed successfully!")
    print(RULE)
    return 0


async def main(settings: Settings | None = None) -> int:
    """Entry point returning the exit code."""
    settings = settings or get_settings()
    setup_logging(settings)
    bind_context(run="migrate-legacy-plans")
    try:
        return await migrate_plans(settings)
    finally:
        clear_context()


def run() -> None:
    """Console script entry point."""
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
