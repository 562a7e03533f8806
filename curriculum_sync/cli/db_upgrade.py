# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""curriculum-db-upgrade: apply pending schema migrations.

Usage:
    DATABASE_URL="postgresql://..." curriculum-db-upgrade
"""

import asyncio
import sys

from curriculum_sync.core.config import Settings, get_settings
from curriculum_sync.infrastructure.database.migrations.runner import (
    MigrationError,
    run_migrations,
)
from curriculum_sync.utils.logging import get_logger, setup_logging

logger = get_logger(__name__)


async def main(settings: Settings | None = None) -> int:
    """Apply every pending migration and return the exit code."""
    settings = settings or get_settings()
    setup_logging(settings)

    try:
        applied = await run_migrations(settings.database.async_url)
    except MigrationError as e:
        logger.error("Schema upgrade failed", error=str(e))
        print(f"Schema upgrade failed: {e}", file=sys.stderr)
        return 1

    if applied:
        print(f"Applied {len(applied)} migrations: {', '.join(applied)}")
    else:
        print("Schema is up to date")
    return 0


def run() -> None:
    """Console script entry point."""
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
