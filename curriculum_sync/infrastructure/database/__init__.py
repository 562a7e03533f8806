# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Database infrastructure.

This package provides:
- connection: Async engine/session lifecycle and DatabaseError
- repository: Natural-key create-or-update access for curriculum rows
- models: SQLAlchemy ORM models
- migrations: Programmatic schema migration runner

Example:
    from curriculum_sync.infrastructure.database import open_database, get_session

    async with open_database(settings):
        async with get_session() as session:
            repo = NaturalKeyRepository(session)
"""

from curriculum_sync.infrastructure.database.connection import (
    DatabaseError,
    close_database,
    get_engine,
    get_session,
    get_sessionmaker,
    init_database,
    open_database,
)
from curriculum_sync.infrastructure.database.repository import (
    NaturalKeyRepository,
    natural_key,
)

__all__ = [
    # Connection
    "DatabaseError",
    "close_database",
    "get_engine",
    "get_session",
    "get_sessionmaker",
    "init_database",
    "open_database",
    # Repository
    "NaturalKeyRepository",
    "natural_key",
]
