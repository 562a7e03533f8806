# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pytest fixtures for database integration tests.

Each test gets its own SQLite database file with every table created.
"""

from datetime import timedelta
from pathlib import Path
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from curriculum_sync.infrastructure.database.models import Base, Entitlement, User
from curriculum_sync.utils.datetime import utc_now


@pytest.fixture
def db_url(tmp_path: Path) -> str:
    """Async URL of a per-test SQLite database file."""
    return f"sqlite+aiosqlite:///{tmp_path / 'test.db'}"


@pytest_asyncio.fixture(scope="function")
async def db_engine(db_url: str):
    """Create async engine with all tables."""
    engine = create_async_engine(db_url, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create async session for database tests."""
    async_session = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def seed_entitlements(db_session: AsyncSession):
    """Insert one user and entitlement per plan, in the given order."""

    async def _seed(plans: list[str]) -> list[Entitlement]:
        entitlements = []
        created = utc_now()
        for index, plan in enumerate(plans):
            user = User(email=f"user{index}@example.com", name=f"User {index}")
            entitlement = Entitlement(
                user=user, plan=plan, created_at=created + timedelta(seconds=index)
            )
            db_session.add_all([user, entitlement])
            await db_session.flush()
            entitlements.append(entitlement)
        await db_session.commit()
        return entitlements

    return _seed
