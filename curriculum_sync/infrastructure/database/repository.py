# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Natural-key repository over an async SQLAlchemy session.

Curriculum entities are found by business keys (a slug or week number
scoped to the parent row), never by their generated ids. Each model
declares its key through two class attributes:

- natural_key_scope: parent foreign key column, or None for top-level rows
- natural_key_field: business identifier column within that scope

Every write is flushed and committed on its own, so a failure part way
through a batch leaves earlier rows committed.

Example:
    >>> repo = NaturalKeyRepository(session)
    >>> topic, created = await repo.create_or_update(
    ...     Topic, week.id, "string-methods",
    ...     fields={"title": "String Methods", "order_index": 0},
    ...     create_defaults={"is_locked": False},
    ... )
"""

import logging
import uuid
from typing import Any, Sequence, TypeVar

from sqlalchemy import Select, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from curriculum_sync.infrastructure.database.connection import DatabaseError
from curriculum_sync.infrastructure.database.models import (
    Base,
    Course,
    Lesson,
    Question,
    Topic,
    Week,
)
from curriculum_sync.utils.datetime import utc_now

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)


def natural_key(
    model: type[Base], scope_id: uuid.UUID | None, key: Any
) -> dict[str, Any]:
    """Compute the column/value pairs identifying a row by its natural key.

    Args:
        model: Model class declaring natural_key_scope/natural_key_field.
        scope_id: Generated id of the scoping parent (None for top-level).
        key: Business identifier within the scope.

    Returns:
        Mapping of column name to value.

    Raises:
        ValueError: If a scoped model is given no scope id.
    """
    scope_column = getattr(model, "natural_key_scope", None)
    key_column = getattr(model, "natural_key_field")

    if scope_column is None:
        return {key_column: key}
    if scope_id is None:
        raise ValueError(f"{model.__name__} lookups require a {scope_column}")
    return {scope_column: scope_id, key_column: key}


class NaturalKeyRepository:
    """Create-or-update access to rows identified by natural keys.

    Attributes:
        _db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        """Initialize the repository.

        Args:
            db: Async database session.
        """
        self._db = db

    async def find_by_natural_key(
        self, model: type[ModelT], scope_id: uuid.UUID | None, key: Any
    ) -> ModelT | None:
        """Look up an existing row by natural key.

        Raises:
            DatabaseError: If the lookup fails.
        """
        criteria = natural_key(model, scope_id, key)
        stmt = select(model).filter_by(**criteria)
        try:
            result = await self._db.execute(stmt)
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise DatabaseError(f"Failed to look up {model.__name__} {criteria}", e) from e

    async def create(
        self,
        model: type[ModelT],
        scope_id: uuid.UUID | None,
        key: Any,
        fields: dict[str, Any],
    ) -> ModelT:
        """Insert a new row and commit it.

        Raises:
            DatabaseError: If the insert fails.
        """
        row = model(**natural_key(model, scope_id, key), **fields)
        self._db.add(row)
        await self._commit(f"Failed to create {model.__name__} {key!r}")
        return row

    async def update(self, row: ModelT, fields: dict[str, Any]) -> ModelT:
        """Overwrite fields on an existing row and commit it.

        updated_at is always refreshed, even when no value changed.

        Raises:
            DatabaseError: If the update fails.
        """
        for name, value in fields.items():
            setattr(row, name, value)
        row.updated_at = utc_now()
        await self._commit(f"Failed to update {type(row).__name__} {row.id}")
        return row

    async def create_or_update(
        self,
        model: type[ModelT],
        scope_id: uuid.UUID | None,
        key: Any,
        fields: dict[str, Any],
        create_defaults: dict[str, Any] | None = None,
    ) -> tuple[ModelT, bool]:
        """Upsert a row by natural key.

        Args:
            model: Model class.
            scope_id: Generated id of the scoping parent.
            key: Business identifier within the scope.
            fields: Mutable fields, written on both create and update.
            create_defaults: Fields only written when the row is created.

        Returns:
            Tuple of (row, created).

        Raises:
            DatabaseError: If any store operation fails.
        """
        existing = await self.find_by_natural_key(model, scope_id, key)
        if existing is not None:
            return await self.update(existing, fields), False

        row = await self.create(model, scope_id, key, {**(create_defaults or {}), **fields})
        return row, True

    async def count_by_course(self, model: type[Base], course_id: uuid.UUID) -> int:
        """Count rows of a curriculum model reachable from a course.

        Raises:
            DatabaseError: If the count fails.
        """
        stmt = _course_scoped_count(model, course_id)
        try:
            result = await self._db.execute(stmt)
            return int(result.scalar_one())
        except SQLAlchemyError as e:
            raise DatabaseError(f"Failed to count {model.__name__} rows", e) from e

    async def find_all(self, model: type[ModelT], *options: Any) -> Sequence[ModelT]:
        """Read every row of a model in creation order.

        Args:
            model: Model class.
            *options: Loader options, e.g. selectinload(Entitlement.user).

        Raises:
            DatabaseError: If the query fails.
        """
        stmt = select(model).options(*options).order_by(model.created_at, model.id)
        try:
            result = await self._db.execute(stmt)
            return result.scalars().all()
        except SQLAlchemyError as e:
            raise DatabaseError("Failed to read rows", e) from e

    async def group_by_field(self, model: type[Base], field: str) -> list[tuple[Any, int]]:
        """Count rows per distinct value of a column.

        Returns:
            List of (value, count) ordered by value.

        Raises:
            DatabaseError: If the aggregate read fails.
        """
        column = getattr(model, field)
        stmt = select(column, func.count()).group_by(column).order_by(column)
        try:
            result = await self._db.execute(stmt)
            return [(value, int(count)) for value, count in result.all()]
        except SQLAlchemyError as e:
            raise DatabaseError(f"Failed to group {model.__name__} by {field}", e) from e

    async def _commit(self, message: str) -> None:
        try:
            await self._db.flush()
            await self._db.commit()
        except SQLAlchemyError as e:
            await self._db.rollback()
            logger.error("%s: %s", message, e)
            raise DatabaseError(message, e) from e


def _course_scoped_count(model: type[Base], course_id: uuid.UUID) -> Select:
    """Build a COUNT query for a model joined up to its course."""
    stmt = select(func.count()).select_from(model)

    if model is Week:
        return stmt.where(Week.course_id == course_id)
    if model is Topic:
        return stmt.join(Week, Topic.week_id == Week.id).where(Week.course_id == course_id)
    if model in (Lesson, Question):
        return (
            stmt.join(Topic, model.topic_id == Topic.id)
            .join(Week, Topic.week_id == Week.id)
            .where(Week.course_id == course_id)
        )
    if model is Course:
        return stmt.where(Course.id == course_id)

    raise ValueError(f"{model.__name__} is not part of the curriculum hierarchy")
