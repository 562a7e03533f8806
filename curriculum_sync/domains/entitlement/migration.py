# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Legacy entitlement plan migration.

Reclassifies every entitlement's plan against a fixed mapping table so that
only the canonical plans remain:

    ELITE   -> PRO
    PRO     -> PRO   (no change)
    BASIC   -> BASIC (no change)
    FREE    -> FREE  (no change)
    unknown -> FREE  (logged with the user's identity)

Only rows whose target plan differs from the stored value are written, so
running the migration again performs no updates. After all writes the plan
distribution is re-read; any value outside the canonical set means the
mapping table itself is wrong and raises PlanPostconditionError.

Example:
    >>> service = PlanMigrationService(db)
    >>> result = await service.run()
    >>> result.updated
    3
"""

import logging
import uuid
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from curriculum_sync.infrastructure.database.models import Entitlement
from curriculum_sync.infrastructure.database.repository import NaturalKeyRepository
from curriculum_sync.utils.datetime import elapsed_seconds, utc_now

logger = logging.getLogger(__name__)

VALID_PLANS: tuple[str, ...] = ("FREE", "BASIC", "PRO")

FALLBACK_PLAN = "FREE"

PLAN_MIGRATION_MAP: dict[str, str] = {
    "ELITE": "PRO",
    "PRO": "PRO",
    "BASIC": "BASIC",
    "FREE": "FREE",
}


class PlanAction(str, Enum):
    """How a stored plan value is treated."""

    KEEP = "KEEP"
    LEGACY = "LEGACY"
    UNKNOWN = "UNKNOWN"


@dataclass(frozen=True)
class PlanChange:
    """Classification of one entitlement.

    Attributes:
        entitlement_id: Entitlement row id.
        user_id: Owning user id.
        email: Owning user's email, "unknown" if the user is missing.
        current_plan: Plan value as stored.
        new_plan: Plan value after migration.
        action: Which rule applied.
    """

    entitlement_id: uuid.UUID
    user_id: uuid.UUID
    email: str
    current_plan: str | None
    new_plan: str
    action: PlanAction

    @property
    def needs_update(self) -> bool:
        return self.new_plan != self.current_plan


@dataclass
class PlanMigrationResult:
    """Outcome of a migration run.

    Attributes:
        total: Entitlements read.
        already_valid: Entitlements already holding a canonical plan.
        changes: Classification of every non-canonical entitlement, in
            input order.
        updated: Rows actually written.
        distribution: (plan, count) pairs re-read after the writes.
        started_at: When the run started.
        completed_at: When the run completed.
    """

    total: int = 0
    already_valid: int = 0
    changes: list[PlanChange] = field(default_factory=list)
    updated: int = 0
    distribution: list[tuple[str, int]] = field(default_factory=list)
    started_at: datetime | None = None
    completed_at: datetime | None = None

    @property
    def legacy(self) -> list[PlanChange]:
        return [c for c in self.changes if c.action is PlanAction.LEGACY]

    @property
    def unknown(self) -> list[PlanChange]:
        return [c for c in self.changes if c.action is PlanAction.UNKNOWN]

    @property
    def pending(self) -> list[PlanChange]:
        return [c for c in self.changes if c.needs_update]

    @property
    def duration_seconds(self) -> float | None:
        return elapsed_seconds(self.started_at, self.completed_at)

    @property
    def invalid_plans(self) -> list[tuple[str, int]]:
        return [(plan, count) for plan, count in self.distribution if plan not in VALID_PLANS]


class PlanPostconditionError(Exception):
    """Raised when non-canonical plans remain after migration.

    This signals a defect in the mapping table, not in the data.

    Attributes:
        invalid_plans: (plan, count) pairs outside the canonical set.
        result: The completed migration result.
    """

    def __init__(
        self,
        invalid_plans: list[tuple[str, int]],
        result: PlanMigrationResult | None = None,
    ) -> None:
        self.invalid_plans = invalid_plans
        self.result = result
        summary = ", ".join(f"{plan}={count}" for plan, count in invalid_plans)
        super().__init__(f"Invalid plans still exist after migration: {summary}")


def classify_plan(
    plan: str | None, mapping: Mapping[str, str] = PLAN_MIGRATION_MAP
) -> tuple[PlanAction, str]:
    """Classify a stored plan value.

    Args:
        plan: Stored plan value (may be None for damaged rows).
        mapping: Legacy plan mapping table.

    Returns:
        Tuple of (action, target plan).
    """
    if plan in VALID_PLANS:
        return PlanAction.KEEP, plan
    mapped = mapping.get(plan) if plan is not None else None
    if mapped:
        return PlanAction.LEGACY, mapped
    return PlanAction.UNKNOWN, FALLBACK_PLAN


def plan_changes(
    entitlements: Iterable[Entitlement], mapping: Mapping[str, str] = PLAN_MIGRATION_MAP
) -> list[PlanChange]:
    """Classify every entitlement that does not already hold a canonical plan.

    Input order is preserved.
    """
    changes = []
    for entitlement in entitlements:
        action, new_plan = classify_plan(entitlement.plan, mapping)
        if action is PlanAction.KEEP:
            continue
        user = entitlement.user
        changes.append(
            PlanChange(
                entitlement_id=entitlement.id,
                user_id=entitlement.user_id,
                email=user.email if user is not None else "unknown",
                current_plan=entitlement.plan,
                new_plan=new_plan,
                action=action,
            )
        )
    return changes


class PlanMigrationService:
    """Migrates legacy entitlement plans to the canonical set.

    Attributes:
        _db: Async database session.
        _repo: Repository used for reads, writes and the distribution query.
        _mapping: Legacy plan mapping table.
    """

    def __init__(
        self, db: AsyncSession, mapping: Mapping[str, str] | None = None
    ) -> None:
        """Initialize the migration service.

        Args:
            db: Async database session.
            mapping: Legacy plan mapping table. Defaults to PLAN_MIGRATION_MAP.
        """
        self._db = db
        self._repo = NaturalKeyRepository(db)
        self._mapping = PLAN_MIGRATION_MAP if mapping is None else mapping

    async def run(self) -> PlanMigrationResult:
        """Classify, update and verify every entitlement.

        Returns:
            PlanMigrationResult describing what changed.

        Raises:
            DatabaseError: If any read or write fails.
            PlanPostconditionError: If non-canonical plans remain.
        """
        result = PlanMigrationResult(started_at=utc_now())

        entitlements = await self._repo.find_all(Entitlement, selectinload(Entitlement.user))
        by_id = {entitlement.id: entitlement for entitlement in entitlements}

        result.total = len(entitlements)
        result.changes = plan_changes(entitlements, self._mapping)
        result.already_valid = result.total - len(result.changes)

        for change in result.unknown:
            logger.warning(
                "Unknown plan %r for user %s (%s), migrating to %s",
                change.current_plan,
                change.email,
                change.user_id,
                change.new_plan,
            )

        for change in result.pending:
            logger.info(
                "Migrating %s: %s -> %s", change.email, change.current_plan, change.new_plan
            )
            await self._repo.update(by_id[change.entitlement_id], {"plan": change.new_plan})
            result.updated += 1

        result.distribution = await self.verify()
        result.completed_at = utc_now()

        invalid = result.invalid_plans
        if invalid:
            logger.error("Invalid plans still exist after migration: %s", invalid)
            raise PlanPostconditionError(invalid, result)

        logger.info(
            "Plan migration completed: total=%d, already_valid=%d, updated=%d",
            result.total,
            result.already_valid,
            result.updated,
        )
        return result

    async def verify(self) -> list[tuple[str, int]]:
        """Re-read the plan distribution.

        Returns:
            (plan, count) pairs ordered by plan.

        Raises:
            DatabaseError: If the aggregate read fails.
        """
        return await self._repo.group_by_field(Entitlement, "plan")
