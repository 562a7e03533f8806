# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Entitlement domain: legacy plan migration."""

from curriculum_sync.domains.entitlement.migration import (
    FALLBACK_PLAN,
    PLAN_MIGRATION_MAP,
    VALID_PLANS,
    PlanAction,
    PlanChange,
    PlanMigrationResult,
    PlanMigrationService,
    PlanPostconditionError,
    classify_plan,
    plan_changes,
)

__all__ = [
    "VALID_PLANS",
    "FALLBACK_PLAN",
    "PLAN_MIGRATION_MAP",
    "PlanAction",
    "PlanChange",
    "PlanMigrationResult",
    "PlanMigrationService",
    "PlanPostconditionError",
    "classify_plan",
    "plan_changes",
]
