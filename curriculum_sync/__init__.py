# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Curriculum synchronization and legacy plan migration.

This package reconciles an authored course catalog (course, weeks, topics,
lessons and practice questions) into the application database, and runs the
one-time migration of legacy entitlement plan values.

Subpackages:
- core: Settings and configuration loading
- domains: Curriculum validation/sync and entitlement migration
- infrastructure: Database connection, models, repository and schema migrations
- cli: Command line entry points
- utils: Logging and datetime helpers
"""

__version__ = "0.1.0"
