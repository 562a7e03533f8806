# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Command line tools.

- sync_curriculum: curriculum-sync
- migrate_plans: migrate-legacy-plans
- db_upgrade: curriculum-db-upgrade
"""
