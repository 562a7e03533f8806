# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""End-to-end tests for the command line tools against SQLite.

Configuration comes from DATABASE_URL and CURRICULUM_FILE, as in production.
"""

from pathlib import Path

import pytest
import yaml
from sqlalchemy import func, select

from curriculum_sync.cli import db_upgrade, migrate_plans, sync_curriculum
from curriculum_sync.domains.entitlement import migration
from curriculum_sync.infrastructure.database.models import Course, Entitlement, Question

pytestmark = pytest.mark.integration


@pytest.fixture
def use_database(monkeypatch, db_url):
    """Point DATABASE_URL at the per-test SQLite file."""
    monkeypatch.setenv("DATABASE_URL", db_url)
    return db_url


@pytest.fixture
def write_course(monkeypatch, tmp_path: Path):
    """Write an authored course to disk and point CURRICULUM_FILE at it."""

    def _write(course: dict) -> Path:
        path = tmp_path / "course.yaml"
        path.write_text(yaml.safe_dump(course), encoding="utf-8")
        monkeypatch.setenv("CURRICULUM_FILE", str(path))
        return path

    return _write


@pytest.fixture
def course_dict(make_week) -> dict:
    return {
        "slug": "java-weeks-1-5",
        "name": "Java Fundamentals",
        "weeks": [make_week(1), make_week(2)],
    }


async def count_rows(session, model) -> int:
    result = await session.execute(select(func.count()).select_from(model))
    return result.scalar_one()


class TestDbUpgradeCli:
    """Tests for curriculum-db-upgrade."""

    @pytest.mark.asyncio
    async def test_upgrade_then_noop(self, use_database, capsys):
        assert await db_upgrade.main() == 0
        assert "Applied 1 migrations: 001_initial_schema" in capsys.readouterr().out

        assert await db_upgrade.main() == 0
        assert "Schema is up to date" in capsys.readouterr().out


class TestSyncCurriculumCli:
    """Tests for curriculum-sync."""

    @pytest.mark.asyncio
    async def test_sync_success(self, use_database, write_course, course_dict, db_session, capsys):
        write_course(course_dict)

        exit_code = await sync_curriculum.main()

        out = capsys.readouterr().out
        assert exit_code == 0
        assert "Validation passed" in out
        assert "2 weeks" in out
        assert "2 questions" in out
        assert await count_rows(db_session, Course) == 1

    @pytest.mark.asyncio
    async def test_bundled_course(self, use_database, capsys):
        """Without CURRICULUM_FILE the packaged course is synced."""
        assert await db_upgrade.main() == 0

        assert await sync_curriculum.main() == 0
        assert "java-weeks-1-5" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_validation_failure_writes_nothing(
        self, use_database, write_course, course_dict, make_topic, make_question, db_session, capsys
    ):
        course_dict["weeks"][1]["topics"] = [
            make_topic("loops", questions=[make_question("sum-to-n", difficulty=6)])
        ]
        course_dict["name"] = ""
        write_course(course_dict)

        exit_code = await sync_curriculum.main()

        captured = capsys.readouterr()
        assert exit_code == 1
        assert "Validation failed with errors:" in captured.out
        assert "   - Course: Missing name" in captured.out
        assert '   - Week 2, Topic "loops", Question "sum-to-n": Difficulty must be 1-5, got 6' in captured.out
        assert "Please fix the errors" not in captured.err
        assert await count_rows(db_session, Course) == 0
        assert await count_rows(db_session, Question) == 0

    @pytest.mark.asyncio
    async def test_strict_mode_from_environment(
        self, use_database, write_course, course_dict, make_topic, make_question, monkeypatch, capsys
    ):
        course_dict["weeks"][0]["topics"] = [
            make_topic("essays", questions=[make_question("e1", type="ESSAY")])
        ]
        write_course(course_dict)
        monkeypatch.setenv("CURRICULUM_STRICT_QUESTION_TYPES", "true")

        assert await sync_curriculum.main() == 1
        assert 'Unknown question type "ESSAY"' in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_missing_file(self, use_database, monkeypatch, tmp_path, capsys):
        monkeypatch.setenv("CURRICULUM_FILE", str(tmp_path / "missing.yaml"))

        assert await sync_curriculum.main() == 1
        assert "File does not exist" in capsys.readouterr().err

    @pytest.mark.asyncio
    async def test_database_error(self, use_database, write_course, course_dict, capsys):
        """Without a schema every write fails and the tool exits 1."""
        write_course(course_dict)

        assert await sync_curriculum.main() == 1
        assert "Sync error:" in capsys.readouterr().err


class TestMigratePlansCli:
    """Tests for migrate-legacy-plans."""

    @pytest.mark.asyncio
    async def test_migration_report(self, use_database, db_engine, seed_entitlements, capsys):
        await seed_entitlements(["ELITE", "PRO", "BASIC", "FREE", "XYZ"])

        exit_code = await migrate_plans.main()

        out = capsys.readouterr().out
        assert exit_code == 0
        assert "ENTITLEMENT PLAN MIGRATION" in out
        assert "  - Already valid (FREE/BASIC/PRO): 3" in out
        assert "WARNING: Unknown plans found:" in out
        assert 'plan="XYZ" -> FREE' in out
        assert "  Migrating user0@example.com: ELITE -> PRO" in out
        assert "  Migrating user4@example.com: XYZ -> FREE" in out
        assert "    - PRO: 2" in out
        assert "Migration completed successfully!" in out

    @pytest.mark.asyncio
    async def test_second_run_has_nothing_to_do(self, use_database, db_engine, seed_entitlements, capsys):
        await seed_entitlements(["ELITE"])
        assert await migrate_plans.main() == 0
        capsys.readouterr()

        assert await migrate_plans.main() == 0
        assert "No migrations needed. All entitlements are valid." in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_invalid_plans_after_migration(
        self, use_database, db_engine, seed_entitlements, db_session, monkeypatch, capsys
    ):
        monkeypatch.setattr(migration, "PLAN_MIGRATION_MAP", {"ELITE": "PLATINUM"})
        await seed_entitlements(["ELITE", "FREE"])

        exit_code = await migrate_plans.main()

        out = capsys.readouterr().out
        assert exit_code == 1
        assert "ERROR: Invalid plans still exist after migration!" in out
        assert "  - PLATINUM: 1" in out
        result = await db_session.execute(
            select(func.count()).select_from(Entitlement).where(Entitlement.plan == "PLATINUM")
        )
        assert result.scalar_one() == 1
