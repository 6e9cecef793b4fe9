"""Tests for migration planning."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from conftest import FIXED_NOW, MIGRATIONS_V1, MIGRATIONS_V2, SCHEMA_V2

from schema_spine.core.errors import (
    FileNameMalformedError,
    FileNumberingError,
    MigrationFileMismatchError,
    MigrationFileNoLongerExistsError,
)
from schema_spine.core.result import Err, Ok
from schema_spine.migrations.ledger import ledger_statements
from schema_spine.migrations.models import MigrationRecord, PlanKind
from schema_spine.migrations.reconciler import (
    build_plan,
    match_applied,
    plan_bootstrap,
    plan_incremental,
)
from schema_spine.scripts.models import ScriptRecord, ScriptSet
from schema_spine.scripts.sources import MemoryScriptSource


def script_set(*names: str) -> ScriptSet:
    return ScriptSet(tuple(
        ScriptRecord(name=name, sequence_number=i, body=f"-- {name}")
        for i, name in enumerate(names, start=1)
    ))


def seed_ledger(db, *records: MigrationRecord) -> None:
    statements = ledger_statements(db.dialect_name)
    with db.transaction() as tx:
        tx.run_script(statements.create)
        for record in records:
            tx.execute(statements.insert, record.to_params())


class CountingSource(MemoryScriptSource):
    def __init__(self, scripts):
        super().__init__(scripts)
        self.listed = 0

    def names(self):
        self.listed += 1
        return super().names()


class ExplodingDatabase:
    """Fails the test if the planner touches the database."""

    dialect_name = "sqlite"

    def database_info(self):
        pytest.fail("database consulted")

    def query(self, sql, params=None):
        pytest.fail("database consulted")

    def transaction(self):
        pytest.fail("database consulted")


# ── Pure planning steps ──────────────────────────────────────────────


class TestPlanBootstrap:
    def test_schema_bodies_joined_in_order(self):
        plan = plan_bootstrap(script_set("0001_a.sql", "0002_b.sql"), script_set("0001_m.sql"))
        assert plan.kind is PlanKind.BOOTSTRAP
        assert plan.run_once == "-- 0001_a.sql\n-- 0002_b.sql"

    def test_every_migration_recorded_without_date(self):
        plan = plan_bootstrap(script_set("0001_a.sql"), script_set("0001_m.sql", "0002_n.sql"))
        assert plan.insert_records == (
            MigrationRecord("0001_m.sql", 1, None),
            MigrationRecord("0002_n.sql", 2, None),
        )
        assert plan.scripts == ()

    def test_empty_migration_set(self):
        plan = plan_bootstrap(script_set("0001_a.sql"), script_set())
        assert plan.insert_records == ()


class TestMatchApplied:
    def test_all_matched(self):
        applied = [MigrationRecord("0001_a.sql", 1, None)]
        assert match_applied(script_set("0001_a.sql", "0002_b.sql"), applied) == Ok({1: applied[0]})

    def test_no_longer_exists(self):
        result = match_applied(
            script_set("0001_a.sql", "0002_b.sql"),
            [MigrationRecord("0003_x.sql", 3, None)],
        )
        assert isinstance(result.error, MigrationFileNoLongerExistsError)
        assert result.error.number == 3
        assert result.error.file_name == "0003_x.sql"
        assert result.error.context.script_set == "migrations"

    def test_mismatch(self):
        result = match_applied(script_set("0001_make_users.sql"), [MigrationRecord("0001_create_users.sql", 1, None)])
        assert isinstance(result.error, MigrationFileMismatchError)
        assert result.error.script_name == "0001_make_users.sql"
        assert result.error.recorded_name == "0001_create_users.sql"

    def test_duplicate_ledger_rows(self):
        applied = [MigrationRecord("0001_a.sql", 1, None), MigrationRecord("0001_a.sql", 1, None)]
        result = match_applied(script_set("0001_a.sql"), applied)
        assert isinstance(result.error, MigrationFileNoLongerExistsError)

    def test_lowest_number_reported_first(self):
        applied = [MigrationRecord("0005_x.sql", 5, None), MigrationRecord("0004_y.sql", 4, None)]
        result = match_applied(script_set("0001_a.sql"), applied)
        assert result.error.number == 4


class TestPlanIncremental:
    def test_pending_in_ascending_order(self):
        scripts = script_set("0001_a.sql", "0002_b.sql", "0003_c.sql")
        plan = plan_incremental(scripts, [MigrationRecord("0001_a.sql", 1, None)], FIXED_NOW).unwrap()
        assert plan.kind is PlanKind.INCREMENTAL
        assert [s.name for s in plan.scripts] == ["0002_b.sql", "0003_c.sql"]
        assert [r.number for r in plan.insert_records] == [2, 3]
        assert {r.date_ran for r in plan.insert_records} == {FIXED_NOW}
        assert plan.run_once is None

    def test_noop_when_up_to_date(self):
        scripts = script_set("0001_a.sql")
        plan = plan_incremental(scripts, [MigrationRecord("0001_a.sql", 1, None)], FIXED_NOW).unwrap()
        assert plan.is_noop
        assert plan.insert_records == ()

    def test_drift_propagates(self):
        result = plan_incremental(script_set("0001_b.sql"), [MigrationRecord("0001_a.sql", 1, None)], FIXED_NOW)
        assert isinstance(result, Err)


# ── build_plan ───────────────────────────────────────────────────────


class TestBuildPlan:
    def test_fresh_database_bootstraps(self, db, fixed_clock):
        plan = build_plan(
            db, MemoryScriptSource(SCHEMA_V2), MemoryScriptSource(MIGRATIONS_V2), clock=fixed_clock
        ).unwrap()
        assert plan.kind is PlanKind.BOOTSTRAP
        assert "email TEXT" in plan.run_once
        assert [r.file_name for r in plan.insert_records] == ["0001_create_users.sql", "0002_add_email.sql"]

    def test_existing_ledger_incremental(self, db, fixed_clock):
        seed_ledger(db, MigrationRecord("0001_create_users.sql", 1, None))
        plan = build_plan(
            db, MemoryScriptSource(SCHEMA_V2), MemoryScriptSource(MIGRATIONS_V2), clock=fixed_clock
        ).unwrap()
        assert plan.kind is PlanKind.INCREMENTAL
        assert [s.name for s in plan.scripts] == ["0002_add_email.sql"]
        assert plan.insert_records[0].date_ran == FIXED_NOW

    def test_schema_not_read_on_incremental_path(self, db):
        seed_ledger(db, MigrationRecord("0001_create_users.sql", 1, None))
        schema = CountingSource({"broken": ""})
        plan = build_plan(db, schema, MemoryScriptSource(MIGRATIONS_V1)).unwrap()
        assert plan.is_noop
        assert schema.listed == 0

    def test_malformed_migration_before_db_access(self):
        result = build_plan(
            ExplodingDatabase(),
            MemoryScriptSource(SCHEMA_V2),
            MemoryScriptSource({"init.sql": "CREATE TABLE t (id INTEGER);"}),
        )
        assert isinstance(result.error, FileNameMalformedError)
        assert result.error.context.script_set == "migrations"

    def test_bad_schema_set_on_bootstrap(self, db):
        result = build_plan(db, MemoryScriptSource({"0002_x.sql": ""}), MemoryScriptSource(MIGRATIONS_V1))
        assert isinstance(result.error, FileNumberingError)
        assert result.error.context.script_set == "schema"

    def test_clock_only_used_for_incremental(self, db):
        def clock():
            pytest.fail("clock read on bootstrap")

        plan = build_plan(db, MemoryScriptSource(SCHEMA_V2), MemoryScriptSource(MIGRATIONS_V2), clock=clock)
        assert plan.unwrap().kind is PlanKind.BOOTSTRAP

    def test_drift_is_err(self, db):
        seed_ledger(db, MigrationRecord("0001_create_users.sql", 1, datetime(2024, 1, 1, tzinfo=UTC)))
        result = build_plan(
            db, MemoryScriptSource(SCHEMA_V2), MemoryScriptSource({"0001_make_users.sql": ""})
        )
        assert isinstance(result.error, MigrationFileMismatchError)
