"""Tests for applying plans transactionally."""

from __future__ import annotations

from contextlib import contextmanager

from conftest import FIXED_NOW, ledger_rows, table_names

from schema_spine.core.errors import DatabaseError
from schema_spine.core.result import Err, Ok
from schema_spine.migrations.applier import apply_plan
from schema_spine.migrations.models import ApplyOutcome, MigrationPlan, MigrationRecord, PlanKind
from schema_spine.scripts.models import ScriptRecord


class RecordingDatabase:
    """Counts transactions; refuses to do anything else."""

    dialect_name = "sqlite"

    def __init__(self):
        self.transactions = 0

    def database_info(self):
        return {"tables": {}}

    def query(self, sql, params=None):
        return []

    @contextmanager
    def transaction(self):
        self.transactions += 1
        yield None


def bootstrap_plan(run_once: str, *names: str) -> MigrationPlan:
    return MigrationPlan(
        kind=PlanKind.BOOTSTRAP,
        run_once=run_once,
        insert_records=tuple(MigrationRecord(name, i, None) for i, name in enumerate(names, start=1)),
    )


def incremental_plan(*scripts: tuple[int, str, str]) -> MigrationPlan:
    records = tuple(ScriptRecord(name, number, body) for number, name, body in scripts)
    return MigrationPlan(
        kind=PlanKind.INCREMENTAL,
        scripts=records,
        insert_records=tuple(MigrationRecord(s.name, s.sequence_number, FIXED_NOW) for s in records),
    )


class TestNoop:
    def test_no_transaction_opened(self):
        database = RecordingDatabase()
        result = apply_plan(database, MigrationPlan(kind=PlanKind.NOOP))
        assert result == Ok(ApplyOutcome(kind=PlanKind.NOOP))
        assert database.transactions == 0


class TestBootstrap:
    def test_schema_and_ledger_created(self, db):
        plan = bootstrap_plan(
            "CREATE TABLE users (id INTEGER);\nCREATE TABLE posts (id INTEGER);",
            "0001_create_users.sql",
            "0002_add_posts.sql",
        )
        outcome = apply_plan(db, plan).unwrap()

        assert outcome.kind is PlanKind.BOOTSTRAP
        assert outcome.executed == ()
        assert outcome.recorded == ("0001_create_users.sql", "0002_add_posts.sql")
        assert {"users", "posts", "migrations"} <= table_names(db)
        assert ledger_rows(db) == [
            {"fileName": "0001_create_users.sql", "number": 1, "dateRan": None},
            {"fileName": "0002_add_posts.sql", "number": 2, "dateRan": None},
        ]

    def test_failure_leaves_nothing(self, db):
        plan = bootstrap_plan("CREATE TABLE users (id INTEGER);\nCREATE TABLE broken (;", "0001_a.sql")
        result = apply_plan(db, plan)

        assert isinstance(result, Err)
        assert isinstance(result.error, DatabaseError)
        assert result.error.context.metadata == {"plan": "BOOTSTRAP", "step": "schema"}
        assert table_names(db) == set()

    def test_empty_schema_still_creates_ledger(self, db):
        apply_plan(db, bootstrap_plan("", "0001_a.sql")).unwrap()
        assert table_names(db) == {"migrations"}


class TestIncremental:
    def test_bodies_run_in_order_and_recorded(self, db):
        with db.transaction() as tx:
            tx.run_script("CREATE TABLE log (step INTEGER);")
            tx.run_script('CREATE TABLE migrations ("fileName" TEXT NOT NULL, "number" INTEGER NOT NULL, "dateRan" TIMESTAMP);')

        plan = incremental_plan(
            (2, "0002_first.sql", "INSERT INTO log (step) VALUES (2);"),
            (3, "0003_second.sql", "INSERT INTO log (step) VALUES (3);"),
        )
        outcome = apply_plan(db, plan).unwrap()

        assert outcome.executed == ("0002_first.sql", "0003_second.sql")
        assert db.query("SELECT step FROM log ORDER BY rowid") == [{"step": 2}, {"step": 3}]
        assert [row["dateRan"] for row in ledger_rows(db)] == [FIXED_NOW.isoformat()] * 2

    def test_failure_rolls_back_earlier_scripts(self, db):
        with db.transaction() as tx:
            tx.run_script("CREATE TABLE log (step INTEGER);")
            tx.run_script('CREATE TABLE migrations ("fileName" TEXT NOT NULL, "number" INTEGER NOT NULL, "dateRan" TIMESTAMP);')

        plan = incremental_plan(
            (1, "0001_ok.sql", "INSERT INTO log (step) VALUES (1);"),
            (2, "0002_bad.sql", "INSERT INTO nowhere (step) VALUES (2);"),
        )
        result = apply_plan(db, plan)

        assert isinstance(result.error, DatabaseError)
        assert result.error.context.metadata["step"] == "0002_bad.sql"
        assert "0002_bad.sql" in result.error.message
        assert db.query("SELECT step FROM log") == []
        assert ledger_rows(db) == []
