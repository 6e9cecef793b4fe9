"""Tests for the sqlite3 MigrationDatabase adapter."""

from __future__ import annotations

import sqlite3
from datetime import UTC, datetime

import pytest

from schema_spine.adapters import _parse_target, open_database
from schema_spine.adapters.sqlite import SqliteDatabase
from schema_spine.core.protocols import MigrationDatabase


class TestSqliteDatabase:
    def test_satisfies_protocol(self, db):
        assert isinstance(db, MigrationDatabase)

    def test_database_info_lists_tables_and_views(self, db):
        with db.transaction() as tx:
            tx.run_script("CREATE TABLE t (id INTEGER); CREATE VIEW v AS SELECT id FROM t;")
        info = db.database_info()
        assert set(info["tables"]) == {"t", "v"}

    def test_empty_database_info(self, db):
        assert db.database_info() == {"tables": {}}

    def test_query_returns_dicts(self, db):
        with db.transaction() as tx:
            tx.run_script("CREATE TABLE t (id INTEGER, name TEXT);")
            tx.execute("INSERT INTO t (id, name) VALUES (:id, :name)", {"id": 1, "name": "a"})
        assert db.query("SELECT id, name FROM t WHERE id = :id", {"id": 1}) == [{"id": 1, "name": "a"}]

    def test_datetime_params_stored_as_iso_text(self, db):
        when = datetime(2025, 1, 15, 12, 30, tzinfo=UTC)
        with db.transaction() as tx:
            tx.run_script("CREATE TABLE t (at TIMESTAMP);")
            tx.execute("INSERT INTO t (at) VALUES (:at)", {"at": when})
        assert db.query("SELECT at FROM t") == [{"at": "2025-01-15T12:30:00+00:00"}]

    def test_commit_on_clean_exit(self, tmp_path):
        path = str(tmp_path / "app.db")
        database = SqliteDatabase(path)
        with database.transaction() as tx:
            tx.run_script("CREATE TABLE t (id INTEGER);")
        database.close()

        reopened = SqliteDatabase(path)
        assert "t" in reopened.database_info()["tables"]
        reopened.close()

    def test_rollback_includes_ddl(self, db):
        with pytest.raises(sqlite3.OperationalError):
            with db.transaction() as tx:
                tx.run_script("CREATE TABLE t (id INTEGER);")
                tx.run_script("CREATE TABLE broken (;")
        assert db.database_info() == {"tables": {}}

    def test_rollback_reraises_foreign_exceptions(self, db):
        with pytest.raises(RuntimeError):
            with db.transaction() as tx:
                tx.run_script("CREATE TABLE t (id INTEGER);")
                raise RuntimeError("stop")
        assert db.database_info() == {"tables": {}}

    def test_rollback_on_keyboard_interrupt(self, db):
        with pytest.raises(KeyboardInterrupt):
            with db.transaction() as tx:
                tx.run_script("CREATE TABLE t (id INTEGER);")
                raise KeyboardInterrupt

        assert db.database_info() == {"tables": {}}
        with db.transaction() as tx:
            tx.run_script("CREATE TABLE u (id INTEGER);")
        assert set(db.database_info()["tables"]) == {"u"}

    def test_adopts_connection(self):
        conn = sqlite3.connect(":memory:")
        database = SqliteDatabase(connection=conn)
        assert conn.isolation_level is None
        assert database.raw is conn
        database.close()


class TestOpenDatabase:
    @pytest.mark.parametrize(
        "target, expected",
        [
            (None, ("memory", ":memory:")),
            ("memory", ("memory", ":memory:")),
            (":memory:", ("memory", ":memory:")),
            ("sqlite://", ("memory", ":memory:")),
            ("sqlite:///data/app.db", ("sqlite", "data/app.db")),
            ("app.db", ("sqlite", "app.db")),
            ("postgresql://u:p@localhost/app", ("url", "postgresql://u:p@localhost/app")),
        ],
    )
    def test_parse_target(self, target, expected):
        assert _parse_target(target) == expected

    def test_memory(self):
        database = open_database()
        assert isinstance(database, SqliteDatabase)
        database.close()

    def test_file_creates_parent(self, tmp_path):
        path = tmp_path / "nested" / "app.db"
        database = open_database(str(path))
        assert isinstance(database, SqliteDatabase)
        assert path.parent.is_dir()
        database.close()

    def test_read_only_missing_file_creates_nothing(self, tmp_path):
        path = tmp_path / "nested" / "app.db"
        database = open_database(str(path), read_only=True)
        assert database.database_info() == {"tables": {}}
        database.close()
        assert not path.parent.exists()

    def test_read_only_existing_file(self, tmp_path):
        path = str(tmp_path / "app.db")
        writer = open_database(path)
        with writer.transaction() as tx:
            tx.run_script("CREATE TABLE t (id INTEGER);")
        writer.close()

        database = open_database(path, read_only=True)
        assert "t" in database.database_info()["tables"]
        with pytest.raises(sqlite3.OperationalError):
            with database.transaction() as tx:
                tx.run_script("CREATE TABLE u (id INTEGER);")
        database.close()

    def test_url_uses_sqlalchemy(self, tmp_path):
        from schema_spine.adapters.sqlalchemy import SQLAlchemyDatabase

        database = open_database(f"sqlite+pysqlite:///{tmp_path / 'app.db'}")
        assert isinstance(database, SQLAlchemyDatabase)
        database.close()
