"""SQLAlchemy migration database.

Lets the engine run against any database SQLAlchemy can reach
(PostgreSQL, MySQL, SQLite, ...). Statements go through ``text()`` so the
engine's named ``:param`` binding works on every dialect.

This module provides:

* ``create_migration_engine`` -- Create a SA engine with transactional DDL on SQLite.
* ``SQLAlchemyDatabase``      -- Wraps an ``Engine`` to satisfy the
  ``schema_spine.core.protocols.MigrationDatabase`` protocol.

Tags:
    schema-spine, sqlalchemy, engine, adapter, transaction

Doc-Types:
    api-reference
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from datetime import datetime
from typing import Any

from sqlalchemy import create_engine as _sa_create_engine
from sqlalchemy import event, inspect, text
from sqlalchemy.engine import Connection, Engine

from schema_spine.adapters.statements import split_sql_statements
from schema_spine.core.timestamps import to_iso8601, to_naive_utc


def create_migration_engine(url: str, *, echo: bool = False, **kwargs: Any) -> Engine:
    """Create a SQLAlchemy engine suitable for running migrations.

    pysqlite does not emit ``BEGIN`` before DDL, which would let a failed
    bootstrap leave half a schema behind. For SQLite URLs the driver's own
    transaction handling is switched off and SQLAlchemy emits ``BEGIN``.
    """
    if not url.startswith("sqlite"):
        return _sa_create_engine(url, echo=echo, **kwargs)

    kwargs.setdefault("connect_args", {"check_same_thread": False})
    engine = _sa_create_engine(url, echo=echo, **kwargs)

    @event.listens_for(engine, "connect")
    def _disable_pysqlite_begin(dbapi_connection: Any, _rec: Any) -> None:
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _emit_begin(conn: Connection) -> None:
        conn.exec_driver_sql("BEGIN")

    return engine


class SQLAlchemyTransaction:
    """Statements executed inside a ``SQLAlchemyDatabase.transaction()`` block."""

    def __init__(self, conn: Connection) -> None:
        self._conn = conn
        self._dialect = conn.dialect.name
        self._is_sqlite = self._dialect == "sqlite"

    def run_script(self, sql: str) -> None:
        # pysqlite accepts one statement per call; server databases take the script whole
        if self._is_sqlite:
            for statement in split_sql_statements(sql):
                self._conn.exec_driver_sql(statement)
        elif sql.strip():
            self._conn.exec_driver_sql(sql)

    def execute(self, sql: str, params: Mapping[str, Any] | None = None) -> Any:
        return self._conn.execute(text(sql), self._adapt(params))

    def _adapt(self, params: Mapping[str, Any] | None) -> dict[str, Any]:
        """SQLite stores ISO text, PostgreSQL keeps the zone, others get naive UTC."""
        if not params:
            return {}
        if self._dialect == "postgresql":
            return dict(params)
        convert = to_iso8601 if self._is_sqlite else to_naive_utc
        return {
            key: convert(value) if isinstance(value, datetime) else value
            for key, value in params.items()
        }


class SQLAlchemyDatabase:
    """Adapter that makes a SQLAlchemy ``Engine`` look like a ``MigrationDatabase``.

    Accepts either a database URL or a ready ``Engine``.
    """

    def __init__(self, url_or_engine: str | Engine, **engine_kwargs: Any) -> None:
        if isinstance(url_or_engine, str):
            self._engine = create_migration_engine(url_or_engine, **engine_kwargs)
        else:
            self._engine = url_or_engine

    def database_info(self) -> dict[str, Any]:
        names = inspect(self._engine).get_table_names()
        return {"tables": {name: name for name in names}}

    def query(self, sql: str, params: Mapping[str, Any] | None = None) -> list[dict[str, Any]]:
        with self._engine.connect() as conn:
            result = conn.execute(text(sql), dict(params or {}))
            return [dict(row._mapping) for row in result]

    @contextmanager
    def transaction(self) -> Iterator[SQLAlchemyTransaction]:
        """Commit on clean exit, roll back on exception (``Engine.begin``)."""
        with self._engine.begin() as conn:
            yield SQLAlchemyTransaction(conn)

    @property
    def dialect_name(self) -> str:
        return self._engine.dialect.name

    @property
    def engine(self) -> Engine:
        """Access the underlying SA engine."""
        return self._engine

    def close(self) -> None:
        self._engine.dispose()

    def __repr__(self) -> str:
        return f"SQLAlchemyDatabase({self._engine.url!r})"


__all__ = ["SQLAlchemyDatabase", "SQLAlchemyTransaction", "create_migration_engine"]
