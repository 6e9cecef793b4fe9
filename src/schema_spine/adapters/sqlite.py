"""SQLite migration database.

Wraps a :class:`sqlite3.Connection` to satisfy the
:class:`~schema_spine.core.protocols.MigrationDatabase` protocol.

The connection runs with ``isolation_level=None`` so this adapter owns the
transaction boundary: ``transaction()`` issues ``BEGIN`` itself and every
script statement executes inside it. SQLite DDL is transactional, so a
failed bootstrap leaves neither schema objects nor a ledger behind.

Usage::

    from schema_spine.adapters.sqlite import SqliteDatabase

    db = SqliteDatabase("app.db")
    with db.transaction() as tx:
        tx.run_script("CREATE TABLE t (id INTEGER); CREATE INDEX t_id ON t (id);")
        tx.execute("INSERT INTO t (id) VALUES (:id)", {"id": 1})
    db.close()
"""

from __future__ import annotations

import sqlite3
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any

from schema_spine.adapters.statements import split_sql_statements
from schema_spine.core.timestamps import to_iso8601


def _adapt_params(params: Mapping[str, Any] | None) -> dict[str, Any]:
    """Store datetimes as ISO 8601 text."""
    if not params:
        return {}
    return {
        key: to_iso8601(value) if isinstance(value, datetime) else value
        for key, value in params.items()
    }


class SqliteTransaction:
    """Statements executed inside a ``SqliteDatabase.transaction()`` block."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def run_script(self, sql: str) -> None:
        for statement in split_sql_statements(sql):
            self._conn.execute(statement)

    def execute(self, sql: str, params: Mapping[str, Any] | None = None) -> Any:
        return self._conn.execute(sql, _adapt_params(params))


class SqliteDatabase:
    """``sqlite3`` adapter → ``MigrationDatabase`` protocol.

    Parameters
    ----------
    path
        Database file path or ``":memory:"``.
    connection
        An existing ``sqlite3.Connection`` to adopt instead of opening
        ``path``. Its ``isolation_level`` is switched to ``None``.
    timeout
        Seconds to wait on a locked database.
    read_only
        Open an existing file with ``mode=ro``; the file is never created.
    """

    dialect_name = "sqlite"

    def __init__(
        self,
        path: str = ":memory:",
        *,
        connection: sqlite3.Connection | None = None,
        timeout: float = 5.0,
        read_only: bool = False,
    ) -> None:
        if connection is None and read_only:
            uri = f"{Path(path).resolve().as_uri()}?mode=ro"
            connection = sqlite3.connect(uri, uri=True, timeout=timeout, check_same_thread=False)
        elif connection is None:
            connection = sqlite3.connect(path, timeout=timeout, check_same_thread=False)
        connection.isolation_level = None
        self._conn = connection
        self._path = path

    # -- MigrationDatabase protocol ----------------------------------------

    def database_info(self) -> dict[str, Any]:
        rows = self.query(
            "SELECT name, sql FROM sqlite_master WHERE type IN ('table', 'view')"
        )
        return {"tables": {row["name"]: row["sql"] for row in rows}}

    def query(self, sql: str, params: Mapping[str, Any] | None = None) -> list[dict[str, Any]]:
        cursor = self._conn.cursor()
        cursor.row_factory = sqlite3.Row
        try:
            cursor.execute(sql, _adapt_params(params))
            return [dict(row) for row in cursor.fetchall()]
        finally:
            cursor.close()

    @contextmanager
    def transaction(self) -> Iterator[SqliteTransaction]:
        """Transaction context manager."""
        self._conn.execute("BEGIN")
        try:
            yield SqliteTransaction(self._conn)
        except BaseException:
            self._conn.rollback()
            raise
        self._conn.commit()

    # -- convenience -------------------------------------------------------

    @property
    def raw(self) -> sqlite3.Connection:
        """Access the underlying ``sqlite3.Connection``."""
        return self._conn

    def close(self) -> None:
        self._conn.close()

    def __repr__(self) -> str:
        return f"SqliteDatabase({self._path!r})"


__all__ = ["SqliteDatabase", "SqliteTransaction"]
