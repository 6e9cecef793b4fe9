"""
Shared pytest fixtures and configuration for schema-spine tests.

This module provides:
- In-memory SQLite migration databases
- Script directory builders writing ``.sql`` files under ``tmp_path``
- A fixed clock for deterministic ``dateRan`` values

Usage:
    Fixtures are auto-discovered by pytest::

        def test_bootstrap(db, write_scripts):
            schema = write_scripts("schema", {"0001_init.sql": "CREATE TABLE t (id INTEGER);"})
            ...
"""

import sys
import textwrap
from collections.abc import Callable, Generator
from datetime import UTC, datetime
from pathlib import Path

import pytest

# Ensure schema_spine package is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from schema_spine.adapters.sqlite import SqliteDatabase


FIXED_NOW = datetime(2025, 1, 15, 12, 30, tzinfo=UTC)


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Mark every test without an explicit marker as a unit test."""
    for item in items:
        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture()
def db() -> Generator[SqliteDatabase, None, None]:
    """In-memory SQLite migration database."""
    database = SqliteDatabase(":memory:")
    yield database
    database.close()


@pytest.fixture()
def fixed_clock() -> Callable[[], datetime]:
    """Clock that always returns ``FIXED_NOW``."""
    return lambda: FIXED_NOW


def table_names(db: SqliteDatabase) -> set[str]:
    """Tables currently present in ``db``."""
    rows = db.query("SELECT name FROM sqlite_master WHERE type = 'table'")
    return {row["name"] for row in rows}


def ledger_rows(db: SqliteDatabase) -> list[dict]:
    """Ledger rows ordered by number."""
    return db.query('SELECT "fileName", "number", "dateRan" FROM migrations ORDER BY "number"')


# =============================================================================
# Script Fixtures
# =============================================================================


@pytest.fixture()
def write_scripts(tmp_path: Path) -> Callable[[str, dict[str, str]], Path]:
    """Factory writing ``{name: body}`` into ``tmp_path / <dirname>``."""

    def _write(dirname: str, scripts: dict[str, str]) -> Path:
        directory = tmp_path / dirname
        directory.mkdir(exist_ok=True)
        for name, body in scripts.items():
            (directory / name).write_text(textwrap.dedent(body), encoding="utf-8")
        return directory

    return _write


SCHEMA_V1 = {
    "0001_init.sql": """\
        CREATE TABLE users (
            id INTEGER PRIMARY KEY,
            name TEXT NOT NULL
        );
    """,
}

SCHEMA_V2 = {
    "0001_init.sql": """\
        CREATE TABLE users (
            id INTEGER PRIMARY KEY,
            name TEXT NOT NULL,
            email TEXT
        );
    """,
}

MIGRATIONS_V1 = {
    "0001_create_users.sql": """\
        CREATE TABLE users (
            id INTEGER PRIMARY KEY,
            name TEXT NOT NULL
        );
    """,
}

MIGRATIONS_V2 = {
    **MIGRATIONS_V1,
    "0002_add_email.sql": """\
        ALTER TABLE users ADD COLUMN email TEXT;
    """,
}
