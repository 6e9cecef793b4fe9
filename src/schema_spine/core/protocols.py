"""
Canonical protocol definitions for schema-spine.

The engine never imports a database driver or touches the filesystem
directly. It talks to two collaborators through the structural protocols
defined here; anything with the right shape works.

Architecture:
    ::

        protocols.py (YOU ARE HERE)
        ├── TransactionConnection — statements inside one open transaction
        ├── MigrationDatabase     — metadata, queries, transaction boundary
        └── ScriptSource          — named raw script blobs

    Implementations:
        adapters/sqlite.py      → SqliteDatabase
        adapters/sqlalchemy.py  → SQLAlchemyDatabase
        scripts/sources.py      → DirectoryScriptSource, MemoryScriptSource,
                                  PackageScriptSource

Guardrails:
    ❌ DON'T: Commit or roll back from inside a ``TransactionConnection``
    ✅ DO: Let the ``transaction()`` context manager own the boundary

    ❌ DON'T: Add implementation logic to protocol classes
    ✅ DO: Keep protocols pure contracts — implementations go in adapters

Tags:
    protocol, connection, transaction, script-source, schema-spine, contracts

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from contextlib import AbstractContextManager
from typing import Any, Protocol, runtime_checkable

# ---------------------------------------------------------------------------
# Database Protocols
# ---------------------------------------------------------------------------


@runtime_checkable
class TransactionConnection(Protocol):
    """
    Statement execution inside an already-open transaction.

    Architecture:
        ::

            ┌────────────────────────────────────────────────────────┐
            │ run_script(sql)        → Run a multi-statement script  │
            │ execute(sql, params)   → Run one statement, named      │
            │                          ``:param`` binding            │
            └────────────────────────────────────────────────────────┘
    """

    def run_script(self, sql: str) -> None:
        """Execute every statement of ``sql`` in order."""
        ...

    def execute(self, sql: str, params: Mapping[str, Any] | None = None) -> Any:
        """Execute one statement with named parameters."""
        ...


@runtime_checkable
class MigrationDatabase(Protocol):
    """
    Database handle consumed by the migration engine.

    ``database_info()`` returns raw metadata the engine validates itself. The
    expected shape is ``{"tables": {<relation name>: <definition>, ...}}``;
    adapters must not massage malformed metadata into that shape.

    ``transaction()`` opens one transaction: it commits when the block exits
    cleanly and rolls back (then re-raises) when the block raises.

    ``dialect_name`` names the SQL dialect (``"sqlite"``, ``"postgresql"``,
    ``"mysql"``, ...) the ledger statements are compiled for.

    Examples:
        >>> with db.transaction() as tx:
        ...     tx.run_script("CREATE TABLE users (id INTEGER);")
        ...     tx.execute("INSERT INTO users (id) VALUES (:id)", {"id": 1})
    """

    dialect_name: str

    def database_info(self) -> Any:
        """Return database-level metadata (relations present)."""
        ...

    def query(self, sql: str, params: Mapping[str, Any] | None = None) -> list[dict[str, Any]]:
        """Run a read query and return rows as dicts."""
        ...

    def transaction(self) -> AbstractContextManager[TransactionConnection]:
        """Open an all-or-nothing transaction."""
        ...


# ---------------------------------------------------------------------------
# Script Source Protocol
# ---------------------------------------------------------------------------


@runtime_checkable
class ScriptSource(Protocol):
    """
    A named collection of raw script blobs.

    Plays the part of a build-time embedded resource folder: it lists names
    and hands out bytes. Order of ``names()`` is irrelevant; the loader sorts.
    """

    def names(self) -> Iterable[str]:
        """Names of every script in the collection."""
        ...

    def read(self, name: str) -> bytes | None:
        """Raw bytes of ``name``, or ``None`` when it cannot be retrieved."""
        ...
