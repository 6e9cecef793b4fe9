"""SQL for the ``migrations`` ledger relation, rendered per dialect.

The ledger is described once as a SQLAlchemy ``Table`` and compiled for the
target database's dialect, so identifier quoting (``"fileName"`` on SQLite
and PostgreSQL, backticks on MySQL) and the ``dateRan`` column type
(``TIMESTAMP WITH TIME ZONE`` on PostgreSQL) follow that dialect. Statements
use named ``:param`` binding.

Examples:
    >>> statements = ledger_statements("postgresql")
    >>> "TIMESTAMP WITH TIME ZONE" in statements.create
    True
    >>> ":fileName" in statements.insert
    True
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

from sqlalchemy import Column, DateTime, Integer, MetaData, Table, Text, insert, select
from sqlalchemy.dialects import registry
from sqlalchemy.schema import CreateTable

LEDGER_TABLE = "migrations"

ledger_table = Table(
    LEDGER_TABLE,
    MetaData(),
    Column("fileName", Text, nullable=False),
    Column("number", Integer, nullable=False),
    Column("dateRan", DateTime(timezone=True)),
)


@dataclass(frozen=True)
class LedgerStatements:
    """Ledger DDL and DML compiled for one dialect."""

    create: str
    select: str
    insert: str


@lru_cache(maxsize=None)
def ledger_statements(dialect_name: str) -> LedgerStatements:
    """Compile the ledger statements for ``dialect_name`` (``"sqlite"``, ``"postgresql"``, ...)."""
    dialect = registry.load(dialect_name)(paramstyle="named")
    columns = ledger_table.c
    return LedgerStatements(
        create=str(CreateTable(ledger_table).compile(dialect=dialect)).strip(),
        select=str(
            select(columns.fileName, columns.number, columns.dateRan).compile(dialect=dialect)
        ),
        insert=str(insert(ledger_table).compile(dialect=dialect)),
    )


__all__ = ["LEDGER_TABLE", "LedgerStatements", "ledger_statements", "ledger_table"]
