"""
Persisted-state reader — what the database says has already happened.

Two independent reads:

* ``ledger_exists(db)``           -- is the ``migrations`` relation present?
* ``load_applied_migrations(db)`` -- every ledger row as a ``MigrationRecord``.

Metadata is validated level by level and every malformed shape has its own
error class, so a broken adapter is told apart from a broken ledger::

    None / []                    → SchemaInfoEmptyError
    not a mapping                → SchemaInfoNotAnObjectError(key="")
    no "tables" key              → SchemaInfoMissingKeyError(key="tables")
    "tables" not a mapping       → SchemaInfoNotAnObjectError(key="tables")
    ledger row field wrong type  → SchemaInfoWrongTypeError(key=<field>)

Tags:
    migrations, ledger, introspection, schema-spine
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import UTC, datetime
from typing import Any

from schema_spine.core.errors import (
    DatabaseError,
    SchemaInfoEmptyError,
    SchemaInfoMissingKeyError,
    SchemaInfoNotAnObjectError,
    SchemaInfoWrongTypeError,
)
from schema_spine.core.logging import get_logger
from schema_spine.core.protocols import MigrationDatabase
from schema_spine.core.result import Err, Ok, Result, collect_results, try_result_with
from schema_spine.core.timestamps import from_iso8601
from schema_spine.migrations.ledger import LEDGER_TABLE, ledger_statements
from schema_spine.migrations.models import MigrationRecord

logger = get_logger(__name__)


def _tables_from_info(info: Any) -> Result[Mapping[str, Any]]:
    # Adapters may hand back a result list; the metadata is its first entry
    if isinstance(info, Sequence) and not isinstance(info, (str, bytes)):
        if not info:
            return Err(SchemaInfoEmptyError())
        info = info[0]

    if info is None:
        return Err(SchemaInfoEmptyError())
    if not isinstance(info, Mapping):
        return Err(SchemaInfoNotAnObjectError("", info))
    if "tables" not in info:
        return Err(SchemaInfoMissingKeyError("tables", info))

    tables = info["tables"]
    if not isinstance(tables, Mapping):
        return Err(SchemaInfoNotAnObjectError("tables", info))
    return Ok(tables)


def ledger_exists(db: MigrationDatabase) -> Result[bool]:
    """Whether the ``migrations`` relation exists in ``db``."""
    info = try_result_with(
        db.database_info,
        lambda e: DatabaseError(f"Cannot read database metadata: {e}", cause=e),
    )
    exists = info.flat_map(_tables_from_info).map(lambda tables: LEDGER_TABLE in tables)
    if isinstance(exists, Ok):
        logger.debug("ledger.detected", exists=exists.value)
    return exists


def _field(row: Mapping[str, Any], key: str) -> Result[Any]:
    if key not in row:
        return Err(SchemaInfoMissingKeyError(key, dict(row)))
    return Ok(row[key])


def _as_text(key: str, value: Any) -> Result[str]:
    if not isinstance(value, str):
        return Err(SchemaInfoWrongTypeError(key, "text", value))
    return Ok(value)


def _as_number(key: str, value: Any) -> Result[int]:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        return Err(SchemaInfoWrongTypeError(key, "a non-negative integer", value))
    return Ok(value)


def _as_timestamp(key: str, value: Any) -> Result[datetime | None]:
    # zone-less DATETIME columns hold naive UTC
    if isinstance(value, datetime) and value.tzinfo is None:
        return Ok(value.replace(tzinfo=UTC))
    if value is None or isinstance(value, datetime):
        return Ok(value)
    if isinstance(value, str):
        try:
            return Ok(from_iso8601(value))
        except ValueError:
            pass
    return Err(SchemaInfoWrongTypeError(key, "an optional timestamp", value))


def _record_from_row(row: Mapping[str, Any]) -> Result[MigrationRecord]:
    fields = collect_results([
        _field(row, "fileName").flat_map(lambda v: _as_text("fileName", v)),
        _field(row, "number").flat_map(lambda v: _as_number("number", v)),
        _field(row, "dateRan").flat_map(lambda v: _as_timestamp("dateRan", v)),
    ])
    return fields.map(lambda values: MigrationRecord(*values))


def load_applied_migrations(db: MigrationDatabase) -> Result[list[MigrationRecord]]:
    """Every ledger row, in no particular order."""
    rows = try_result_with(
        lambda: db.query(ledger_statements(db.dialect_name).select),
        lambda e: DatabaseError(f"Cannot read the migrations ledger: {e}", cause=e),
    )
    return rows.flat_map(lambda found: collect_results(_record_from_row(row) for row in found))


__all__ = ["ledger_exists", "load_applied_migrations"]
