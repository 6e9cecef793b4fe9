"""Ledger records, plans and outcomes of the migration engine."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from schema_spine.scripts.models import ScriptRecord


@dataclass(frozen=True, slots=True)
class MigrationRecord:
    """One row of the ``migrations`` ledger.

    ``date_ran`` is ``None`` for migrations recorded as already satisfied at
    bootstrap. Rows are written once and never updated.
    """

    file_name: str
    number: int
    date_ran: datetime | None = None

    def to_params(self) -> dict[str, Any]:
        """Named parameters for the ledger INSERT."""
        return {"fileName": self.file_name, "number": self.number, "dateRan": self.date_ran}


class PlanKind(str, Enum):
    """What a plan does to the database."""

    BOOTSTRAP = "BOOTSTRAP"      # Fresh database: schema + ledger, migrations recorded
    INCREMENTAL = "INCREMENTAL"  # Ledger present: run pending migrations
    NOOP = "NOOP"                # Ledger present, nothing pending


@dataclass(frozen=True)
class MigrationPlan:
    """Everything the applier must execute as one transaction.

    Attributes:
        kind: Bootstrap, incremental or no-op.
        run_once: Concatenated schema bodies (bootstrap only).
        scripts: Migration scripts whose bodies run, ascending (incremental only).
        insert_records: Ledger rows to insert, one per migration script.
    """

    kind: PlanKind
    run_once: str | None = None
    scripts: tuple[ScriptRecord, ...] = ()
    insert_records: tuple[MigrationRecord, ...] = ()

    @property
    def is_noop(self) -> bool:
        return self.kind is PlanKind.NOOP

    @property
    def run_migration_bodies(self) -> tuple[str, ...]:
        return tuple(script.body for script in self.scripts)

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "runs_schema": self.run_once is not None,
            "scripts": [script.name for script in self.scripts],
            "records": [
                {"file_name": r.file_name, "number": r.number, "date_ran": r.date_ran}
                for r in self.insert_records
            ],
        }


@dataclass(frozen=True)
class ApplyOutcome:
    """What ``apply_plan`` did.

    ``executed`` names the migration scripts whose bodies ran; ``recorded``
    names the ledger rows inserted.
    """

    kind: PlanKind
    executed: tuple[str, ...] = ()
    recorded: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "executed": list(self.executed),
            "recorded": list(self.recorded),
        }


@dataclass(frozen=True)
class ScriptStatus:
    name: str
    number: int
    applied: bool
    date_ran: datetime | None = None


@dataclass(frozen=True)
class MigrationStatus:
    """Ledger state against the current migration script set."""

    ledger_exists: bool
    scripts: tuple[ScriptStatus, ...] = ()

    @property
    def pending(self) -> list[ScriptStatus]:
        return [s for s in self.scripts if not s.applied]

    @property
    def applied(self) -> list[ScriptStatus]:
        return [s for s in self.scripts if s.applied]


__all__ = [
    "MigrationRecord",
    "PlanKind",
    "MigrationPlan",
    "ApplyOutcome",
    "ScriptStatus",
    "MigrationStatus",
]
