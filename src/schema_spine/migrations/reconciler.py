"""
Reconciler — decide what must run, never run it.

Architecture:
    ::

        load migration ScriptSet ──► ledger_exists(db)
                                          │
                 ┌────────── False ───────┴────── True ──────────┐
                 ▼                                                ▼
        load schema ScriptSet                      load_applied_migrations(db)
                 │                                                │
        plan_bootstrap()                           match_applied()  ── drift → Err
          run_once = schema bodies                                │
          records  = every migration,              plan_incremental()
                     date_ran=None                   pending → INCREMENTAL
                                                     none    → NOOP

The migration set is validated before the database is consulted. The schema
set is only read on the bootstrap path. Any failure returns ``Err`` and no
plan: the applier never sees a half-built plan.

Tags:
    migrations, reconciliation, drift-detection, planning, schema-spine
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import datetime

from schema_spine.core.errors import MigrationFileMismatchError, MigrationFileNoLongerExistsError
from schema_spine.core.logging import get_logger
from schema_spine.core.protocols import MigrationDatabase, ScriptSource
from schema_spine.core.result import Err, Ok, Result
from schema_spine.core.timestamps import utc_now
from schema_spine.migrations.models import MigrationPlan, MigrationRecord, PlanKind
from schema_spine.migrations.state import ledger_exists, load_applied_migrations
from schema_spine.scripts.loader import load_script_set
from schema_spine.scripts.models import ScriptRecord, ScriptSet

logger = get_logger(__name__)

Clock = Callable[[], datetime]


def plan_bootstrap(schema_scripts: ScriptSet, migration_scripts: ScriptSet) -> MigrationPlan:
    """Plan for a database without a ledger.

    The current schema is created directly; every current migration is
    recorded as already satisfied and its body is not run.
    """
    return MigrationPlan(
        kind=PlanKind.BOOTSTRAP,
        run_once=schema_scripts.joined_body("\n"),
        insert_records=tuple(
            MigrationRecord(file_name=script.name, number=script.sequence_number, date_ran=None)
            for script in migration_scripts
        ),
    )


def match_applied(
    migration_scripts: ScriptSet,
    applied: Iterable[MigrationRecord],
) -> Result[dict[int, MigrationRecord]]:
    """Pair every ledger row with its script by number.

    Returns the matched rows keyed by number, or ``Err`` on the first row
    whose number has no script (``MigrationFileNoLongerExistsError``) or whose
    script carries another name (``MigrationFileMismatchError``). Rows are
    checked in ascending number order.
    """
    unmatched = migration_scripts.by_number()
    matched: dict[int, MigrationRecord] = {}

    for record in sorted(applied, key=lambda r: (r.number, r.file_name)):
        script = unmatched.pop(record.number, None)
        if script is None:
            return Err(
                MigrationFileNoLongerExistsError(record.number, record.file_name)
                .with_context(script_set="migrations")
            )
        if script.name != record.file_name:
            return Err(
                MigrationFileMismatchError(record.number, script.name, record.file_name)
                .with_context(script_set="migrations")
            )
        matched[record.number] = record

    return Ok(matched)


def plan_incremental(
    migration_scripts: ScriptSet,
    applied: Iterable[MigrationRecord],
    now: datetime,
) -> Result[MigrationPlan]:
    """Plan for a database that already has a ledger."""
    match match_applied(migration_scripts, applied):
        case Err() as drift:
            return drift
        case Ok(matched):
            pending: tuple[ScriptRecord, ...] = tuple(
                script for script in migration_scripts if script.sequence_number not in matched
            )

    if not pending:
        return Ok(MigrationPlan(kind=PlanKind.NOOP))

    return Ok(
        MigrationPlan(
            kind=PlanKind.INCREMENTAL,
            scripts=pending,
            insert_records=tuple(
                MigrationRecord(file_name=script.name, number=script.sequence_number, date_ran=now)
                for script in pending
            ),
        )
    )


def build_plan(
    db: MigrationDatabase,
    schema_source: ScriptSource,
    migration_source: ScriptSource,
    *,
    clock: Clock = utc_now,
) -> Result[MigrationPlan]:
    """Read scripts and database state and produce the plan to apply."""
    migrations = load_script_set(migration_source, label="migrations")
    if isinstance(migrations, Err):
        return migrations

    match ledger_exists(db):
        case Err() as err:
            return err
        case Ok(False):
            plan = load_script_set(schema_source, label="schema").map(
                lambda schema: plan_bootstrap(schema, migrations.value)
            )
        case Ok(True):
            plan = load_applied_migrations(db).flat_map(
                lambda applied: plan_incremental(migrations.value, applied, clock())
            )

    match plan:
        case Ok(built):
            logger.info(
                "plan.built",
                kind=built.kind.value,
                scripts=[s.name for s in built.scripts],
                records=len(built.insert_records),
            )
        case Err(error):
            logger.error("plan.failed", **error.to_dict())
    return plan


__all__ = [
    "build_plan",
    "match_applied",
    "plan_bootstrap",
    "plan_incremental",
]
