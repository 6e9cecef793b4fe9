"""
Migration engine — the public entry point.

``reconcile_and_apply`` is meant to run on every process startup, before the
application touches the database. It is idempotent: once a database is up to
date, further calls return a ``NOOP`` outcome without opening a transaction.

Examples:
    Gating startup on the migration result::

        from schema_spine import reconcile_and_apply, open_database
        from schema_spine.core.result import Err

        db = open_database("app.db")
        result = reconcile_and_apply("db/schema", "db/migrations", db)
        if isinstance(result, Err):
            raise SystemExit(str(result.error))

    Object form, with a dry run first::

        engine = MigrationEngine(db, "db/schema", "db/migrations")
        print(engine.plan().unwrap().to_dict())
        engine.run().unwrap()

Guardrails:
    ❌ DON'T: Run two reconciliations against one database concurrently
    ✅ DO: Run it once per startup and halt on ``Err``

Tags:
    migrations, engine, startup, idempotent, schema-spine

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import asyncio

from schema_spine.core.protocols import MigrationDatabase
from schema_spine.core.result import Err, Ok, Result
from schema_spine.core.timestamps import utc_now
from schema_spine.migrations.applier import apply_plan
from schema_spine.migrations.models import ApplyOutcome, MigrationPlan, MigrationStatus, ScriptStatus
from schema_spine.migrations.reconciler import Clock, build_plan, match_applied
from schema_spine.migrations.state import ledger_exists, load_applied_migrations
from schema_spine.scripts.loader import load_script_set
from schema_spine.scripts.sources import ScriptsLike, as_script_source


def reconcile_and_apply(
    schema_scripts: ScriptsLike,
    migration_scripts: ScriptsLike,
    db: MigrationDatabase,
    *,
    clock: Clock = utc_now,
) -> Result[ApplyOutcome]:
    """Bring ``db`` up to date with the two script collections.

    Args:
        schema_scripts: Full current-schema scripts, run once on a fresh database.
        migration_scripts: Incremental migration scripts.
        db: Target database.
        clock: Source of the ``dateRan`` timestamp.

    Returns:
        ``Ok(ApplyOutcome)`` or ``Err`` with the ``MigrationsError`` that
        stopped the run. On ``Err`` nothing was written.
    """
    return MigrationEngine(db, schema_scripts, migration_scripts, clock=clock).run()


async def reconcile_and_apply_async(
    schema_scripts: ScriptsLike,
    migration_scripts: ScriptsLike,
    db: MigrationDatabase,
    *,
    clock: Clock = utc_now,
) -> Result[ApplyOutcome]:
    """``reconcile_and_apply`` for asyncio callers.

    The same sequential run happens in a worker thread; the event loop is not
    blocked by database I/O.
    """
    return await asyncio.to_thread(
        reconcile_and_apply, schema_scripts, migration_scripts, db, clock=clock
    )


class MigrationEngine:
    """Reconciles one database with one pair of script collections.

    Parameters
    ----------
    db
        Anything satisfying ``MigrationDatabase``.
    schema_scripts, migration_scripts
        ``ScriptSource`` instances, directory paths, or ``{name: body}`` mappings.
    clock
        Source of the ``dateRan`` timestamp.
    """

    def __init__(
        self,
        db: MigrationDatabase,
        schema_scripts: ScriptsLike,
        migration_scripts: ScriptsLike,
        *,
        clock: Clock = utc_now,
    ) -> None:
        self._db = db
        self._schema = as_script_source(schema_scripts)
        self._migrations = as_script_source(migration_scripts)
        self._clock = clock

    def plan(self) -> Result[MigrationPlan]:
        """Build the plan without applying it."""
        return build_plan(self._db, self._schema, self._migrations, clock=self._clock)

    def run(self) -> Result[ApplyOutcome]:
        """Build the plan and apply it atomically."""
        return self.plan().flat_map(lambda plan: apply_plan(self._db, plan))

    def status(self) -> Result[MigrationStatus]:
        """Applied/pending state of every migration script.

        Drift between ledger and scripts is reported as ``Err`` exactly as
        ``run()`` would report it.
        """
        migrations = load_script_set(self._migrations, label="migrations")
        if isinstance(migrations, Err):
            return migrations

        match ledger_exists(self._db):
            case Err() as err:
                return err
            case Ok(False):
                return Ok(
                    MigrationStatus(
                        ledger_exists=False,
                        scripts=tuple(
                            ScriptStatus(s.name, s.sequence_number, applied=False)
                            for s in migrations.value
                        ),
                    )
                )

        matched = load_applied_migrations(self._db).flat_map(
            lambda applied: match_applied(migrations.value, applied)
        )
        return matched.map(
            lambda by_number: MigrationStatus(
                ledger_exists=True,
                scripts=tuple(
                    ScriptStatus(
                        s.name,
                        s.sequence_number,
                        applied=s.sequence_number in by_number,
                        date_ran=by_number[s.sequence_number].date_ran
                        if s.sequence_number in by_number
                        else None,
                    )
                    for s in migrations.value
                ),
            )
        )

    def __repr__(self) -> str:
        return f"MigrationEngine({self._db!r}, schema={self._schema!r}, migrations={self._migrations!r})"


__all__ = ["MigrationEngine", "reconcile_and_apply", "reconcile_and_apply_async"]
