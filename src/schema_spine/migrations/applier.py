"""
Transactional applier — run a plan as one all-or-nothing unit.

Bootstrap::

    BEGIN
      <schema bodies, concatenated>
      CREATE TABLE migrations ("fileName", "number", "dateRan")
      INSERT INTO migrations ...   -- one per migration, dateRan NULL
    COMMIT

Incremental::

    BEGIN
      <pending migration bodies, ascending>
      INSERT INTO migrations ...   -- one per pending migration, same order
    COMMIT

Any exception rolls the whole unit back and is returned as a
``DatabaseError`` naming the step that failed. Nothing is retried.

Tags:
    migrations, transaction, atomicity, applier, schema-spine
"""

from __future__ import annotations

from schema_spine.core.errors import DatabaseError
from schema_spine.core.logging import get_logger
from schema_spine.core.protocols import MigrationDatabase
from schema_spine.core.result import Err, Ok, Result
from schema_spine.migrations.ledger import ledger_statements
from schema_spine.migrations.models import ApplyOutcome, MigrationPlan, PlanKind

logger = get_logger(__name__)


def apply_plan(db: MigrationDatabase, plan: MigrationPlan) -> Result[ApplyOutcome]:
    """Execute ``plan`` against ``db`` in a single transaction."""
    if plan.is_noop:
        logger.info("migration.noop")
        return Ok(ApplyOutcome(kind=PlanKind.NOOP))

    step = "ledger statements"
    try:
        statements = ledger_statements(db.dialect_name)
        step = "begin"
        with db.transaction() as tx:
            if plan.kind is PlanKind.BOOTSTRAP:
                step = "schema"
                tx.run_script(plan.run_once or "")
                step = "ledger definition"
                tx.run_script(statements.create)
            else:
                for script in plan.scripts:
                    step = script.name
                    logger.debug("migration.running", file_name=script.name, number=script.sequence_number)
                    tx.run_script(script.body)

            for record in plan.insert_records:
                step = f"ledger record '{record.file_name}'"
                tx.execute(statements.insert, record.to_params())
            step = "commit"
    except Exception as e:
        error = DatabaseError(
            f"Migration transaction failed at {step}: {e}",
            file_names=[s.name for s in plan.scripts],
            cause=e,
        ).with_context(plan=plan.kind.value, step=step)
        logger.error("migration.failed", **error.to_dict())
        return Err(error)

    outcome = ApplyOutcome(
        kind=plan.kind,
        executed=tuple(script.name for script in plan.scripts),
        recorded=tuple(record.file_name for record in plan.insert_records),
    )
    if plan.kind is PlanKind.BOOTSTRAP:
        logger.info("migration.bootstrap_applied", recorded=list(outcome.recorded))
    else:
        logger.info("migration.applied", count=len(outcome.executed), executed=list(outcome.executed))
    return Ok(outcome)


__all__ = ["apply_plan"]
