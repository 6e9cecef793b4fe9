"""Migration reconciliation for schema-spine.

Modules
-------
models      MigrationRecord / MigrationPlan / ApplyOutcome / MigrationStatus
ledger      SQL for the ``migrations`` ledger relation
state       ledger_exists() / load_applied_migrations()
reconciler  build_plan() and its pure planning steps
applier     apply_plan()
engine      reconcile_and_apply() / MigrationEngine
"""

from schema_spine.migrations.applier import apply_plan
from schema_spine.migrations.engine import (
    MigrationEngine,
    reconcile_and_apply,
    reconcile_and_apply_async,
)
from schema_spine.migrations.models import (
    ApplyOutcome,
    MigrationPlan,
    MigrationRecord,
    MigrationStatus,
    PlanKind,
    ScriptStatus,
)
from schema_spine.migrations.reconciler import (
    build_plan,
    match_applied,
    plan_bootstrap,
    plan_incremental,
)
from schema_spine.migrations.state import ledger_exists, load_applied_migrations

__all__ = [
    # Models
    "ApplyOutcome",
    "MigrationPlan",
    "MigrationRecord",
    "MigrationStatus",
    "PlanKind",
    "ScriptStatus",
    # State
    "ledger_exists",
    "load_applied_migrations",
    # Planning
    "build_plan",
    "match_applied",
    "plan_bootstrap",
    "plan_incremental",
    # Applying
    "apply_plan",
    "MigrationEngine",
    "reconcile_and_apply",
    "reconcile_and_apply_async",
]
