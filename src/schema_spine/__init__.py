"""
schema-spine — startup-time schema migrations with a ledger.

Keeps a database schema in step with two numbered script collections:

* **schema scripts** create the whole current schema on a fresh database;
* **migration scripts** move an existing database forward, one number at a time.

A ``migrations`` ledger table records which migration files have been
satisfied. Every reconciliation is one all-or-nothing transaction.

Examples:
    >>> from schema_spine import open_database, reconcile_and_apply
    >>> db = open_database()
    >>> outcome = reconcile_and_apply(
    ...     {"1_schema.sql": "CREATE TABLE users (id INTEGER PRIMARY KEY);"},
    ...     {"1_users.sql": "CREATE TABLE users (id INTEGER PRIMARY KEY);"},
    ...     db,
    ... ).unwrap()
    >>> outcome.kind.value
    'BOOTSTRAP'

Tags:
    migrations, schema, ledger, sqlite, sqlalchemy, schema-spine
"""

from schema_spine.adapters import open_database
from schema_spine.core.errors import ErrorKind, MigrationsError
from schema_spine.core.result import Err, Ok, Result
from schema_spine.migrations import (
    ApplyOutcome,
    MigrationEngine,
    MigrationPlan,
    MigrationRecord,
    MigrationStatus,
    PlanKind,
    reconcile_and_apply,
    reconcile_and_apply_async,
)
from schema_spine.scripts import (
    DirectoryScriptSource,
    MemoryScriptSource,
    PackageScriptSource,
    ScriptRecord,
    ScriptSet,
    load_script_set,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "open_database",
    "reconcile_and_apply",
    "reconcile_and_apply_async",
    "MigrationEngine",
    "ApplyOutcome",
    "MigrationPlan",
    "MigrationRecord",
    "MigrationStatus",
    "PlanKind",
    "ScriptRecord",
    "ScriptSet",
    "load_script_set",
    "DirectoryScriptSource",
    "MemoryScriptSource",
    "PackageScriptSource",
    "ErrorKind",
    "MigrationsError",
    "Err",
    "Ok",
    "Result",
]
