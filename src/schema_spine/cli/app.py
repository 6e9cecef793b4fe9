"""
Root Typer application for the schema-spine CLI.

Every command resolves ``MigrateSettings`` from ``SCHEMA_SPINE_*`` variables
and ``.env``, lets ``--database`` / ``--schema-dir`` / ``--migrations-dir``
override them, then runs against the resolved database.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import closing, contextmanager
from pathlib import Path
from typing import TYPE_CHECKING

import typer
from typer import Typer

from schema_spine.cli.utils import load_settings, output_result, output_status, script_sources
from schema_spine.core.result import Ok, collect_results

if TYPE_CHECKING:
    from schema_spine.migrations.engine import MigrationEngine

app = Typer(
    name="schema-spine",
    help="schema-spine — reconcile a database schema with numbered script sets.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        from importlib.metadata import PackageNotFoundError
        from importlib.metadata import version as pkg_version

        try:
            v = pkg_version("schema-spine")
        except PackageNotFoundError:
            from schema_spine import __version__ as v
        typer.echo(f"schema-spine {v}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """schema-spine CLI — migrate, plan, inspect and validate schema scripts."""


# ── Shared options ───────────────────────────────────────────────────────

DatabaseOpt = typer.Option(None, "--database", "-d", help="SQLite path or SQLAlchemy URL")
SchemaDirOpt = typer.Option(None, "--schema-dir", help="Schema script directory")
MigrationsDirOpt = typer.Option(None, "--migrations-dir", help="Migration script directory")
JsonOpt = typer.Option(False, "--json", help="JSON output")


@contextmanager
def _engine(
    database: str | None,
    schema_dir: Path | None,
    migrations_dir: Path | None,
    *,
    read_only: bool = False,
) -> Iterator[MigrationEngine]:
    from schema_spine.adapters import open_database
    from schema_spine.migrations.engine import MigrationEngine

    settings = load_settings(database, schema_dir, migrations_dir)
    schema, migrations = script_sources(settings)
    with closing(open_database(settings.database, read_only=read_only)) as db:
        yield MigrationEngine(db, schema, migrations)


# ── Commands ─────────────────────────────────────────────────────────────


@app.command()
def migrate(
    database: str | None = DatabaseOpt,
    schema_dir: Path | None = SchemaDirOpt,
    migrations_dir: Path | None = MigrationsDirOpt,
    json_out: bool = JsonOpt,
) -> None:
    """Bring the database up to date (bootstrap or run pending migrations)."""
    with _engine(database, schema_dir, migrations_dir) as engine:
        result = engine.run()
    output_result(result, as_json=json_out, title="Migration")


@app.command()
def plan(
    database: str | None = DatabaseOpt,
    schema_dir: Path | None = SchemaDirOpt,
    migrations_dir: Path | None = MigrationsDirOpt,
    json_out: bool = JsonOpt,
) -> None:
    """Show what ``migrate`` would do without changing the database."""
    with _engine(database, schema_dir, migrations_dir, read_only=True) as engine:
        result = engine.plan()
    output_result(result, as_json=json_out, title="Migration Plan")


@app.command()
def status(
    database: str | None = DatabaseOpt,
    schema_dir: Path | None = SchemaDirOpt,
    migrations_dir: Path | None = MigrationsDirOpt,
    json_out: bool = JsonOpt,
) -> None:
    """List migration scripts with their applied / pending state."""
    with _engine(database, schema_dir, migrations_dir, read_only=True) as engine:
        result = engine.status()
    output_status(result, as_json=json_out)


@app.command()
def check(
    schema_dir: Path | None = SchemaDirOpt,
    migrations_dir: Path | None = MigrationsDirOpt,
    json_out: bool = JsonOpt,
) -> None:
    """Validate both script sets without opening a database."""
    from schema_spine.scripts.loader import load_script_set

    settings = load_settings(schema_dir=schema_dir, migrations_dir=migrations_dir)
    schema, migrations = script_sources(settings)
    result = collect_results([
        load_script_set(schema, label="schema"),
        load_script_set(migrations, label="migrations"),
    ])
    match result:
        case Ok([schema_set, migration_set]):
            result = Ok({"schema": schema_set.names, "migrations": migration_set.names})
    output_result(result, as_json=json_out, title="Script Sets")
