"""
CLI utility helpers — settings resolution, script sources and output formatting.
"""

from __future__ import annotations

import json
from dataclasses import asdict
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from schema_spine.core.errors import MigrationsError
from schema_spine.core.logging import configure_logging
from schema_spine.core.result import Err, Result
from schema_spine.core.settings import MigrateSettings
from schema_spine.migrations.models import MigrationStatus
from schema_spine.scripts.sources import DirectoryScriptSource

console = Console()
err_console = Console(stderr=True)


# ── Settings helpers ─────────────────────────────────────────────────────


def load_settings(
    database: str | None = None,
    schema_dir: Path | None = None,
    migrations_dir: Path | None = None,
) -> MigrateSettings:
    """Environment settings with command-line overrides applied, logging configured."""
    overrides = {
        key: value
        for key, value in (
            ("database", database),
            ("schema_dir", schema_dir),
            ("migrations_dir", migrations_dir),
        )
        if value is not None
    }
    settings = MigrateSettings().model_copy(update=overrides)
    configure_logging(level=settings.log_level, json_format=settings.json_logs)
    return settings


def script_sources(settings: MigrateSettings) -> tuple[DirectoryScriptSource, DirectoryScriptSource]:
    """``(schema, migrations)`` directory sources for ``settings``."""
    return (
        DirectoryScriptSource(settings.schema_dir, pattern=settings.script_pattern),
        DirectoryScriptSource(settings.migrations_dir, pattern=settings.script_pattern),
    )


# ── Output helpers ───────────────────────────────────────────────────────


def _to_dict(obj: Any) -> dict[str, Any]:
    """Convert a result model / dataclass / dict to a plain dict."""
    if hasattr(obj, "to_dict"):
        return obj.to_dict()
    if hasattr(obj, "__dataclass_fields__"):
        return asdict(obj)
    if isinstance(obj, dict):
        return obj
    return {"value": str(obj)}


def fail(error: MigrationsError) -> None:
    """Print ``error`` to stderr and exit with status 1."""
    err_console.print(f"[bold red]Error[/bold red] ({error.kind.value}): {escape(error.message)}")
    raise typer.Exit(code=1)


def output_result(
    result: Result[Any],
    *,
    as_json: bool = False,
    title: str = "",
) -> None:
    """Render a ``Result`` to the terminal. ``Err`` exits with status 1."""
    if isinstance(result, Err):
        fail(result.error)

    payload = _to_dict(result.value)

    if as_json:
        console.print_json(json.dumps(payload, default=str))
        return

    _print_dict(payload, title=title)


def output_status(result: Result[MigrationStatus], *, as_json: bool = False) -> None:
    """Render a ``MigrationStatus`` as a Rich table."""
    if isinstance(result, Err):
        fail(result.error)

    status = result.value
    if as_json:
        console.print_json(json.dumps(asdict(status), default=str))
        return

    if not status.ledger_exists:
        console.print("[yellow]No migrations ledger: the next migrate bootstraps the schema.[/yellow]")
    if not status.scripts:
        console.print("[dim]No migration scripts.[/dim]")
        return

    table = Table(title="Migration Status", show_lines=False, pad_edge=False)
    table.add_column("number", justify="right")
    table.add_column("file", overflow="fold")
    table.add_column("state")
    table.add_column("date ran")
    for script in status.scripts:
        state = "[green]applied[/green]" if script.applied else "[yellow]pending[/yellow]"
        ran = str(script.date_ran) if script.date_ran else "-"
        table.add_row(str(script.number), escape(script.name), state, ran)
    console.print(table)
    console.print(f"\n[dim]{len(status.applied)} applied, {len(status.pending)} pending[/dim]")


# ── Private helpers ──────────────────────────────────────────────────────


def _print_dict(data: dict[str, Any], *, title: str = "") -> None:
    """Render a single dict as key-value pairs."""
    if title:
        console.print(f"[bold]{title}[/bold]")
    for k, v in data.items():
        if isinstance(v, list):
            v = ", ".join(str(item) for item in v) or "-"
        console.print(f"  [cyan]{k}[/cyan]: {escape(str(v))}")
