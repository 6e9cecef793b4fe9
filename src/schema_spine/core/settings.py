"""Process configuration for schema-spine.

``MigrateSettings`` gathers everything the CLI (or an embedding service)
needs to run a reconciliation: where the database lives, where the two
script collections live, and how to log.

Manifesto:
    Configuration should be explicit, validated, and environment-driven.

    - **Pydantic validation:** Type-checked at startup, not runtime
    - **Environment-driven:** ``SCHEMA_SPINE_*`` env vars and ``.env`` files
    - **Sensible defaults:** ``./schema`` and ``./migrations`` next to ``schema_spine.db``

Examples:
    >>> from schema_spine.core.settings import MigrateSettings
    >>> settings = MigrateSettings(database="app.db")
    >>> str(settings.migrations_dir)
    'migrations'

Tags:
    settings, configuration, pydantic, environment, schema-spine

Doc-Types:
    - API Reference
    - Configuration Guide
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class MigrateSettings(BaseSettings):
    """Settings for a reconciliation run.

    Fields
    ──────
    database        : SQLite file path, ``sqlite:///`` URL or any SQLAlchemy URL
    schema_dir      : Directory holding the schema script set
    migrations_dir  : Directory holding the migration script set
    script_pattern  : Glob selecting script files inside both directories
    log_level       : Structlog log level
    json_logs       : Force JSON (True) / console (False) logs; None auto-detects
    """

    model_config = SettingsConfigDict(
        env_prefix="SCHEMA_SPINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Database ─────────────────────────────────────────────────
    database: str = "schema_spine.db"

    # ── Scripts ──────────────────────────────────────────────────
    schema_dir: Path = Field(default=Path("schema"), description="Schema script directory")
    migrations_dir: Path = Field(
        default=Path("migrations"), description="Migration script directory"
    )
    script_pattern: str = "*"

    # ── Observability ────────────────────────────────────────────
    log_level: str = "INFO"
    json_logs: bool | None = None
