"""Core primitives for schema-spine: errors, results, protocols, logging, settings."""

from schema_spine.core.errors import ErrorKind, MigrationsError
from schema_spine.core.result import Err, Ok, Result

__all__ = ["ErrorKind", "MigrationsError", "Err", "Ok", "Result"]
