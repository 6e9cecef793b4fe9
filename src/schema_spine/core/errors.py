"""
Structured error types for schema-spine.

Every failure the migration engine can report is a ``MigrationsError``
subclass tagged with an ``ErrorKind``. Errors carry the offending file names
and sequence numbers in an ``ErrorContext`` so a failed startup can be
diagnosed from the log line alone.

Manifesto:
    - **One tagged family:** Callers match on ``kind`` (or the class), never on
      message text
    - **All fatal:** Nothing here is retryable; the engine recovers none of them
    - **Rich Context:** File names and numbers travel with the error
    - **Error Chaining:** Driver exceptions are preserved as ``cause``

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────────┐
        │                      MigrationsError                             │
        │                 (kind, context, cause)                           │
        ├─────────────────────────────────────────────────────────────────┤
        │                                                                  │
        │  ScriptSetError              LedgerDriftError                    │
        │       │                            │                             │
        │  FileNameMalformedError      MigrationFileNoLongerExistsError    │
        │  FileNumberingError          MigrationFileMismatchError          │
        │  CannotLoadFileError                                             │
        │                                                                  │
        │  SchemaIntrospectionError    DatabaseError                       │
        │       │                      (wraps driver error)                │
        │  SchemaInfoEmptyError                                            │
        │  SchemaInfoNotAnObjectError                                      │
        │  SchemaInfoMissingKeyError                                       │
        │  SchemaInfoWrongTypeError                                        │
        └─────────────────────────────────────────────────────────────────┘

Examples:
    >>> error = FileNumberingError("First file number is not 1", file_names=["0002_x.sql"])
    >>> error.kind
    <ErrorKind.FILE_NUMBERING: 'FILE_NUMBERING'>
    >>> error.context.file_names
    ['0002_x.sql']

Guardrails:
    ❌ DON'T: Raise plain Exception from engine code
    ✅ DO: Return ``Err(<MigrationsError subclass>)``

    ❌ DON'T: Swallow the driver exception
    ✅ DO: Pass it as cause= to DatabaseError

Tags:
    error-handling, exception-hierarchy, migrations, drift, schema-spine

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Stable tag identifying which failure occurred."""

    # Script set errors
    FILE_NAME_MALFORMED = "FILE_NAME_MALFORMED"
    FILE_NUMBERING = "FILE_NUMBERING"
    CANNOT_LOAD_FILE = "CANNOT_LOAD_FILE"

    # Database metadata errors
    SCHEMA_INTROSPECTION = "SCHEMA_INTROSPECTION"

    # Drift between ledger and script set
    MIGRATION_FILE_NO_LONGER_EXISTS = "MIGRATION_FILE_NO_LONGER_EXISTS"
    MIGRATION_FILE_MISMATCH = "MIGRATION_FILE_MISMATCH"

    # Driver failures
    DATABASE = "DATABASE"


class IntrospectionReason(str, Enum):
    """Why database metadata could not be interpreted."""

    EMPTY = "EMPTY"                  # Metadata query returned no data
    NOT_AN_OBJECT = "NOT_AN_OBJECT"  # A level of the metadata is not a mapping
    MISSING_KEY = "MISSING_KEY"      # An expected key is absent
    WRONG_TYPE = "WRONG_TYPE"        # A value has an unexpected type


@dataclass
class ErrorContext:
    """
    Structured metadata attached to a ``MigrationsError``.

    Attributes:
        file_names: Script or ledger file names involved in the failure
        numbers: Sequence numbers involved in the failure
        script_set: Which set was being processed (``"schema"``/``"migrations"``)
        metadata: Additional key-value pairs
    """

    file_names: list[str] = field(default_factory=list)
    numbers: list[int] = field(default_factory=list)
    script_set: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result: dict[str, Any] = {}
        if self.file_names:
            result["file_names"] = list(self.file_names)
        if self.numbers:
            result["numbers"] = list(self.numbers)
        if self.script_set is not None:
            result["script_set"] = self.script_set
        if self.metadata:
            result.update(self.metadata)
        return result


class MigrationsError(Exception):
    """
    Base exception for every schema-spine failure.

    Subclasses set ``kind``. Instances carry a message, an ``ErrorContext``
    and an optional chained ``cause``.

    Examples:
        >>> error = MigrationsError("boom").with_context(script_set="schema")
        >>> error.to_dict()["context"]
        {'script_set': 'schema'}
    """

    kind: ErrorKind = ErrorKind.DATABASE

    def __init__(
        self,
        message: str,
        *,
        file_names: list[str] | None = None,
        numbers: list[int] | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.context = context or ErrorContext()
        if file_names:
            self.context.file_names.extend(file_names)
        if numbers:
            self.context.numbers.extend(numbers)
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> MigrationsError:
        """
        Add context to this error (fluent API).

        Usage:
            return Err(FileNumberingError("gap").with_context(script_set="schema"))
        """
        for key, value in kwargs.items():
            if key in ("file_names", "numbers"):
                getattr(self.context, key).extend(value)
            elif hasattr(self.context, key):
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "kind": self.kind.value,
            "message": self.message,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, kind={self.kind.value})"


# =============================================================================
# SCRIPT SET ERRORS
# =============================================================================


class ScriptSetError(MigrationsError):
    """A script collection could not be turned into a valid ScriptSet."""


class FileNameMalformedError(ScriptSetError):
    """A script name has no leading decimal sequence number."""

    kind = ErrorKind.FILE_NAME_MALFORMED

    def __init__(self, file_name: str, **kwargs: Any):
        self.file_name = file_name
        super().__init__(
            f"File name '{file_name}' is malformed. Expected format e.g.: '0001_name.sql'",
            file_names=[file_name],
            **kwargs,
        )


class FileNumberingError(ScriptSetError):
    """Scripts are not numbered sequentially starting from 1."""

    kind = ErrorKind.FILE_NUMBERING


class CannotLoadFileError(ScriptSetError):
    """A listed script could not be read from its collection."""

    kind = ErrorKind.CANNOT_LOAD_FILE

    def __init__(self, file_name: str, **kwargs: Any):
        self.file_name = file_name
        super().__init__(f"Cannot load file '{file_name}'", file_names=[file_name], **kwargs)


# =============================================================================
# SCHEMA INTROSPECTION ERRORS
# =============================================================================


class SchemaIntrospectionError(MigrationsError):
    """Database metadata has an unexpected shape."""

    kind = ErrorKind.SCHEMA_INTROSPECTION
    reason: IntrospectionReason = IntrospectionReason.NOT_AN_OBJECT

    def __init__(self, message: str, *, key: str = "", received: Any = None, **kwargs: Any):
        self.key = key
        self.received = received
        super().__init__(message, **kwargs)

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["reason"] = self.reason.value
        if self.key:
            result["key"] = self.key
        if self.received is not None:
            result["received"] = repr(self.received)
        return result


class SchemaInfoEmptyError(SchemaIntrospectionError):
    """The metadata query returned no data."""

    reason = IntrospectionReason.EMPTY

    def __init__(self, **kwargs: Any):
        super().__init__("Database metadata query returned no data", **kwargs)


class SchemaInfoNotAnObjectError(SchemaIntrospectionError):
    """A level of the metadata is not a mapping."""

    reason = IntrospectionReason.NOT_AN_OBJECT

    def __init__(self, key: str, received: Any, **kwargs: Any):
        where = f"key '{key}'" if key else "metadata root"
        super().__init__(
            f"{where} is not an object in query result '{received!r}'",
            key=key,
            received=received,
            **kwargs,
        )


class SchemaInfoMissingKeyError(SchemaIntrospectionError):
    """An expected metadata key is absent."""

    reason = IntrospectionReason.MISSING_KEY

    def __init__(self, key: str, received: Any, **kwargs: Any):
        super().__init__(
            f"key '{key}' not found in query result '{received!r}'",
            key=key,
            received=received,
            **kwargs,
        )


class SchemaInfoWrongTypeError(SchemaIntrospectionError):
    """A metadata or ledger value has an unexpected type."""

    reason = IntrospectionReason.WRONG_TYPE

    def __init__(self, key: str, expected: str, received: Any, **kwargs: Any):
        self.expected = expected
        super().__init__(
            f"key '{key}' should be {expected}, got {type(received).__name__} ({received!r})",
            key=key,
            received=received,
            **kwargs,
        )


# =============================================================================
# DRIFT ERRORS
# =============================================================================


class LedgerDriftError(MigrationsError):
    """The ledger and the migration script set disagree."""


class MigrationFileNoLongerExistsError(LedgerDriftError):
    """A previously applied migration has no script at its number anymore."""

    kind = ErrorKind.MIGRATION_FILE_NO_LONGER_EXISTS

    def __init__(self, number: int, file_name: str, **kwargs: Any):
        self.number = number
        self.file_name = file_name
        super().__init__(
            f"Migration file not found for migration number '{number}'. "
            f"Original file name in db: '{file_name}'",
            file_names=[file_name],
            numbers=[number],
            **kwargs,
        )


class MigrationFileMismatchError(LedgerDriftError):
    """The script at an applied number has a different name than the ledger row."""

    kind = ErrorKind.MIGRATION_FILE_MISMATCH

    def __init__(self, number: int, script_name: str, recorded_name: str, **kwargs: Any):
        self.number = number
        self.script_name = script_name
        self.recorded_name = recorded_name
        super().__init__(
            f"Migration file name '{script_name}' does not match the file name "
            f"in the database '{recorded_name}' (number {number})",
            file_names=[script_name, recorded_name],
            numbers=[number],
            **kwargs,
        )


# =============================================================================
# DATABASE ERRORS
# =============================================================================


class DatabaseError(MigrationsError):
    """The underlying query or transaction failed."""

    kind = ErrorKind.DATABASE


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def error_kind(error: Exception) -> ErrorKind | None:
    """Get the kind of an error, or ``None`` for foreign exceptions."""
    if isinstance(error, MigrationsError):
        return error.kind
    return None


__all__ = [
    "ErrorKind",
    "IntrospectionReason",
    "ErrorContext",
    "MigrationsError",
    # Script set
    "ScriptSetError",
    "FileNameMalformedError",
    "FileNumberingError",
    "CannotLoadFileError",
    # Introspection
    "SchemaIntrospectionError",
    "SchemaInfoEmptyError",
    "SchemaInfoNotAnObjectError",
    "SchemaInfoMissingKeyError",
    "SchemaInfoWrongTypeError",
    # Drift
    "LedgerDriftError",
    "MigrationFileNoLongerExistsError",
    "MigrationFileMismatchError",
    # Database
    "DatabaseError",
    # Utilities
    "error_kind",
]
