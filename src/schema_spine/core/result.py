"""
Result envelope for consistent success/failure handling.

Every engine operation returns ``Result[T]``: ``Ok[T]`` on success or
``Err[T]`` carrying a ``MigrationsError``. Failures are terminal to the
operation, so they travel as values to the single place that reports them
instead of unwinding through the call stack.

Manifesto:
    - **Explicit over Implicit:** No hidden exceptions that callers might miss
    - **Fail-fast:** The first ``Err`` ends the reconciliation
    - **Functional composition:** Chain steps with map/flat_map without
      nested try/except blocks

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────┐
        │                     Result[T]                                │
        │                    (Type Alias)                              │
        ├─────────────────┬─────────────────┬─────────────────────────┤
        │     Ok[T]       │     Err[T]      │     Utilities           │
        ├─────────────────┼─────────────────┼─────────────────────────┤
        │ • value: T      │ • error: Exc    │ • try_result_with()     │
        │ • map()         │ • map_err()     │ • collect_results()     │
        │ • flat_map()    │ • unwrap_or()   │                         │
        │ • unwrap()      │ • inspect_err() │                         │
        └─────────────────┴─────────────────┴─────────────────────────┘

Examples:
    >>> from schema_spine.core.result import Ok, Err, Result
    >>> def halve(n: int) -> Result[int]:
    ...     if n % 2:
    ...         return Err(ValueError("odd"))
    ...     return Ok(n // 2)
    >>> match halve(10):
    ...     case Ok(value):
    ...         print(value)
    ...     case Err(error):
    ...         print(error)
    5

Guardrails:
    ❌ DON'T: Use unwrap() without checking is_ok() first
    ✅ DO: Use unwrap_or() or pattern matching for safe extraction

    ❌ DON'T: Raise exceptions inside map/flat_map functions
    ✅ DO: Return Err from flat_map if the operation can fail

Tags:
    result-pattern, error-handling, functional-programming, schema-spine

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar

from schema_spine.core.errors import MigrationsError


T = TypeVar("T")
U = TypeVar("U")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """
    Successful result containing a value.

    Examples:
        >>> Ok(10).map(lambda x: x * 2).unwrap()
        20
        >>> Ok(5).flat_map(lambda x: Err(ValueError("no"))).is_err()
        True
    """

    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        """Get the value. Safe for Ok."""
        return self.value

    def unwrap_or(self, default: T) -> T:
        """Get value or default (always returns value for Ok)."""
        return self.value

    def map(self, f: Callable[[T], U]) -> Result[U]:
        """Transform the value if Ok."""
        return Ok(f(self.value))

    def flat_map(self, f: Callable[[T], Result[U]]) -> Result[U]:
        """Chain to another Result-returning function."""
        return f(self.value)

    def map_err(self, f: Callable[[Exception], Exception]) -> Result[T]:
        """Transform error if Err (no-op for Ok)."""
        return self

    def inspect(self, f: Callable[[T], None]) -> Result[T]:
        """Call f with value for side effects, return self."""
        f(self.value)
        return self

    def inspect_err(self, f: Callable[[Exception], None]) -> Result[T]:
        """Call f with error for side effects (no-op for Ok)."""
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {"ok": True, "value": self.value}

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[T]):
    """
    Failed result containing an error.

    ``map`` and ``flat_map`` pass the error through unchanged, so a chain of
    steps stops at the first failure.

    Examples:
        >>> err = Err(ValueError("something went wrong"))
        >>> err.unwrap_or("default")
        'default'
        >>> err.map(lambda x: x * 2).is_err()
        True
    """

    error: Exception

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> T:
        """Raise the error. Use only when you're sure it's Ok."""
        raise self.error

    def unwrap_or(self, default: T) -> T:
        """Get default since this is Err."""
        return default

    def map(self, f: Callable[[T], U]) -> Result[U]:
        """No-op for Err."""
        return Err(self.error)

    def flat_map(self, f: Callable[[T], Result[U]]) -> Result[U]:
        """No-op for Err."""
        return Err(self.error)

    def map_err(self, f: Callable[[Exception], Exception]) -> Result[T]:
        """Transform the error."""
        return Err(f(self.error))

    def inspect(self, f: Callable[[T], None]) -> Result[T]:
        """No-op for Err."""
        return self

    def inspect_err(self, f: Callable[[Exception], None]) -> Result[T]:
        """Call f with error for side effects, return self."""
        f(self.error)
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        if isinstance(self.error, MigrationsError):
            return {"ok": False, "error": self.error.to_dict()}
        return {
            "ok": False,
            "error": {
                "error_type": type(self.error).__name__,
                "message": str(self.error),
            },
        }

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


# Type alias for Result
Result = Ok[T] | Err[T]


# =============================================================================
# RESULT CONSTRUCTORS AND UTILITIES
# =============================================================================


def try_result_with(
    f: Callable[[], T],
    error_mapper: Callable[[Exception], Exception],
) -> Result[T]:
    """
    Execute ``f`` and map any exception it raises to a custom error type.

    This is the bridge between driver code that raises and engine code that
    returns Results.

    Examples:
        >>> from schema_spine.core.errors import DatabaseError
        >>> r = try_result_with(lambda: 1 / 0, lambda e: DatabaseError("math", cause=e))
        >>> type(r.error).__name__
        'DatabaseError'
    """
    try:
        return Ok(f())
    except Exception as e:
        return Err(error_mapper(e))


def collect_results(results: Iterable[Result[T]]) -> Result[list[T]]:
    """
    Collect Results into a Result of list (fail-fast).

    Examples:
        >>> collect_results([Ok(1), Ok(2)]).unwrap()
        [1, 2]
        >>> str(collect_results([Ok(1), Err(ValueError("a")), Err(ValueError("b"))]).error)
        'a'
    """
    values = []
    for result in results:
        match result:
            case Ok(value):
                values.append(value)
            case Err(error):
                return Err(error)
    return Ok(values)


__all__ = [
    "Result",
    "Ok",
    "Err",
    "try_result_with",
    "collect_results",
]
