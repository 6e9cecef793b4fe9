"""
ScriptSet loader — raw named blobs in, validated ScriptSet out.

Architecture:
    ::

        ScriptSource.names()
              │  parse_sequence_number()   "0002_add_email.sql" → 2
              ▼                            "init.sql"           → FileNameMalformedError
        [(number, name), ...]
              │  sort by number
              ▼
        contiguity check                   1, 2, 3 ... no gaps, no duplicates
              │                            else FileNumberingError
              ▼
        ScriptSource.read(name)            None → CannotLoadFileError
              │  UTF-8 decode, invalid bytes → U+FFFD
              ▼
        ScriptSet

Numbering is validated before any body is read, so a badly named set fails
without touching script contents. Nothing here talks to a database.

Tags:
    scripts, loader, validation, ordering, schema-spine
"""

from __future__ import annotations

import re

from schema_spine.core.errors import (
    CannotLoadFileError,
    FileNameMalformedError,
    FileNumberingError,
)
from schema_spine.core.logging import get_logger
from schema_spine.core.protocols import ScriptSource
from schema_spine.core.result import Err, Ok, Result, collect_results
from schema_spine.scripts.models import ScriptRecord, ScriptSet

logger = get_logger(__name__)

_NUMBER_PREFIX = re.compile(r"^[0-9]+")


def parse_sequence_number(name: str) -> int | None:
    """Value of the leading ASCII digit run of ``name``, or ``None``.

    Examples:
        >>> parse_sequence_number("0001_create_users.sql")
        1
        >>> parse_sequence_number("init.sql") is None
        True
        >>> parse_sequence_number("\u0661_init.sql") is None
        True
    """
    match = _NUMBER_PREFIX.match(name)
    if match is None:
        return None
    return int(match.group(0))


def _number_name(name: str) -> Result[tuple[int, str]]:
    number = parse_sequence_number(name)
    if number is None:
        return Err(FileNameMalformedError(name))
    return Ok((number, name))


def _check_numbering(numbered: list[tuple[int, str]]) -> Result[None]:
    if not numbered:
        return Ok(None)

    first_number, first_name = numbered[0]
    if first_number != 1:
        return Err(
            FileNumberingError(
                f"First file number is not 1. File name: '{first_name}'",
                file_names=[first_name],
                numbers=[first_number],
            )
        )

    for (a_number, a_name), (b_number, b_name) in zip(numbered, numbered[1:]):
        if a_number + 1 != b_number:
            return Err(
                FileNumberingError(
                    "File numbers are not sequential or not one apart. "
                    f"File names: '{a_name}' and '{b_name}'",
                    file_names=[a_name, b_name],
                    numbers=[a_number, b_number],
                )
            )
    return Ok(None)


def _read_script(source: ScriptSource, number: int, name: str) -> Result[ScriptRecord]:
    data = source.read(name)
    if data is None:
        return Err(CannotLoadFileError(name, numbers=[number]))
    return Ok(
        ScriptRecord(
            name=name,
            sequence_number=number,
            body=data.decode("utf-8", errors="replace"),
        )
    )


def load_script_set(source: ScriptSource, *, label: str | None = None) -> Result[ScriptSet]:
    """Load and validate every script of ``source``.

    Args:
        source: Collection to read from.
        label: Name of the set (``"schema"`` / ``"migrations"``), attached to
            errors and log events.

    Returns:
        ``Ok(ScriptSet)`` sorted by sequence number, or ``Err`` with
        ``FileNameMalformedError``, ``FileNumberingError`` or
        ``CannotLoadFileError``. No partial set is ever returned.
    """
    numbered_result = collect_results(_number_name(name) for name in source.names())
    if isinstance(numbered_result, Err):
        return _labelled(numbered_result, label)

    # Stable for equal numbers, so duplicate-number errors name files consistently
    numbered = sorted(numbered_result.value, key=lambda pair: (pair[0], pair[1]))

    check = _check_numbering(numbered)
    if isinstance(check, Err):
        return _labelled(check, label)

    records = collect_results(_read_script(source, number, name) for number, name in numbered)
    if isinstance(records, Err):
        return _labelled(records, label)

    script_set = ScriptSet(tuple(records.value))
    logger.debug("scripts.loaded", script_set=label, count=len(script_set), names=script_set.names)
    return Ok(script_set)


def _labelled(result: Err, label: str | None) -> Err:
    if label is not None:
        result.error.with_context(script_set=label)
    return Err(result.error)


__all__ = ["load_script_set", "parse_sequence_number"]
