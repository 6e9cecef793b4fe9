"""Split multi-statement SQL scripts into single statements.

``sqlite3`` refuses more than one statement per ``execute()`` and its
``executescript()`` commits any open transaction before running. Scripts
are therefore cut into complete statements with
:func:`sqlite3.complete_statement` and executed one at a time inside the
migration transaction.
"""

from __future__ import annotations

import sqlite3


def split_sql_statements(script: str) -> list[str]:
    """Cut ``script`` into complete SQL statements, in order.

    Semicolons inside string literals, comments and trigger bodies do not end
    a statement. A trailing statement without a semicolon is kept. Fragments
    holding nothing but comments are dropped.

    Examples:
        >>> split_sql_statements("CREATE TABLE a (x); CREATE TABLE b (y);")
        ['CREATE TABLE a (x);', 'CREATE TABLE b (y);']
        >>> split_sql_statements("INSERT INTO t VALUES ('a;b');")
        ["INSERT INTO t VALUES ('a;b');"]
    """
    statements: list[str] = []
    start = 0
    for index, char in enumerate(script):
        if char != ";":
            continue
        candidate = script[start : index + 1]
        if sqlite3.complete_statement(candidate):
            _append(statements, candidate)
            start = index + 1
    _append(statements, script[start:])
    return statements


def _append(statements: list[str], fragment: str) -> None:
    fragment = fragment.strip()
    if not _is_blank(fragment):
        statements.append(fragment)


def _is_blank(fragment: str) -> bool:
    """True when ``fragment`` holds only ``--`` comments and semicolons."""
    for line in fragment.splitlines():
        line = line.strip()
        if line and not line.startswith("--") and line.strip(";"):
            return False
    return True


__all__ = ["split_sql_statements"]
