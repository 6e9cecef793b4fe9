"""Script records and validated script sets."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ScriptRecord:
    """One schema or migration script.

    ``name`` is the original file identifier and is what the ledger stores;
    ``sequence_number`` is the value of its leading digit run.
    """

    name: str
    sequence_number: int
    body: str


@dataclass(frozen=True)
class ScriptSet:
    """Scripts ordered by ``sequence_number``, contiguous from 1.

    Only :func:`schema_spine.scripts.loader.load_script_set` builds these, so
    holding a ``ScriptSet`` means the numbering has been validated.
    """

    scripts: tuple[ScriptRecord, ...] = ()

    def __iter__(self) -> Iterator[ScriptRecord]:
        return iter(self.scripts)

    def __len__(self) -> int:
        return len(self.scripts)

    def __getitem__(self, index: int) -> ScriptRecord:
        return self.scripts[index]

    @property
    def names(self) -> list[str]:
        return [script.name for script in self.scripts]

    def by_number(self) -> dict[int, ScriptRecord]:
        """Map of sequence number to script."""
        return {script.sequence_number: script for script in self.scripts}

    def joined_body(self, separator: str = "\n") -> str:
        """All bodies concatenated in sequence order."""
        return separator.join(script.body for script in self.scripts)


__all__ = ["ScriptRecord", "ScriptSet"]
