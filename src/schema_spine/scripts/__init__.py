"""Script set loading for schema-spine.

Turns a named collection of raw script files into an ordered, validated
``ScriptSet``: numbered from 1, no gaps, no duplicates.

Modules
-------
models    ScriptRecord / ScriptSet
sources   DirectoryScriptSource / MemoryScriptSource / PackageScriptSource
loader    load_script_set() / parse_sequence_number()
"""

from schema_spine.scripts.loader import load_script_set, parse_sequence_number
from schema_spine.scripts.models import ScriptRecord, ScriptSet
from schema_spine.scripts.sources import (
    DirectoryScriptSource,
    MemoryScriptSource,
    PackageScriptSource,
    ScriptsLike,
    as_script_source,
)

__all__ = [
    "ScriptRecord",
    "ScriptSet",
    "load_script_set",
    "parse_sequence_number",
    "DirectoryScriptSource",
    "MemoryScriptSource",
    "PackageScriptSource",
    "ScriptsLike",
    "as_script_source",
]
