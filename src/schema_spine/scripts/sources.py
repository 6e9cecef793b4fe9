"""Script sources — where raw script bytes come from.

Each class satisfies :class:`~schema_spine.core.protocols.ScriptSource`:

* ``DirectoryScriptSource`` -- files of one directory (non-recursive).
* ``MemoryScriptSource``    -- an in-memory ``{name: bytes | str}`` mapping.
* ``PackageScriptSource``   -- package data shipped inside a Python
  distribution, read through ``importlib.resources``. This is the way to
  embed scripts in an installed application.

Usage::

    from schema_spine.scripts.sources import DirectoryScriptSource, PackageScriptSource

    migrations = DirectoryScriptSource("db/migrations", pattern="*.sql")
    schema = PackageScriptSource("myapp", "db/schema")
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from importlib import resources
from importlib.resources.abc import Traversable
from pathlib import Path

from schema_spine.core.protocols import ScriptSource


class DirectoryScriptSource:
    """Regular files directly inside ``directory`` matching ``pattern``.

    A missing directory is an empty collection.
    """

    def __init__(self, directory: Path | str, *, pattern: str = "*") -> None:
        self._directory = Path(directory)
        self._pattern = pattern

    @property
    def directory(self) -> Path:
        return self._directory

    def names(self) -> list[str]:
        if not self._directory.is_dir():
            return []
        return sorted(p.name for p in self._directory.glob(self._pattern) if p.is_file())

    def read(self, name: str) -> bytes | None:
        path = self._directory / name
        if not path.is_file():
            return None
        return path.read_bytes()

    def __repr__(self) -> str:
        return f"DirectoryScriptSource({str(self._directory)!r}, pattern={self._pattern!r})"


class MemoryScriptSource:
    """Scripts held in memory. ``str`` values are encoded as UTF-8."""

    def __init__(self, scripts: Mapping[str, bytes | str] | None = None) -> None:
        self._scripts: dict[str, bytes] = {
            name: body.encode("utf-8") if isinstance(body, str) else body
            for name, body in (scripts or {}).items()
        }

    def names(self) -> list[str]:
        return list(self._scripts)

    def read(self, name: str) -> bytes | None:
        return self._scripts.get(name)

    def __repr__(self) -> str:
        return f"MemoryScriptSource({list(self._scripts)!r})"


class PackageScriptSource:
    """Scripts shipped as package data, e.g. ``myapp/db/migrations/*.sql``.

    Parameters
    ----------
    package
        Importable package name (``"myapp"``).
    subdirectory
        ``/``-separated directory inside the package (``"db/migrations"``).
    suffix
        Only names ending with this suffix are listed; ``""`` lists everything
        except ``__init__.py`` and ``__pycache__``.
    """

    def __init__(self, package: str, subdirectory: str = "", *, suffix: str = "") -> None:
        self._package = package
        self._subdirectory = subdirectory
        self._suffix = suffix

    def _root(self) -> Traversable:
        root = resources.files(self._package)
        for part in filter(None, self._subdirectory.split("/")):
            root = root / part
        return root

    def names(self) -> Iterable[str]:
        root = self._root()
        if not root.is_dir():
            return []
        return sorted(
            entry.name
            for entry in root.iterdir()
            if entry.is_file()
            and entry.name.endswith(self._suffix)
            and entry.name != "__init__.py"
        )

    def read(self, name: str) -> bytes | None:
        entry = self._root() / name
        if not entry.is_file():
            return None
        return entry.read_bytes()

    def __repr__(self) -> str:
        return f"PackageScriptSource({self._package!r}, {self._subdirectory!r})"


ScriptsLike = ScriptSource | Path | str | Mapping[str, bytes | str]


def as_script_source(scripts: ScriptsLike) -> ScriptSource:
    """Coerce a path or a ``{name: body}`` mapping into a ``ScriptSource``.

    >>> as_script_source({"1_init.sql": "CREATE TABLE t (id INTEGER);"})
    MemoryScriptSource(['1_init.sql'])
    >>> as_script_source("db/migrations")
    DirectoryScriptSource('db/migrations', pattern='*')
    """
    if isinstance(scripts, (str, Path)):
        return DirectoryScriptSource(scripts)
    if isinstance(scripts, Mapping):
        return MemoryScriptSource(scripts)
    if isinstance(scripts, ScriptSource):
        return scripts
    raise TypeError(f"Expected a ScriptSource, a directory or a mapping, got {type(scripts).__name__}")


__all__ = [
    "DirectoryScriptSource",
    "MemoryScriptSource",
    "PackageScriptSource",
    "ScriptsLike",
    "as_script_source",
]
