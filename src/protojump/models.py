"""Index data model: definitions, per-file records, and index statistics."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

DefinitionKind = Literal["message", "enum"]


@dataclass(frozen=True)
class Definition:
    """A top-level ``message`` or ``enum`` declaration with its source position.

    ``line`` is 1-based; ``column`` is the 0-based offset of the declaring
    keyword (or enumerant name) in the untrimmed source line, counted in
    characters (code points), which matches the byte offset for ASCII text.
    """

    name: str
    kind: DefinitionKind
    file_path: str
    line: int
    column: int
    package_name: str | None = None

    def to_dict(self) -> dict[str, object]:
        """Serialize using the on-disk cache field names."""
        data: dict[str, object] = {
            "name": self.name,
            "type": self.kind,
            "filePath": self.file_path,
            "line": self.line,
            "column": self.column,
        }
        if self.package_name is not None:
            data["packageName"] = self.package_name
        return data

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> Definition:
        """Inverse of :meth:`to_dict`.

        Raises ``KeyError``, ``TypeError`` or ``ValueError`` on malformed input.
        """
        kind = data["type"]
        if kind not in ("message", "enum"):
            raise ValueError(f"unknown definition type: {kind!r}")
        package = data.get("packageName")
        return cls(
            name=_as_str(data["name"]),
            kind=kind,  # type: ignore[arg-type]
            file_path=_as_str(data["filePath"]),
            line=_as_int(data["line"]),
            column=_as_int(data["column"]),
            package_name=None if package is None else _as_str(package),
        )


@dataclass(frozen=True)
class FileRecord:
    """Parse result for one schema file.

    ``definitions`` is replaced wholesale on every re-parse, never merged.
    """

    file_path: str
    last_modified: int
    definitions: dict[str, Definition] = field(default_factory=dict)
    package_name: str | None = None

    def to_dict(self) -> dict[str, object]:
        data: dict[str, object] = {
            "filePath": self.file_path,
            "definitions": {name: d.to_dict() for name, d in self.definitions.items()},
            "lastModified": self.last_modified,
        }
        if self.package_name is not None:
            data["packageName"] = self.package_name
        return data

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> FileRecord:
        raw_defs = data["definitions"]
        if not isinstance(raw_defs, dict):
            raise TypeError("definitions must be a mapping")
        package = data.get("packageName")
        return cls(
            file_path=_as_str(data["filePath"]),
            last_modified=_as_int(data["lastModified"]),
            definitions={str(k): Definition.from_dict(v) for k, v in raw_defs.items()},
            package_name=None if package is None else _as_str(package),
        )


@dataclass(frozen=True)
class IndexStats:
    """Counts reported by ``stats()``."""

    file_count: int = 0
    definition_count: int = 0
    alias_count: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "fileCount": self.file_count,
            "definitionCount": self.definition_count,
            "aliasCount": self.alias_count,
        }


def _as_str(value: object) -> str:
    if not isinstance(value, str):
        raise TypeError(f"expected string, got {type(value).__name__}")
    return value


def _as_int(value: object) -> int:
    # bool is an int subclass; a cached ``true`` is never a valid position.
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"expected integer, got {type(value).__name__}")
    return value
