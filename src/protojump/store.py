"""In-memory definition store: per-file records, flat name index, alias mapping."""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

from protojump.models import IndexStats

if TYPE_CHECKING:
    from collections.abc import Iterable

    from protojump.models import Definition, FileRecord

logger = logging.getLogger(__name__)


class DefinitionStore:
    """Three mappings kept consistent under one lock.

    - files: file path -> :class:`FileRecord`
    - definitions: declaration name -> :class:`Definition`, flattened over files
    - aliases: external (generated-code) name -> declaration name

    Every mutation updates all three together, so a reader never sees a
    record whose definitions are only partly swapped in.  Name collisions
    across files are last-write-wins.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._files: dict[str, FileRecord] = {}
        self._definitions: dict[str, Definition] = {}
        self._aliases: dict[str, str] = {}

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def put_file(self, record: FileRecord) -> None:
        """Insert *record*, replacing any previous record for the same path."""
        with self._lock:
            old = self._files.get(record.file_path)
            if old is not None:
                self._drop_names(old)
            self._files[record.file_path] = record
            for name, definition in record.definitions.items():
                self._definitions[name] = definition
                self._aliases[name] = name

    def remove_file(self, file_path: str) -> bool:
        """Remove the record for *file_path*. Returns False if it was absent."""
        with self._lock:
            old = self._files.pop(file_path, None)
            if old is None:
                return False
            self._drop_names(old)
        logger.info("Removed %s from index (%d definitions)", file_path, len(old.definitions))
        return True

    def clear(self) -> None:
        with self._lock:
            self._files.clear()
            self._definitions.clear()
            self._aliases.clear()

    def restore(
        self,
        files: Iterable[FileRecord],
        definitions: dict[str, Definition],
        aliases: dict[str, str],
    ) -> None:
        """Replace the whole store content, e.g. from a cache snapshot.

        Flattened entries without a matching record are dropped, together
        with their aliases, so the name index stays a projection of the
        file records.
        """
        records = {record.file_path: record for record in files}
        consistent: dict[str, Definition] = {}
        for name, definition in definitions.items():
            owner = records.get(definition.file_path)
            if owner is not None and owner.definitions.get(name) == definition:
                consistent[name] = definition
        with self._lock:
            self._files = records
            self._definitions = consistent
            self._aliases = {alias: name for alias, name in aliases.items() if name in consistent}

    def _drop_names(self, record: FileRecord) -> None:
        """Unlink *record*'s names from the flat index. Caller holds the lock."""
        for name in record.definitions:
            current = self._definitions.get(name)
            # Another file may have taken the name over since.
            if current is None or current.file_path != record.file_path:
                continue
            del self._definitions[name]
            self._aliases.pop(name, None)
            for other in self._files.values():
                if other.file_path != record.file_path and name in other.definitions:
                    self._definitions[name] = other.definitions[name]
                    self._aliases[name] = name
                    break

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def lookup_by_name(self, name: str) -> Definition | None:
        with self._lock:
            return self._definitions.get(name)

    def resolve_alias(self, external_name: str) -> str:
        """Map a generated-code name to its schema name (identity if unknown)."""
        with self._lock:
            return self._aliases.get(external_name, external_name)

    def get_file(self, file_path: str) -> FileRecord | None:
        with self._lock:
            return self._files.get(file_path)

    def files(self) -> list[FileRecord]:
        with self._lock:
            return list(self._files.values())

    def definitions(self) -> dict[str, Definition]:
        with self._lock:
            return dict(self._definitions)

    def aliases(self) -> dict[str, str]:
        with self._lock:
            return dict(self._aliases)

    def stats(self) -> IndexStats:
        with self._lock:
            return IndexStats(
                file_count=len(self._files),
                definition_count=len(self._definitions),
                alias_count=len(self._aliases),
            )
