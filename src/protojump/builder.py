"""Index builder: discover schema files, check freshness, re-parse into the store."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from protojump.models import FileRecord
from protojump.scanner import scan

if TYPE_CHECKING:
    from collections.abc import Sequence

    from protojump.store import DefinitionStore

logger = logging.getLogger(__name__)


@dataclass
class BuildResult:
    """Summary of a ``build_full`` pass."""

    files_seen: int = 0
    files_parsed: int = 0
    definitions: int = 0
    skipped: bool = False  # another build was already running
    errors: list[str] = field(default_factory=list)


def file_mtime(path: str | Path) -> int:
    """Modification time in integer nanoseconds. Raises ``OSError``."""
    return Path(path).stat().st_mtime_ns


def find_schema_files(root: Path, extension: str) -> list[Path]:
    """Recursively list files ending in *extension* under *root*, sorted.

    A missing or unreadable root yields an empty list.
    """
    if not root.is_dir():
        logger.debug("Schema directory %s does not exist, skipping", root)
        return []
    try:
        return sorted(p for p in root.rglob(f"*{extension}") if p.is_file())
    except OSError:
        logger.warning("Failed to list %s", root, exc_info=True)
        return []


class IndexBuilder:
    """Drives the :class:`DefinitionStore` from files on disk.

    ``build_full`` is guarded by a non-blocking lock: a call made while a
    build is running returns at once with ``skipped=True``.
    """

    def __init__(
        self,
        store: DefinitionStore,
        roots: Sequence[Path],
        *,
        extension: str = ".proto",
    ) -> None:
        self._store = store
        self._roots = list(roots)
        self._extension = extension
        self._build_lock = threading.Lock()

    @property
    def roots(self) -> list[Path]:
        return list(self._roots)

    @property
    def extension(self) -> str:
        return self._extension

    @property
    def is_building(self) -> bool:
        return self._build_lock.locked()

    def build_full(self) -> BuildResult:
        """Run ``update_one`` over every schema file under every root."""
        if not self._build_lock.acquire(blocking=False):
            logger.info("Index build already in progress")
            return BuildResult(skipped=True)
        try:
            result = BuildResult()
            for root in self._roots:
                for path in find_schema_files(root, self._extension):
                    result.files_seen += 1
                    try:
                        if self._refresh(str(path)):
                            result.files_parsed += 1
                    except (OSError, UnicodeDecodeError) as exc:
                        logger.warning("Failed to index %s: %s", path, exc)
                        result.errors.append(f"{path}: {exc}")
            result.definitions = self._store.stats().definition_count
            logger.info(
                "Proto index built: %d files (%d parsed), %d definitions",
                result.files_seen,
                result.files_parsed,
                result.definitions,
            )
            return result
        finally:
            self._build_lock.release()

    def update_one(self, file_path: str | Path) -> bool:
        """Re-parse *file_path* if it changed since it was last indexed.

        Returns True when the store was updated.  A missing file is a no-op;
        read failures are logged and reported as False.
        """
        try:
            return self._refresh(str(file_path))
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Failed to index %s: %s", file_path, exc)
            return False

    def _refresh(self, file_path: str) -> bool:
        path = Path(file_path)
        if not path.is_file():
            return False

        last_modified = file_mtime(path)
        existing = self._store.get_file(file_path)
        if existing is not None and existing.last_modified >= last_modified:
            logger.debug("%s is up to date", file_path)
            return False

        content = path.read_text(encoding="utf-8")
        definitions, package_name = scan(content, file_path)
        self._store.put_file(
            FileRecord(
                file_path=file_path,
                last_modified=last_modified,
                definitions=definitions,
                package_name=package_name,
            )
        )
        logger.info("Updated proto index for %s, found %d definitions", file_path, len(definitions))
        return True
