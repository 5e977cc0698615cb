"""ProtoIndex: the one object callers hold to look up schema definitions.

Owns the store, the builder and the cache location.  Construct it once,
call :meth:`ProtoIndex.initialize`, keep it for the life of the process,
and call :meth:`ProtoIndex.dispose` on shutdown (or use it as a context
manager).
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from protojump.builder import BuildResult, IndexBuilder, file_mtime
from protojump.cache import load_cache, save_cache
from protojump.enum_resolver import find_enum_value
from protojump.store import DefinitionStore

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import TracebackType

    from protojump.config import ProtoJumpConfig
    from protojump.models import Definition, IndexStats
    from protojump.watcher import FileEvent

logger = logging.getLogger(__name__)


def normalize_path(path: str | Path) -> str:
    """Absolute string form used as the file key throughout the index."""
    return str(Path(path).absolute())


class ProtoIndex:
    def __init__(
        self,
        roots: Sequence[str | Path],
        *,
        extension: str = ".proto",
        cache_path: Path | None = None,
        cache_version: str = "1.0",
    ) -> None:
        self._store = DefinitionStore()
        self._builder = IndexBuilder(
            self._store,
            [Path(normalize_path(r)) for r in roots],
            extension=extension,
        )
        self._cache_path = cache_path
        self._cache_version = cache_version

    @classmethod
    def from_config(
        cls,
        project_root: Path,
        config: ProtoJumpConfig,
        *,
        use_cache: bool = True,
    ) -> ProtoIndex:
        cache_path = config.cache_path(project_root) if config.enable_cache and use_cache else None
        return cls(
            config.search_roots(project_root),
            extension=config.extension,
            cache_path=cache_path,
            cache_version=config.cache_version,
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialize(self) -> BuildResult:
        """Warm-start from the cache if configured, then re-validate every file."""
        logger.info("Initializing proto index")
        self.load()
        return self._builder.build_full()

    def dispose(self) -> None:
        self.save()

    def __enter__(self) -> ProtoIndex:
        self.initialize()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.dispose()

    def load(self) -> bool:
        """Replace the store content with the cached snapshot, if accepted."""
        if self._cache_path is None:
            return False
        cached = load_cache(self._cache_path, self._cache_version)
        if cached is None:
            self._store.clear()
            return False
        self._store.restore(cached.files(), cached.definitions(), cached.aliases())
        return True

    def save(self) -> bool:
        if self._cache_path is None:
            return False
        return save_cache(self._store, self._cache_path, self._cache_version)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def find_definition(self, name: str) -> Definition | None:
        """Look up a message/enum by generated-code or schema name.

        The owning file is re-checked first: a deleted file yields None and
        a modified file is re-parsed before answering.
        """
        schema_name = self._store.resolve_alias(name)
        definition = self._store.lookup_by_name(schema_name)
        if definition is None:
            return None
        if self._is_fresh(definition.file_path):
            return definition

        if Path(definition.file_path).is_file():
            logger.info("%s changed since it was indexed, re-parsing", definition.file_path)
            self._builder.update_one(definition.file_path)
        else:
            # Another file declaring the same name may take over.
            self._store.remove_file(definition.file_path)
        definition = self._store.lookup_by_name(self._store.resolve_alias(name))
        if definition is None or not self._is_fresh(definition.file_path):
            return None
        return definition

    def find_enum_value_definition(self, enum_name: str, value_name: str) -> Definition | None:
        """Locate *value_name* inside enum *enum_name*.

        None when the enum is unknown (or names a message); the enum's own
        definition when the value line cannot be pinpointed.
        """
        enum_definition = self.find_definition(enum_name)
        if enum_definition is None or enum_definition.kind != "enum":
            return None
        try:
            content = Path(enum_definition.file_path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            logger.warning(
                "Failed to read %s while resolving %s.%s",
                enum_definition.file_path,
                enum_name,
                value_name,
                exc_info=True,
            )
            return enum_definition
        return find_enum_value(content, enum_definition, value_name)

    def _is_fresh(self, file_path: str) -> bool:
        record = self._store.get_file(file_path)
        if record is None:
            return False
        try:
            return record.last_modified >= file_mtime(file_path)
        except OSError:
            return False

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------

    def rebuild(self) -> BuildResult:
        return self._builder.build_full()

    def update_file(self, file_path: str | Path) -> bool:
        return self._builder.update_one(normalize_path(file_path))

    def remove_file(self, file_path: str | Path) -> bool:
        return self._store.remove_file(normalize_path(file_path))

    def apply_event(self, event: FileEvent) -> bool:
        """Handle one created/changed/deleted notification."""
        if event.kind == "deleted":
            return self.remove_file(event.path)
        return self.update_file(event.path)

    def clear(self) -> None:
        self._store.clear()
        logger.info("Index cleared")

    def stats(self) -> IndexStats:
        return self._store.stats()

    @property
    def store(self) -> DefinitionStore:
        return self._store

    @property
    def builder(self) -> IndexBuilder:
        return self._builder

    @property
    def cache_path(self) -> Path | None:
        return self._cache_path
