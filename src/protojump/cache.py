"""Versioned JSON snapshot of the index for warm starts.

The snapshot is never trusted over the filesystem: after a load the
builder still re-checks every file's modification time.  Any problem with
a snapshot (unreadable, malformed, wrong version) means a cold start.
"""

from __future__ import annotations

import json
import logging
import os
import time
from typing import TYPE_CHECKING, Any

from protojump.models import Definition, FileRecord
from protojump.store import DefinitionStore

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)


def snapshot_dict(store: DefinitionStore, version: str) -> dict[str, Any]:
    """Build the snapshot mapping for *store*."""
    return {
        "version": version,
        "timestamp": int(time.time() * 1000),
        "files": {record.file_path: record.to_dict() for record in store.files()},
        "definitions": {name: d.to_dict() for name, d in store.definitions().items()},
        "mappings": store.aliases(),
    }


def dump_snapshot(store: DefinitionStore, version: str) -> bytes:
    return json.dumps(snapshot_dict(store, version), indent=2, ensure_ascii=False).encode("utf-8")


def load_snapshot(data: bytes | str, expected_version: str) -> DefinitionStore | None:
    """Rebuild a store from snapshot *data*.

    Returns None when the version differs from *expected_version* or the
    payload is malformed; a partially decoded store is never returned.
    """
    try:
        raw = json.loads(data)
    except (json.JSONDecodeError, UnicodeDecodeError, RecursionError):
        logger.warning("Proto index cache is not valid JSON, rebuilding index")
        return None
    if not isinstance(raw, dict):
        logger.warning("Proto index cache has unexpected shape, rebuilding index")
        return None

    version = raw.get("version")
    if version != expected_version:
        logger.info(
            "Cache version mismatch (%r != %r), rebuilding index", version, expected_version
        )
        return None

    try:
        files = [FileRecord.from_dict(entry) for entry in _mapping(raw, "files").values()]
        definitions = {
            str(name): Definition.from_dict(entry)
            for name, entry in _mapping(raw, "definitions").items()
        }
        mappings = _mapping(raw, "mappings")
        if not all(isinstance(v, str) for v in mappings.values()):
            raise TypeError("mappings values must be strings")
    except (KeyError, TypeError, ValueError) as exc:
        logger.warning("Proto index cache is malformed (%s), rebuilding index", exc)
        return None

    store = DefinitionStore()
    store.restore(files, definitions, {str(k): v for k, v in mappings.items()})
    return store


def _mapping(raw: dict[str, Any], key: str) -> dict[str, Any]:
    value = raw[key]
    if not isinstance(value, dict):
        raise TypeError(f"{key} must be a mapping")
    return value


def save_cache(store: DefinitionStore, path: Path, version: str) -> bool:
    """Write a snapshot of *store* to *path*. Non-fatal on failure."""
    tmp_path = path.with_name(path.name + ".tmp")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path.write_bytes(dump_snapshot(store, version))
        os.replace(tmp_path, path)
    except OSError:
        logger.warning("Failed to save proto index cache to %s", path, exc_info=True)
        return False
    logger.info("Saved cache: %d definitions", store.stats().definition_count)
    return True


def load_cache(path: Path, version: str) -> DefinitionStore | None:
    """Read a snapshot from *path*; None when absent, unreadable or rejected."""
    if not path.exists():
        return None
    try:
        data = path.read_bytes()
    except OSError:
        logger.warning("Failed to read proto index cache %s", path, exc_info=True)
        return None
    store = load_snapshot(data, version)
    if store is not None:
        logger.info("Loaded cache: %d definitions", store.stats().definition_count)
    return store
