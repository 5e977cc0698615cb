"""Change watcher: keep a ProtoIndex current from filesystem notifications."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Literal

from watchfiles import Change
from watchfiles import watch as fs_watch

if TYPE_CHECKING:
    import threading
    from collections.abc import Callable, Iterable

    from protojump.index import ProtoIndex

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_MS = 500

EventKind = Literal["created", "changed", "deleted"]

_CHANGE_KINDS: dict[Change, EventKind] = {
    Change.added: "created",
    Change.modified: "changed",
    Change.deleted: "deleted",
}


@dataclass(frozen=True)
class FileEvent:
    """One schema file notification."""

    kind: EventKind
    path: str


def _is_relevant(path: Path, extension: str, roots: Iterable[Path]) -> bool:
    """Keep schema files, ignoring editor temp files and hidden directories."""
    if path.name.startswith("~") or path.name.endswith(".tmp"):
        return False
    if path.suffix != extension:
        return False
    for root in roots:
        try:
            rel = path.relative_to(root)
        except ValueError:
            continue
        return not any(part.startswith(".") for part in rel.parts[:-1])
    return False


def events_from_changes(
    changes: Iterable[tuple[Change, str]],
    extension: str,
    roots: Iterable[Path],
) -> list[FileEvent]:
    """Convert a ``watchfiles`` batch into :class:`FileEvent` values.

    Events are ordered by path so a batch is applied deterministically.
    """
    root_list = list(roots)
    events: list[FileEvent] = []
    for change, path_str in changes:
        kind = _CHANGE_KINDS.get(change)
        if kind is None or not _is_relevant(Path(path_str), extension, root_list):
            continue
        events.append(FileEvent(kind=kind, path=path_str))
    return sorted(events, key=lambda e: e.path)


def apply_event(index: ProtoIndex, event: FileEvent) -> bool:
    """Route *event* to the index. Returns True if the index changed."""
    logger.info("Proto file %s: %s", event.kind, event.path)
    return index.apply_event(event)


def watch(
    index: ProtoIndex,
    *,
    debounce_ms: int = DEFAULT_DEBOUNCE_MS,
    stop_event: threading.Event | None = None,
    callback: Callable[[FileEvent, bool], None] | None = None,
) -> None:
    """Block, applying schema file changes under the index roots until stopped.

    *callback* receives each applied event and whether the index changed.
    """
    extension = index.builder.extension
    watch_dirs = [root for root in index.builder.roots if root.is_dir()]
    if not watch_dirs:
        logger.warning("No schema directories to watch")
        return

    logger.info(
        "Watching %d dir(s): %s",
        len(watch_dirs),
        ", ".join(str(d) for d in watch_dirs),
    )
    for batch in fs_watch(*watch_dirs, debounce=debounce_ms, stop_event=stop_event):
        for event in events_from_changes(batch, extension, watch_dirs):
            changed = apply_event(index, event)
            if callback is not None:
                callback(event, changed)
