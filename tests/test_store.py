"""Tests for protojump.store — per-file replace semantics and the flat name index."""

from __future__ import annotations

import threading

from protojump.models import Definition, FileRecord
from protojump.store import DefinitionStore


def _record(path: str, *names: str, mtime: int = 1, kind: str = "message") -> FileRecord:
    definitions = {
        name: Definition(name=name, kind=kind, file_path=path, line=i + 1, column=0)  # type: ignore[arg-type]
        for i, name in enumerate(names)
    }
    return FileRecord(file_path=path, last_modified=mtime, definitions=definitions)


class TestPutFile:
    def test_put_and_lookup(self) -> None:
        store = DefinitionStore()
        store.put_file(_record("/a.proto", "A", "B"))
        found = store.lookup_by_name("A")
        assert found is not None
        assert found.file_path == "/a.proto"
        assert store.resolve_alias("B") == "B"

    def test_replace_removes_dropped_names(self) -> None:
        """Re-putting a file whose declaration set shrank leaves no stale names."""
        store = DefinitionStore()
        store.put_file(_record("/a.proto", "A", "B", "C"))
        store.put_file(_record("/a.proto", "A", mtime=2))
        assert store.lookup_by_name("A") is not None
        assert store.lookup_by_name("B") is None
        assert store.lookup_by_name("C") is None
        assert store.stats().definition_count == 1
        assert store.stats().alias_count == 1
        assert store.get_file("/a.proto").last_modified == 2  # type: ignore[union-attr]

    def test_collision_last_write_wins(self) -> None:
        store = DefinitionStore()
        store.put_file(_record("/a.proto", "Shared"))
        store.put_file(_record("/b.proto", "Shared"))
        assert store.lookup_by_name("Shared").file_path == "/b.proto"  # type: ignore[union-attr]

    def test_reparse_of_loser_keeps_winner(self) -> None:
        """Re-parsing the file that lost a collision does not unlink the winner."""
        store = DefinitionStore()
        store.put_file(_record("/a.proto", "Shared", "OnlyA"))
        store.put_file(_record("/b.proto", "Shared"))
        store.put_file(_record("/a.proto", "OnlyA", mtime=2))
        assert store.lookup_by_name("Shared").file_path == "/b.proto"  # type: ignore[union-attr]


class TestRemoveFile:
    def test_remove_drops_all_names(self) -> None:
        store = DefinitionStore()
        store.put_file(_record("/a.proto", "A", "B"))
        store.put_file(_record("/b.proto", "C"))
        assert store.remove_file("/a.proto") is True
        assert store.lookup_by_name("A") is None
        assert store.lookup_by_name("B") is None
        assert store.lookup_by_name("C") is not None
        assert store.stats().file_count == 1

    def test_remove_absent_is_noop(self) -> None:
        store = DefinitionStore()
        store.put_file(_record("/a.proto", "A"))
        assert store.remove_file("/missing.proto") is False
        assert store.stats().definition_count == 1

    def test_remove_winner_falls_back_to_other_owner(self) -> None:
        store = DefinitionStore()
        store.put_file(_record("/a.proto", "Shared"))
        store.put_file(_record("/b.proto", "Shared"))
        store.remove_file("/b.proto")
        found = store.lookup_by_name("Shared")
        assert found is not None
        assert found.file_path == "/a.proto"
        assert store.resolve_alias("Shared") == "Shared"


class TestClearAndStats:
    def test_clear(self) -> None:
        store = DefinitionStore()
        store.put_file(_record("/a.proto", "A"))
        store.clear()
        assert store.stats().to_dict() == {"fileCount": 0, "definitionCount": 0, "aliasCount": 0}
        assert store.lookup_by_name("A") is None

    def test_stats_counts(self) -> None:
        store = DefinitionStore()
        store.put_file(_record("/a.proto", "A", "B"))
        store.put_file(_record("/b.proto", "C"))
        stats = store.stats()
        assert stats.file_count == 2
        assert stats.definition_count == 3
        assert stats.alias_count == 3


class TestRestore:
    def test_restore_drops_orphans(self) -> None:
        """Flattened entries with no owning record are not restored."""
        record = _record("/a.proto", "A")
        orphan = Definition(name="Ghost", kind="enum", file_path="/gone.proto", line=1, column=0)
        store = DefinitionStore()
        store.restore(
            [record],
            {"A": record.definitions["A"], "Ghost": orphan},
            {"A": "A", "Ghost": "Ghost"},
        )
        assert store.lookup_by_name("A") is not None
        assert store.lookup_by_name("Ghost") is None
        assert store.aliases() == {"A": "A"}
        assert store.stats().alias_count == store.stats().definition_count == 1

    def test_restore_replaces_content(self) -> None:
        store = DefinitionStore()
        store.put_file(_record("/old.proto", "Old"))
        record = _record("/a.proto", "A")
        store.restore([record], dict(record.definitions), {"A": "A"})
        assert store.lookup_by_name("Old") is None
        assert store.stats().file_count == 1


class TestConcurrentReaders:
    def test_reader_never_sees_partial_record(self) -> None:
        """While a file flips between two declaration sets, names stay paired."""
        store = DefinitionStore()
        first = _record("/a.proto", "A1", "A2")
        second = _record("/a.proto", "B1", "B2", mtime=2)
        store.put_file(first)
        stop = threading.Event()
        bad: list[tuple[bool, bool]] = []

        def writer() -> None:
            for i in range(2000):
                store.put_file(second if i % 2 else first)
            stop.set()

        thread = threading.Thread(target=writer)
        thread.start()
        while not stop.is_set():
            defs = store.definitions()
            has_a = "A1" in defs and "A2" in defs
            has_b = "B1" in defs and "B2" in defs
            if has_a == has_b:
                bad.append((has_a, has_b))
        thread.join()
        assert bad == []
