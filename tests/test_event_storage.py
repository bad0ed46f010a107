"""
Tests for the unit-of-work event store.

Covers:
- insert/delete are invisible until save()
- in-place mutation, has_changes and rollback()
- failed commits keep staged state and raise CommitError
- EventQuery filtering and stable sorting
- JsonEventStore file layout, reload and corrupt files
"""
import json

import pytest

from forward.errors import CommitError, FetchError
from forward.event_storage import (
    EventQuery,
    JsonEventStore,
    MemoryEventStore,
    STORAGE_FORMAT_VERSION,
    create_event_store,
)

from conftest import FailingStore, make_event


# ---------------------------------------------------------------------------
# Unit of work
# ---------------------------------------------------------------------------

class TestUnitOfWork:
    def test_insert_is_invisible_until_saved(self):
        store = MemoryEventStore()
        event = make_event()
        store.insert(event)
        assert store.fetch() == []
        assert store.has_changes

        store.save()
        assert store.fetch() == [event]
        assert not store.has_changes

    def test_fetch_returns_tracked_objects(self):
        store = MemoryEventStore([make_event()])
        first = store.fetch()[0]
        second = store.fetch()[0]
        assert first is second

    def test_mutation_is_committed_by_save(self):
        store = MemoryEventStore([make_event(title="Old")])
        event = store.fetch()[0]
        event.title = "New"
        assert store.has_changes
        store.save()

        store.reload()
        assert store.fetch()[0].title == "New"

    def test_rollback_restores_mutated_fields(self):
        store = MemoryEventStore([make_event(title="Old")])
        event = store.fetch()[0]
        event.title = "New"
        event.is_archived = True
        store.rollback()
        assert event.title == "Old"
        assert event.is_archived is False
        assert not store.has_changes

    def test_rollback_discards_inserts(self):
        store = MemoryEventStore()
        store.insert(make_event())
        store.rollback()
        store.save()
        assert store.count() == 0

    def test_delete_then_save(self):
        keep = make_event(title="Keep")
        drop = make_event(title="Drop", days=5)
        store = MemoryEventStore([keep, drop])
        store.delete(store.get(drop.id))
        assert store.count() == 2
        store.save()
        assert store.fetch() == [keep]

    def test_delete_of_unsaved_insert_cancels_it(self):
        store = MemoryEventStore()
        event = make_event()
        store.insert(event)
        store.delete(event)
        assert not store.has_changes
        store.save()
        assert store.count() == 0

    def test_failed_save_keeps_staged_changes(self):
        store = FailingStore()
        event = make_event()
        store.insert(event)
        store.fail_writes = True
        with pytest.raises(CommitError):
            store.save()
        assert store.has_changes
        assert store.fetch() == []

        store.fail_writes = False
        store.save()
        assert store.fetch() == [event]

    def test_save_before_any_successful_load_raises_commit_error(self):
        store = FailingStore([make_event(title="Existing")])
        store.fail_reads = True
        store.insert(make_event(title="New"))
        with pytest.raises(CommitError):
            store.save()
        assert store.write_count == 0

    def test_failed_read_raises_fetch_error(self):
        store = FailingStore([make_event()])
        store.fail_reads = True
        with pytest.raises(FetchError):
            store.fetch()

    def test_get_missing_returns_none(self):
        store = MemoryEventStore([make_event()])
        assert store.get("does-not-exist") is None


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------

class TestQueries:
    def setup_method(self):
        self.soon = make_event(title="Soon", days=2)
        self.later = make_event(title="Later", days=30)
        self.old = make_event(title="Old", days=-4, is_archived=True)
        self.store = MemoryEventStore([self.later, self.old, self.soon])

    def test_filter_by_archived(self):
        assert self.store.fetch(EventQuery(is_archived=False)) == [self.soon, self.later]
        assert self.store.fetch(EventQuery(is_archived=True)) == [self.old]

    def test_descending_sort(self):
        result = self.store.fetch(EventQuery(descending=True))
        assert result == [self.later, self.soon, self.old]

    def test_filter_by_ids(self):
        query = EventQuery(event_ids=frozenset({self.soon.id, self.old.id}))
        assert self.store.fetch(query) == [self.old, self.soon]

    def test_ties_broken_by_created_at(self):
        first = make_event(title="A", days=7, created_offset=0)
        second = make_event(title="B", days=7, created_offset=10)
        store = MemoryEventStore([second, first])
        assert store.fetch() == [first, second]

    def test_sort_by_title(self):
        result = self.store.fetch(EventQuery(sort_by="title"))
        assert [e.title for e in result] == ["Later", "Old", "Soon"]

    def test_unknown_sort_key(self):
        with pytest.raises(ValueError):
            EventQuery(sort_by="location")


# ---------------------------------------------------------------------------
# JSON file backend
# ---------------------------------------------------------------------------

class TestJsonEventStore:
    def test_missing_file_is_empty(self, tmp_path):
        store = JsonEventStore(tmp_path / "events.json")
        assert store.fetch() == []

    def test_save_and_reopen(self, tmp_path):
        path = tmp_path / "nested" / "events.json"
        event = make_event(location="Rome")
        store = create_event_store(path)
        store.insert(event)
        store.save()

        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["version"] == STORAGE_FORMAT_VERSION
        assert [r["id"] for r in data["events"]] == [event.id]

        reopened = JsonEventStore(path).fetch()
        assert reopened == [event]
        assert reopened[0].location == "Rome"
        assert reopened[0].date == event.date

    def test_no_temp_files_left_behind(self, tmp_path):
        store = JsonEventStore(tmp_path / "events.json")
        store.insert(make_event())
        store.save()
        assert [p.name for p in tmp_path.iterdir()] == ["events.json"]

    def test_corrupt_file_raises_fetch_error(self, tmp_path):
        path = tmp_path / "events.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(FetchError):
            JsonEventStore(path).fetch()

    def test_newer_version_raises_fetch_error(self, tmp_path):
        path = tmp_path / "events.json"
        path.write_text(json.dumps({"version": STORAGE_FORMAT_VERSION + 1, "events": []}))
        with pytest.raises(FetchError):
            JsonEventStore(path).fetch()

    def test_record_missing_fields_raises_fetch_error(self, tmp_path):
        path = tmp_path / "events.json"
        path.write_text(json.dumps({"version": 1, "events": [{"id": "x", "title": "T"}]}))
        with pytest.raises(FetchError):
            JsonEventStore(path).fetch()
