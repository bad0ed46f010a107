"""
Persistent Event Storage for Forward Countdown.

The store is a small unit of work: insert() and delete() stage changes,
objects handed out by fetch() may be mutated in place, and save() commits
everything at once. rollback() throws staged work away and restores the
tracked objects to their last committed values.

fetch() only matches against committed records, so uncommitted state is
never visible to a query.
"""

import json
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional
import sys
import tempfile

from .event import Event
from .errors import FetchError, CommitError


def _debug_print(msg: str) -> None:
    timestamp = datetime.now().strftime("%H:%M:%S")
    print(f"[{timestamp}] STORE: {msg}", file=sys.stderr)


STORAGE_FORMAT_VERSION = 1

SORT_KEYS = ("date", "created_at", "title")


@dataclass(frozen=True)
class EventQuery:
    """
    Plain-data query against the store.

    None for a criterion means "don't filter on it". Results are sorted by
    `sort_by`, ties broken by created_at then id so the order is stable.
    """
    is_archived: Optional[bool] = None
    event_ids: Optional[frozenset] = None
    sort_by: str = "date"
    descending: bool = False

    def __post_init__(self):
        if self.sort_by not in SORT_KEYS:
            raise ValueError(f"Unsupported sort key: {self.sort_by}")

    def matches(self, record: dict) -> bool:
        if self.is_archived is not None and bool(record.get("is_archived")) != self.is_archived:
            return False
        if self.event_ids is not None and record["id"] not in self.event_ids:
            return False
        return True


class EventStore(ABC):
    """
    Abstract unit-of-work event store.

    Backends only implement loading and writing the full record set;
    change tracking lives here.
    """

    def __init__(self):
        self._committed: Optional[dict[str, dict]] = None  # id -> record
        self._tracked: dict[str, Event] = {}  # id -> live object
        self._inserted: set[str] = set()
        self._deleted: set[str] = set()

    # ==================== Backend Hooks ====================

    @abstractmethod
    def _load_records(self) -> list[dict]:
        """Load all committed records. Raise on failure."""
        pass

    @abstractmethod
    def _write_records(self, records: list[dict]) -> None:
        """Atomically replace all records. Raise on failure."""
        pass

    # ==================== Unit of Work ====================

    def _ensure_loaded(self) -> dict[str, dict]:
        if self._committed is None:
            try:
                records = self._load_records()
                self._committed = {r["id"]: r for r in records}
            except Exception as e:
                raise FetchError(f"Could not load events: {e}") from e
        return self._committed

    def _track(self, record: dict) -> Event:
        event = self._tracked.get(record["id"])
        if event is None:
            event = Event.from_dict(record)
            self._tracked[event.id] = event
        return event

    def insert(self, event: Event) -> None:
        """Stage a new event for the next save()."""
        self._tracked[event.id] = event
        self._deleted.discard(event.id)
        self._inserted.add(event.id)

    def delete(self, event: Event) -> None:
        """Stage removal of an event for the next save()."""
        if event.id in self._inserted:
            # Never committed: just forget it
            self._inserted.discard(event.id)
            self._tracked.pop(event.id, None)
            return
        self._deleted.add(event.id)

    @property
    def has_changes(self) -> bool:
        """True if insert/delete are staged or a tracked object was mutated."""
        if self._inserted or self._deleted:
            return True
        committed = self._committed or {}
        return any(
            committed.get(event_id) != event.to_dict()
            for event_id, event in self._tracked.items()
        )

    def save(self) -> None:
        """
        Commit all staged inserts, deletes and in-place mutations.

        Raises CommitError if the backend cannot be read or written;
        staged changes are kept so the caller can decide to rollback().
        """
        try:
            committed = self._ensure_loaded()
        except FetchError as e:
            raise CommitError(f"Could not save events: {e}") from e
        records = dict(committed)
        for event_id in self._deleted:
            records.pop(event_id, None)
        for event_id, event in self._tracked.items():
            if event_id in self._deleted:
                continue
            if event_id in self._inserted or event_id in committed:
                records[event_id] = event.to_dict()

        try:
            self._write_records(list(records.values()))
        except Exception as e:
            raise CommitError(f"Could not save events: {e}") from e

        for event_id in self._deleted:
            self._tracked.pop(event_id, None)
        self._committed = records
        self._inserted.clear()
        self._deleted.clear()
        _debug_print(f"Committed {len(records)} events")

    def rollback(self) -> None:
        """Discard staged changes and restore tracked objects to committed values."""
        for event_id in self._inserted:
            self._tracked.pop(event_id, None)
        self._inserted.clear()
        self._deleted.clear()

        committed = self._committed or {}
        for event_id, event in list(self._tracked.items()):
            record = committed.get(event_id)
            if record is None:
                self._tracked.pop(event_id)
            else:
                event.apply_dict(record)

    def fetch(self, query: Optional[EventQuery] = None) -> list[Event]:
        """
        Return tracked Event objects whose committed record matches query.

        Raises FetchError if the backend cannot be read.
        """
        query = query or EventQuery()
        committed = self._ensure_loaded()
        try:
            events = [self._track(r) for r in committed.values() if query.matches(r)]
        except (KeyError, ValueError, TypeError) as e:
            raise FetchError(f"Corrupt event record: {e}") from e

        events.sort(
            key=lambda e: (getattr(e, query.sort_by), e.created_at, e.id),
            reverse=query.descending,
        )
        return events

    def get(self, event_id: str) -> Optional[Event]:
        """Get a single committed event by id."""
        found = self.fetch(EventQuery(event_ids=frozenset({event_id})))
        return found[0] if found else None

    def count(self) -> int:
        return len(self._ensure_loaded())

    def reload(self) -> None:
        """Forget cached committed records; the next fetch reads the backend again."""
        self.rollback()
        self._committed = None
        self._tracked.clear()


class MemoryEventStore(EventStore):
    """Event store that keeps committed records in memory only."""

    def __init__(self, events: Optional[list[Event]] = None):
        super().__init__()
        self._records: list[dict] = [e.to_dict() for e in (events or [])]

    def _load_records(self) -> list[dict]:
        return [dict(r) for r in self._records]

    def _write_records(self, records: list[dict]) -> None:
        self._records = [dict(r) for r in records]


class JsonEventStore(EventStore):
    """
    JSON file-based event store.

    Structure: {"version": 1, "updated": iso, "events": [records]}
    Writes go to a temp file in the same directory and are moved into place,
    so a failed write leaves the previous file intact.
    """

    def __init__(self, file_path: Path):
        super().__init__()
        self.file_path = Path(file_path)
        self.file_path.parent.mkdir(parents=True, exist_ok=True)
        _debug_print(f"Initialized JSON storage at {self.file_path}")

    def _load_records(self) -> list[dict]:
        if not self.file_path.exists():
            return []

        with open(self.file_path, 'r', encoding='utf-8') as f:
            data = json.load(f)

        version = data.get("version", STORAGE_FORMAT_VERSION)
        if version > STORAGE_FORMAT_VERSION:
            raise ValueError(f"Unsupported storage version {version}")

        records = data.get("events", [])
        _debug_print(f"Loaded {len(records)} events from {self.file_path.name}")
        return records

    def _write_records(self, records: list[dict]) -> None:
        data = {
            "version": STORAGE_FORMAT_VERSION,
            "updated": datetime.now().isoformat(),
            "events": records,
        }
        fd, tmp_name = tempfile.mkstemp(
            prefix=".events-", suffix=".json", dir=self.file_path.parent
        )
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            os.replace(tmp_name, self.file_path)
        except Exception:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise


def get_default_storage_file() -> Path:
    """Get the default events file respecting XDG."""
    xdg_data = os.environ.get('XDG_DATA_HOME', os.path.expanduser('~/.local/share'))
    return Path(xdg_data) / 'forward-countdown' / 'events.json'


def create_event_store(storage_file: Optional[Path] = None) -> EventStore:
    """Factory function to create the default event store."""
    if storage_file is None:
        storage_file = get_default_storage_file()
    return JsonEventStore(storage_file)
