"""
Event list view-model.

Owns the filtered, sorted projection of stored events that the UI shows,
the archival rule, creation/editing/deletion and the selection-mode state
machine. Every mutation goes through the EventStore and is committed
before the list is re-queried, so the published list always matches what
is on disk.

All methods must be called on the thread that owns this object (the Qt
main thread). Signals are emitted synchronously after state changes.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional, Union
import sys

from PySide6.QtCore import QObject, Signal

from .event import Event, EventFilter, EDITABLE_FIELDS
from .event_storage import EventStore, EventQuery
from .errors import FetchError, CommitError, ValidationError
from .config import LabelsConfig
from .toast import ToastNotifier, ToastStyle, Toast, DEFAULT_TOAST_DURATION
from .timezone_utils import now_utc, to_utc_datetime


def _debug_print(msg: str) -> None:
    timestamp = datetime.now().strftime("%H:%M:%S")
    print(f"[{timestamp}] MODEL: {msg}", file=sys.stderr)


# ==================== Pending Delete ====================

@dataclass(frozen=True)
class NoPendingDelete:
    """Nothing is armed."""


@dataclass(frozen=True)
class SingleDelete:
    """One event is waiting for delete confirmation."""
    event_id: str


@dataclass(frozen=True)
class BulkDelete:
    """The current selection is waiting for delete confirmation."""
    event_ids: frozenset


PendingDelete = Union[NoPendingDelete, SingleDelete, BulkDelete]

NO_PENDING_DELETE = NoPendingDelete()


class EventListViewModel(QObject):
    """
    View-model behind the event list.

    Publishes `events`, `filter`, `selection_mode`, `selected_ids`,
    `pending_delete` and `toast`; the UI calls the command methods.
    """

    events_changed = Signal(object)
    filter_changed = Signal(object)
    selection_changed = Signal()
    pending_delete_changed = Signal(object)
    toast_changed = Signal(object)

    def __init__(
        self,
        store: EventStore,
        labels: Optional[LabelsConfig] = None,
        toast_duration: float = DEFAULT_TOAST_DURATION,
        clock: Callable[[], datetime] = now_utc,
        parent=None,
    ):
        super().__init__(parent)
        self._store = store
        self.labels = labels or LabelsConfig()
        self._clock = clock

        self._events: list[Event] = []
        self._filter = EventFilter.FUTURE
        self._selection_mode = False
        self._selected_ids: set[str] = set()
        self._pending_delete: PendingDelete = NO_PENDING_DELETE

        self._toasts = ToastNotifier(default_duration=toast_duration, parent=self)
        self._toasts.toast_changed.connect(self.toast_changed)

    # ==================== Published State ====================

    @property
    def events(self) -> list[Event]:
        return list(self._events)

    @property
    def filter(self) -> EventFilter:
        return self._filter

    @property
    def selection_mode(self) -> bool:
        return self._selection_mode

    @property
    def selected_ids(self) -> frozenset:
        return frozenset(self._selected_ids)

    @property
    def pending_delete(self) -> PendingDelete:
        return self._pending_delete

    @property
    def is_confirmation_pending(self) -> bool:
        return not isinstance(self._pending_delete, NoPendingDelete)

    @property
    def event_to_delete(self) -> Optional[Event]:
        """The armed single-delete target, if it is in the current view."""
        if isinstance(self._pending_delete, SingleDelete):
            for event in self._events:
                if event.id == self._pending_delete.event_id:
                    return event
        return None

    @property
    def toast(self) -> Optional[Toast]:
        return self._toasts.current

    def _set_events(self, events: list[Event]) -> None:
        self._events = events
        self.events_changed.emit(list(events))

    def _set_pending_delete(self, pending: PendingDelete) -> None:
        if pending != self._pending_delete:
            self._pending_delete = pending
            self.pending_delete_changed.emit(pending)

    # ==================== Loading ====================

    def initialize(self) -> None:
        """Archive anything that has passed, then load the current filter."""
        self.archive_past_events()
        self.fetch()

    def set_filter(self, new_filter: EventFilter) -> None:
        """Switch between future and past events."""
        if new_filter == self._filter:
            return
        self._filter = new_filter
        self.filter_changed.emit(new_filter)
        self.fetch()

    def fetch(self, filter_override: Optional[EventFilter] = None) -> None:
        """
        Re-query the store for the active filter and publish the result.

        A failing query leaves an empty list; it is logged, never raised.
        """
        active = filter_override or self._filter
        query = EventQuery(
            is_archived=active.is_archived,
            sort_by="date",
            descending=active.descending,
        )
        try:
            events = self._store.fetch(query)
        except FetchError as e:
            _debug_print(f"Failed to fetch events: {e}")
            events = []
        self._set_events(events)

    def archive_past_events(self) -> int:
        """
        Mark every non-archived event whose day has passed as archived.

        Commits once for the whole batch. Returns the number archived.
        """
        try:
            candidates = self._store.fetch(EventQuery(is_archived=False))
        except FetchError as e:
            _debug_print(f"Failed to archive past events: {e}")
            return 0

        now = self._clock()
        archived = 0
        for event in candidates:
            if event.is_past(now):
                event.is_archived = True
                archived += 1

        if archived:
            try:
                self._store.save()
                _debug_print(f"Archived {archived} past events")
            except CommitError as e:
                _debug_print(f"Failed to archive past events: {e}")
                self._store.rollback()
                archived = 0

        self.fetch()
        return archived

    # ==================== Create / Edit ====================

    def add_event(
        self,
        title: str,
        emoji: str,
        date: datetime,
        location: Optional[str] = None,
        category: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Event:
        """
        Create and commit a new event.

        Raises CommitError if it could not be saved; the event is then
        discarded and the list is unchanged.
        """
        event = Event(
            title=title,
            emoji=emoji,
            date=date,
            location=location,
            category=category,
            notes=notes,
            is_archived=False,
            created_at=self._clock(),
        )
        self._store.insert(event)

        try:
            self._store.save()
        except CommitError as e:
            _debug_print(f"Failed to save event: {e}")
            self._store.rollback()
            raise

        self.fetch()
        return event

    def update_event(self, event: Event, **changes) -> Event:
        """
        Edit fields of an existing event in place and commit.

        Raises ValidationError for fields that cannot be edited, FetchError
        if the event cannot be looked up and CommitError if saving fails
        (the event's fields are restored).
        """
        unknown = set(changes) - set(EDITABLE_FIELDS)
        if unknown:
            raise ValidationError(
                f"Cannot edit event fields: {', '.join(sorted(unknown))}",
                sorted(unknown),
            )
        if "title" in changes and not (changes["title"] or "").strip():
            raise ValidationError("Title is required", ["title"])

        stored = self._store.get(event.id)
        if stored is None:
            raise ValidationError(f"Event {event.id} no longer exists")

        for name, value in changes.items():
            if name == "date":
                value = to_utc_datetime(value)
            setattr(stored, name, value)

        try:
            self._store.save()
        except CommitError as e:
            _debug_print(f"Failed to update event {event.id}: {e}")
            self._store.rollback()
            self.fetch()
            raise

        self.fetch()
        return stored

    # ==================== Single Delete ====================

    def confirm_delete(self, event: Event) -> None:
        """Arm a single delete (ignored while selecting)."""
        if self._selection_mode:
            return
        self._set_pending_delete(SingleDelete(event.id))

    def cancel_delete(self) -> None:
        """Disarm any pending delete without touching the store."""
        self._set_pending_delete(NO_PENDING_DELETE)

    # ==================== Selection Mode ====================

    def enter_selection_mode(self) -> None:
        self._selection_mode = True
        self._selected_ids.clear()
        self._set_pending_delete(NO_PENDING_DELETE)
        self.selection_changed.emit()

    def exit_selection_mode(self) -> None:
        self._selection_mode = False
        self._selected_ids.clear()
        self._set_pending_delete(NO_PENDING_DELETE)
        self.selection_changed.emit()

    def toggle_selection(self, event: Event) -> None:
        if event.id in self._selected_ids:
            self._selected_ids.remove(event.id)
        else:
            self._selected_ids.add(event.id)

        # An armed bulk delete always refers to the live selection
        if isinstance(self._pending_delete, BulkDelete):
            if self._selected_ids:
                self._set_pending_delete(BulkDelete(frozenset(self._selected_ids)))
            else:
                self._set_pending_delete(NO_PENDING_DELETE)
        self.selection_changed.emit()

    def is_selected(self, event: Event) -> bool:
        return event.id in self._selected_ids

    def select_all(self) -> None:
        """Select every event in the current view."""
        if not self._selection_mode:
            return
        self._selected_ids = {e.id for e in self._events}
        if isinstance(self._pending_delete, BulkDelete):
            self._set_pending_delete(BulkDelete(frozenset(self._selected_ids)))
        self.selection_changed.emit()

    def confirm_delete_selected(self) -> None:
        """Arm a bulk delete of the current selection."""
        if not self._selection_mode:
            return
        if not self._selected_ids:
            self.present_toast(self.labels.toast_select_events, ToastStyle.ERROR)
            return
        self._set_pending_delete(BulkDelete(frozenset(self._selected_ids)))

    # ==================== Commit Point ====================

    def delete_confirmed(self) -> None:
        """Carry out whichever delete is armed, then disarm."""
        pending = self._pending_delete
        if isinstance(pending, BulkDelete):
            self._delete_selected_events()
        elif isinstance(pending, SingleDelete):
            self._delete_single_event(pending.event_id)
        self._set_pending_delete(NO_PENDING_DELETE)

    def _delete_single_event(self, event_id: str) -> None:
        try:
            event = self._store.get(event_id)
        except FetchError as e:
            _debug_print(f"Failed to look up event {event_id}: {e}")
            self.present_toast(self.labels.toast_event_delete_failed, ToastStyle.ERROR)
            return

        if event is None:
            _debug_print(f"Event {event_id} no longer exists, nothing to delete")
            self.fetch()
            return

        self._store.delete(event)
        try:
            self._store.save()
        except CommitError as e:
            _debug_print(f"Failed to delete event: {e}")
            self._store.rollback()
            self.fetch()
            self.present_toast(self.labels.toast_event_delete_failed, ToastStyle.ERROR)
            return

        self.fetch()
        self.present_toast(self.labels.toast_event_deleted, ToastStyle.SUCCESS)

    def _delete_selected_events(self) -> None:
        ids = frozenset(self._selected_ids)
        if not ids:
            return

        try:
            doomed = self._store.fetch(EventQuery(event_ids=ids))
        except FetchError as e:
            _debug_print(f"Failed to look up selected events: {e}")
            self.present_toast(self.labels.toast_events_delete_failed, ToastStyle.ERROR)
            return

        for event in doomed:
            self._store.delete(event)
        try:
            self._store.save()
        except CommitError as e:
            _debug_print(f"Failed to delete selected events: {e}")
            self._store.rollback()
            self.fetch()
            self.present_toast(self.labels.toast_events_delete_failed, ToastStyle.ERROR)
            return

        _debug_print(f"Deleted {len(doomed)} events")
        self.fetch()
        self.present_toast(self.labels.toast_events_deleted, ToastStyle.SUCCESS)
        self.exit_selection_mode()

    # ==================== Toasts ====================

    def present_toast(self, message: str, style: ToastStyle,
                      duration: Optional[float] = None) -> Toast:
        return self._toasts.present(message, style, duration)

    def dismiss_toast(self) -> None:
        self._toasts.dismiss()
