"""
Main Window for Forward Countdown.

Renders the view-model's event list and forwards user intents to it. All
state lives in EventListViewModel; this window only reacts to its signals.
"""

from datetime import date
from typing import Optional
import sys

from PySide6.QtWidgets import (
    QMainWindow, QWidget, QVBoxLayout, QHBoxLayout, QScrollArea,
    QPushButton, QButtonGroup, QLabel, QMessageBox
)
from PySide6.QtCore import Qt, QTimer
from PySide6.QtGui import QResizeEvent, QKeySequence, QShortcut
from shiboken6 import isValid

from forward.config import Config
from forward.event import Event, EventFilter
from forward.event_storage import create_event_store
from forward.event_list_model import (
    EventListViewModel, NoPendingDelete, BulkDelete
)
from forward.ad_supply import AdSupplyCache, HttpAdSource
from forward.timezone_utils import now_utc, local_date

from .event_dialog import EventDialog, EventDetailWindow
from .widgets import EventRowWidget, SponsoredRowWidget, ToastBanner


class MainWindow(QMainWindow):
    """Main application window."""

    # How often to check whether the local day rolled over
    DAY_CHECK_INTERVAL_MS = 60 * 1000

    def __init__(self, config: Config, parent=None):
        super().__init__(parent)
        self.config = config

        self.view_model = EventListViewModel(
            create_event_store(config.storage_file),
            labels=config.labels,
            toast_duration=config.toast_duration,
            parent=self,
        )

        self.ad_cache: Optional[AdSupplyCache] = None
        if config.ads.enabled and config.ads.endpoint:
            self.ad_cache = AdSupplyCache(
                HttpAdSource(config.ads.endpoint, config.ads.ad_unit_id, config.ads.timeout),
                capacity=config.ads.cache_size,
                preload_count=config.ads.preload_count,
                interval=config.ads.interval,
                parent=self,
            )

        # Track open windows so they aren't garbage collected
        self._windows: list[QWidget] = []
        # Sponsored slot ordinal -> item shown there
        self._sponsored_items: dict = {}
        self._current_day: date = local_date(now_utc())

        self._setup_window()
        self._setup_ui()
        self._setup_shortcuts()
        self._connect_view_model()

        self.view_model.initialize()

        # Archive events at day rollover while the app stays open
        self._day_timer = QTimer(self)
        self._day_timer.timeout.connect(self._on_day_check)
        self._day_timer.start(self.DAY_CHECK_INTERVAL_MS)

    def _setup_window(self):
        """Configure main window properties."""
        self.setWindowTitle(self.config.labels.window_title)
        self.setMinimumSize(420, 560)
        self.resize(480, 720)

    def _setup_ui(self):
        """Set up the main UI layout."""
        labels = self.config.labels
        central = QWidget()
        layout = QVBoxLayout(central)
        layout.setContentsMargins(12, 12, 12, 12)
        layout.setSpacing(8)

        # Header: filter switch + actions
        header = QHBoxLayout()
        self._filter_group = QButtonGroup(self)
        self._filter_group.setExclusive(True)
        self._filter_buttons: dict[EventFilter, QPushButton] = {}
        for event_filter, text in (
            (EventFilter.FUTURE, labels.filter_future),
            (EventFilter.PAST, labels.filter_past),
        ):
            button = QPushButton(text)
            button.setCheckable(True)
            button.clicked.connect(lambda checked, f=event_filter: self.view_model.set_filter(f))
            self._filter_group.addButton(button)
            self._filter_buttons[event_filter] = button
            header.addWidget(button)
        self._filter_buttons[EventFilter.FUTURE].setChecked(True)
        header.addStretch()

        self._select_button = QPushButton(labels.button_select)
        self._select_button.clicked.connect(self._on_select_toggled)
        header.addWidget(self._select_button)

        self._delete_selected_button = QPushButton(labels.button_delete_selected)
        self._delete_selected_button.clicked.connect(self.view_model.confirm_delete_selected)
        self._delete_selected_button.hide()
        header.addWidget(self._delete_selected_button)

        self._new_button = QPushButton(labels.button_new_event)
        self._new_button.setStyleSheet(
            f"background: {self.config.colors.accent}; color: #ffffff; padding: 6px 12px;"
        )
        self._new_button.clicked.connect(self._on_new_event)
        header.addWidget(self._new_button)
        layout.addLayout(header)

        # Event list
        self._scroll = QScrollArea()
        self._scroll.setWidgetResizable(True)
        self._scroll.setHorizontalScrollBarPolicy(Qt.ScrollBarAlwaysOff)
        self._list_container = QWidget()
        self._list_layout = QVBoxLayout(self._list_container)
        self._list_layout.setContentsMargins(0, 0, 0, 0)
        self._list_layout.setSpacing(8)
        self._scroll.setWidget(self._list_container)
        layout.addWidget(self._scroll, 1)

        self.setCentralWidget(central)
        self._toast_banner = ToastBanner(self.config.colors, central)

    def _setup_shortcuts(self):
        """Set up keyboard shortcuts."""
        QShortcut(QKeySequence.New, self).activated.connect(self._on_new_event)
        QShortcut(QKeySequence(Qt.Key_Escape), self).activated.connect(
            self.view_model.exit_selection_mode
        )

    def _connect_view_model(self):
        vm = self.view_model
        vm.events_changed.connect(self._render_events)
        vm.filter_changed.connect(self._on_filter_changed)
        vm.selection_changed.connect(self._on_selection_changed)
        vm.pending_delete_changed.connect(self._on_pending_delete_changed)
        vm.toast_changed.connect(self._toast_banner.show_toast)

    # ==================== Rendering ====================

    def _clear_list(self):
        while self._list_layout.count():
            item = self._list_layout.takeAt(0)
            widget = item.widget()
            if widget is not None:
                widget.deleteLater()

    def _render_events(self, events: Optional[list[Event]] = None):
        """Rebuild the list from the view-model's published events."""
        if events is None:
            events = self.view_model.events
        self._clear_list()
        labels = self.config.labels
        colors = self.config.colors
        vm = self.view_model

        if not events:
            empty_text = (
                labels.no_events_future if vm.filter is EventFilter.FUTURE
                else labels.no_events_past
            )
            empty = QLabel(empty_text)
            empty.setAlignment(Qt.AlignCenter)
            empty.setStyleSheet(f"color: {colors.secondary_text}; padding: 40px;")
            self._list_layout.addWidget(empty)

        for index, event in enumerate(events):
            row = EventRowWidget(
                event, colors, labels,
                selection_mode=vm.selection_mode,
                selected=vm.is_selected(event),
            )
            row.clicked.connect(self._on_row_clicked)
            row.delete_requested.connect(vm.confirm_delete)
            row.edit_requested.connect(self._on_edit_event)
            self._list_layout.addWidget(row)

            if self.ad_cache is not None and self.ad_cache.should_show_at(index):
                self._add_sponsored_row(self.ad_cache.ad_position_index(index))

        self._list_layout.addStretch()

    def _add_sponsored_row(self, slot: int):
        """Insert a sponsored row, reusing the item already shown in this slot."""
        row = SponsoredRowWidget(self.config.colors, self.config.labels)
        self._list_layout.addWidget(row)

        item = self._sponsored_items.get(slot)
        if item is not None:
            row.set_item(item)
            return

        def _on_item(item, row=row):
            if item is None:
                return
            self._sponsored_items[slot] = item
            # The row may have been replaced by a re-render in the meantime
            if isValid(row):
                row.set_item(item)

        self.ad_cache.request_item(_on_item)

    def _on_filter_changed(self, event_filter: EventFilter):
        self._filter_buttons[event_filter].setChecked(True)

    def _on_selection_changed(self):
        selecting = self.view_model.selection_mode
        labels = self.config.labels
        self._select_button.setText(labels.button_done if selecting else labels.button_select)
        self._delete_selected_button.setVisible(selecting)
        self._new_button.setEnabled(not selecting)
        self._render_events()

    # ==================== Intents ====================

    def _on_select_toggled(self):
        if self.view_model.selection_mode:
            self.view_model.exit_selection_mode()
        else:
            self.view_model.enter_selection_mode()

    def _on_row_clicked(self, event: Event):
        if self.view_model.selection_mode:
            self.view_model.toggle_selection(event)
        else:
            self._open_window(EventDetailWindow(event, self.config))

    def _on_new_event(self):
        if self.view_model.selection_mode:
            return
        self._open_window(EventDialog(self.view_model, self.config))

    def _on_edit_event(self, event: Event):
        self._open_window(EventDialog(self.view_model, self.config, event=event))

    def _open_window(self, window: QWidget):
        window.closed.connect(lambda w=window: self._on_window_closed(w))
        self._windows.append(window)
        window.show()
        window.raise_()
        window.activateWindow()

    def _on_window_closed(self, window: QWidget):
        if window in self._windows:
            self._windows.remove(window)

    def _on_pending_delete_changed(self, pending):
        """Ask for confirmation whenever a delete gets armed."""
        if isinstance(pending, NoPendingDelete):
            return

        labels = self.config.labels
        if isinstance(pending, BulkDelete):
            text = labels.confirm_delete_selected_text.format(len(pending.event_ids))
        else:
            target = self.view_model.event_to_delete
            text = labels.confirm_delete_text.format(target.title if target else "")

        # Defer so the signal emission finishes before the modal loop starts
        QTimer.singleShot(0, lambda: self._ask_delete_confirmation(pending, text))

    def _ask_delete_confirmation(self, pending, text: str):
        if self.view_model.pending_delete != pending:
            return
        answer = QMessageBox.question(
            self, self.config.labels.confirm_delete_title, text,
            QMessageBox.Yes | QMessageBox.Cancel, QMessageBox.Cancel
        )
        if answer == QMessageBox.Yes:
            self.view_model.delete_confirmed()
        else:
            self.view_model.cancel_delete()

    def _on_day_check(self):
        today = local_date(now_utc())
        if today != self._current_day:
            print(f"DEBUG: Day changed to {today}, archiving past events", file=sys.stderr)
            self._current_day = today
            self.view_model.archive_past_events()

    def resizeEvent(self, event: QResizeEvent):
        super().resizeEvent(event)
        self._toast_banner.reposition()
