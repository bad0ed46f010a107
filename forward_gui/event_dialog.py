"""
Event windows: the create/edit form and the live countdown detail view.
"""

from datetime import datetime, time as dt_time
from typing import Optional

from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QFormLayout, QGridLayout,
    QLineEdit, QTextEdit, QDateEdit, QComboBox, QPushButton, QLabel,
    QMessageBox
)
from PySide6.QtCore import Qt, Signal, QDate, QTimer
from PySide6.QtGui import QFont, QCloseEvent

from forward.config import Config
from forward.event import Event, validate_draft, normalize_optional
from forward.event_list_model import EventListViewModel
from forward.errors import PersistenceError, ValidationError
from forward.toast import ToastStyle
from forward.timezone_utils import to_local_datetime, local_naive_to_utc


EMOJI_CHOICES = [
    "🎉", "🎂", "🎄", "🎃", "🐣", "🌸", "☀️", "🍂", "❄️", "🌈",
    "✈️", "🚗", "🛳️", "🏔️", "🏕️", "🎿", "🏄", "🎾",
    "🍕", "🍰", "🍷", "☕", "🎵", "📚", "💻", "📱",
    "👶", "🐕", "🐈", "🌺", "🎁", "💰", "⭐", "🎸",
]


class EventDialog(QWidget):
    """Independent window for creating or editing an event."""

    closed = Signal()

    def __init__(self, view_model: EventListViewModel, config: Config,
                 event: Optional[Event] = None, parent=None):
        super().__init__(parent)
        self.view_model = view_model
        self.config = config
        self._event = event
        self.is_new = event is None

        labels = config.labels
        self.setWindowTitle(labels.dialog_new_event if self.is_new else labels.dialog_edit_event)
        self.setWindowFlags(Qt.Window)
        self.setAttribute(Qt.WA_DeleteOnClose)
        self.setMinimumSize(380, 420)

        self._setup_ui()
        self._populate_data()

    def _setup_ui(self):
        labels = self.config.labels
        layout = QVBoxLayout(self)
        layout.setSpacing(8)
        layout.setContentsMargins(12, 12, 12, 12)

        form = QFormLayout()
        form.setSpacing(8)

        self._title_edit = QLineEdit()
        self._title_edit.setPlaceholderText("Event title")
        form.addRow(labels.field_title, self._title_edit)

        self._emoji_combo = QComboBox()
        self._emoji_combo.setEditable(True)
        self._emoji_combo.addItems(EMOJI_CHOICES)
        form.addRow(labels.field_emoji, self._emoji_combo)

        self._date_edit = QDateEdit()
        self._date_edit.setCalendarPopup(True)
        self._date_edit.setDisplayFormat("ddd, MMM d, yyyy")
        if self.is_new:
            self._date_edit.setMinimumDate(QDate.currentDate())
        form.addRow(labels.field_date, self._date_edit)

        self._location_edit = QLineEdit()
        self._location_edit.setPlaceholderText("Optional")
        form.addRow(labels.field_location, self._location_edit)

        self._notes_edit = QTextEdit()
        self._notes_edit.setPlaceholderText("Optional")
        form.addRow(labels.field_notes, self._notes_edit)

        layout.addLayout(form)

        buttons = QHBoxLayout()
        buttons.addStretch()
        cancel_button = QPushButton(labels.button_cancel)
        cancel_button.clicked.connect(self.close)
        buttons.addWidget(cancel_button)

        save_button = QPushButton(labels.button_save)
        save_button.setDefault(True)
        save_button.setStyleSheet(
            f"background: {self.config.colors.accent}; color: #ffffff; padding: 6px 16px;"
        )
        save_button.clicked.connect(self._on_save)
        buttons.addWidget(save_button)
        layout.addLayout(buttons)

    def _populate_data(self):
        if self.is_new:
            self._date_edit.setDate(QDate.currentDate())
            return

        self._title_edit.setText(self._event.title)
        self._emoji_combo.setCurrentText(self._event.emoji)
        local = to_local_datetime(self._event.date)
        self._date_edit.setDate(QDate(local.year, local.month, local.day))
        self._location_edit.setText(self._event.location or "")
        self._notes_edit.setPlainText(self._event.notes or "")

    def _selected_date(self) -> datetime:
        qdate = self._date_edit.date()
        if not self.is_new:
            # Keep the original time of day when only the day changes
            original = to_local_datetime(self._event.date).time().replace(tzinfo=None)
        else:
            original = dt_time(0, 0)
        naive = datetime(qdate.year(), qdate.month(), qdate.day(),
                         original.hour, original.minute, original.second)
        return local_naive_to_utc(naive)

    def _on_save(self):
        title = self._title_edit.text().strip()
        emoji = self._emoji_combo.currentText().strip()
        date = self._selected_date()
        location = normalize_optional(self._location_edit.text())
        notes = normalize_optional(self._notes_edit.toPlainText())
        labels = self.config.labels

        if self.is_new:
            problems = validate_draft(title, emoji, date)
            if problems:
                QMessageBox.warning(self, labels.dialog_new_event, "\n".join(problems))
                return
            try:
                self.view_model.add_event(title, emoji, date, location=location, notes=notes)
            except PersistenceError:
                self.view_model.present_toast(labels.toast_event_create_failed, ToastStyle.ERROR)
                return
            self.view_model.present_toast(labels.toast_event_created, ToastStyle.SUCCESS)
        else:
            try:
                self.view_model.update_event(
                    self._event, title=title, emoji=emoji, date=date,
                    location=location, notes=notes,
                )
            except ValidationError as e:
                QMessageBox.warning(self, labels.dialog_edit_event, str(e))
                return
            except PersistenceError:
                self.view_model.present_toast(labels.toast_event_update_failed, ToastStyle.ERROR)
                return
            self.view_model.present_toast(labels.toast_event_updated, ToastStyle.SUCCESS)

        self.close()

    def closeEvent(self, event: QCloseEvent):
        self.closed.emit()
        super().closeEvent(event)


class EventDetailWindow(QWidget):
    """Read-only view of one event with a live countdown."""

    closed = Signal()

    SEGMENTS = ("Days", "Hours", "Mins", "Secs")

    def __init__(self, event: Event, config: Config, parent=None):
        super().__init__(parent)
        self._event = event
        self.config = config

        self.setWindowTitle(f"{event.emoji} {event.title}")
        self.setWindowFlags(Qt.Window)
        self.setAttribute(Qt.WA_DeleteOnClose)
        self.setMinimumSize(360, 320)

        self._setup_ui()
        self._update_countdown()

        self._timer = QTimer(self)
        self._timer.timeout.connect(self._update_countdown)
        self._timer.start(1000)

    def _setup_ui(self):
        layout = QVBoxLayout(self)
        layout.setSpacing(12)
        layout.setContentsMargins(16, 16, 16, 16)

        emoji = QLabel(self._event.emoji)
        emoji_font = QFont()
        emoji_font.setPointSize(48)
        emoji.setFont(emoji_font)
        emoji.setAlignment(Qt.AlignCenter)
        layout.addWidget(emoji)

        title = QLabel(self._event.title)
        title_font = QFont()
        title_font.setPointSize(18)
        title_font.setBold(True)
        title.setFont(title_font)
        title.setAlignment(Qt.AlignCenter)
        layout.addWidget(title)

        date_label = QLabel(to_local_datetime(self._event.date).strftime("%A, %B %d, %Y"))
        date_label.setAlignment(Qt.AlignCenter)
        date_label.setStyleSheet(f"color: {self.config.colors.secondary_text};")
        layout.addWidget(date_label)

        grid = QGridLayout()
        self._segment_values: list[QLabel] = []
        value_font = QFont()
        value_font.setPointSize(22)
        value_font.setBold(True)
        for column, name in enumerate(self.SEGMENTS):
            value = QLabel("0")
            value.setFont(value_font)
            value.setAlignment(Qt.AlignCenter)
            value.setStyleSheet(f"color: {self.config.colors.accent};")
            grid.addWidget(value, 0, column)
            caption = QLabel(name)
            caption.setAlignment(Qt.AlignCenter)
            grid.addWidget(caption, 1, column)
            self._segment_values.append(value)
        layout.addLayout(grid)

        if self._event.location:
            layout.addWidget(QLabel(f"📍 {self._event.location}"))
        if self._event.notes:
            notes = QLabel(self._event.notes)
            notes.setWordWrap(True)
            layout.addWidget(notes)
        layout.addStretch()

    def _update_countdown(self):
        for label, value in zip(self._segment_values, self._event.time_remaining()):
            label.setText(str(value))

    def closeEvent(self, event: QCloseEvent):
        self._timer.stop()
        self.closed.emit()
        super().closeEvent(event)
