"""
Row widgets for the event list.

EventRowWidget shows one event with its day count; SponsoredRowWidget shows
a sponsored item between rows.
"""

from PySide6.QtWidgets import (
    QFrame, QLabel, QHBoxLayout, QVBoxLayout, QPushButton, QCheckBox
)
from PySide6.QtCore import Qt, Signal, QUrl
from PySide6.QtGui import QFont, QMouseEvent, QDesktopServices

from forward.config import ColorsConfig, LabelsConfig
from forward.event import Event
from forward.ad_supply import SponsoredItem
from forward.timezone_utils import to_local_datetime


def format_day_count(days: int, labels: LabelsConfig) -> tuple[str, str]:
    """Number and unit shown on the right of a row."""
    count = abs(days)
    unit = labels.day_singular if count == 1 else labels.day_plural
    return str(count), unit


class EventRowWidget(QFrame):
    """One event in the list."""

    clicked = Signal(object)
    delete_requested = Signal(object)
    edit_requested = Signal(object)

    def __init__(self, event: Event, colors: ColorsConfig, labels: LabelsConfig,
                 selection_mode: bool = False, selected: bool = False, parent=None):
        super().__init__(parent)
        self._event = event
        self.colors = colors
        self.labels = labels
        self.selection_mode = selection_mode
        self.selected = selected

        self.setFrameShape(QFrame.StyledPanel)
        self.setCursor(Qt.PointingHandCursor)
        self._setup_ui()
        self._apply_style()

    def _setup_ui(self):
        layout = QHBoxLayout(self)
        layout.setContentsMargins(12, 8, 12, 8)
        layout.setSpacing(12)

        if self.selection_mode:
            self._check = QCheckBox()
            self._check.setChecked(self.selected)
            self._check.setAttribute(Qt.WA_TransparentForMouseEvents)
            layout.addWidget(self._check)

        emoji = QLabel(self._event.emoji)
        emoji_font = QFont()
        emoji_font.setPointSize(24)
        emoji.setFont(emoji_font)
        layout.addWidget(emoji)

        text_layout = QVBoxLayout()
        text_layout.setSpacing(2)
        title = QLabel(self._event.title)
        title_font = QFont()
        title_font.setBold(True)
        title.setFont(title_font)
        text_layout.addWidget(title)

        local_date = to_local_datetime(self._event.date)
        details = local_date.strftime("%a, %b %d, %Y")
        if self._event.location:
            details += f"  ·  {self._event.location}"
        subtitle = QLabel(details)
        subtitle.setStyleSheet(f"color: {self.colors.secondary_text};")
        text_layout.addWidget(subtitle)
        layout.addLayout(text_layout, 1)

        number, unit = format_day_count(self._event.days_until(), self.labels)
        count_layout = QVBoxLayout()
        count_layout.setSpacing(0)
        count_label = QLabel(number)
        count_font = QFont()
        count_font.setPointSize(18)
        count_font.setBold(True)
        count_label.setFont(count_font)
        count_label.setAlignment(Qt.AlignCenter)
        count_label.setStyleSheet(f"color: {self.colors.accent};")
        count_layout.addWidget(count_label)
        unit_label = QLabel(unit)
        unit_label.setAlignment(Qt.AlignCenter)
        unit_label.setStyleSheet(f"color: {self.colors.secondary_text};")
        count_layout.addWidget(unit_label)
        layout.addLayout(count_layout)

        if not self.selection_mode:
            edit_button = QPushButton("✎")
            edit_button.setFlat(True)
            edit_button.setToolTip(self.labels.dialog_edit_event)
            edit_button.clicked.connect(lambda: self.edit_requested.emit(self._event))
            layout.addWidget(edit_button)

            delete_button = QPushButton("🗑")
            delete_button.setFlat(True)
            delete_button.setToolTip(self.labels.button_delete)
            delete_button.clicked.connect(lambda: self.delete_requested.emit(self._event))
            layout.addWidget(delete_button)

    def _apply_style(self):
        background = (
            self.colors.row_selected_background if self.selected
            else self.colors.row_background
        )
        self.setStyleSheet(
            f"EventRowWidget {{ background: {background}; border-radius: 8px; }}"
        )

    def mouseReleaseEvent(self, event: QMouseEvent):
        if event.button() == Qt.LeftButton:
            self.clicked.emit(self._event)
        super().mouseReleaseEvent(event)


class SponsoredRowWidget(QFrame):
    """A sponsored item between event rows. Empty until an item arrives."""

    def __init__(self, colors: ColorsConfig, labels: LabelsConfig, parent=None):
        super().__init__(parent)
        self.colors = colors
        self.labels = labels
        self.item = None

        self.setFrameShape(QFrame.StyledPanel)
        self.setStyleSheet(
            f"SponsoredRowWidget {{ background: {colors.sponsored_background}; border-radius: 8px; }}"
        )
        self._layout = QVBoxLayout(self)
        self._layout.setContentsMargins(12, 8, 12, 8)
        self.hide()

    def set_item(self, item: SponsoredItem):
        """Fill the row; None leaves it hidden."""
        if item is None:
            return
        self.item = item

        tag = QLabel(self.labels.sponsored_label)
        tag.setStyleSheet(f"color: {self.colors.secondary_text}; font-size: 10px;")
        self._layout.addWidget(tag)

        headline = QLabel(item.headline)
        headline_font = QFont()
        headline_font.setBold(True)
        headline.setFont(headline_font)
        self._layout.addWidget(headline)

        if item.body:
            body = QLabel(item.body)
            body.setWordWrap(True)
            self._layout.addWidget(body)

        if item.url:
            action = QPushButton(item.call_to_action or item.advertiser or item.url)
            action.clicked.connect(lambda: QDesktopServices.openUrl(QUrl(item.url)))
            self._layout.addWidget(action)

        self.show()
