"""
Transient status notifications ("toasts").

A toast replaces whatever toast is showing and clears itself after its
duration. Expiry compares toast identity at fire time: a timer left over
from an older toast never dismisses a newer one.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional
import uuid

from PySide6.QtCore import QObject, Signal, QTimer


DEFAULT_TOAST_DURATION = 2.5  # seconds


class ToastStyle(Enum):
    """Visual style of a toast."""
    SUCCESS = "success"
    ERROR = "error"

    @property
    def icon(self) -> str:
        return "✔" if self is ToastStyle.SUCCESS else "✖"


@dataclass(frozen=True, eq=False)
class Toast:
    """One notification. Compared by identity, never by message text."""
    message: str
    style: ToastStyle
    id: str = field(default_factory=lambda: str(uuid.uuid4()))


class ToastNotifier(QObject):
    """Owns the current toast and its auto-dismiss timers."""

    # Emitted with the new Toast, or None when cleared
    toast_changed = Signal(object)

    def __init__(self, default_duration: float = DEFAULT_TOAST_DURATION, parent=None):
        super().__init__(parent)
        self.default_duration = default_duration
        self._current: Optional[Toast] = None

    @property
    def current(self) -> Optional[Toast]:
        return self._current

    def present(self, message: str, style: ToastStyle,
                duration: Optional[float] = None) -> Toast:
        """Show a toast and schedule its dismissal."""
        if duration is None:
            duration = self.default_duration
        toast = Toast(message=message, style=style)
        self._current = toast
        self.toast_changed.emit(toast)

        QTimer.singleShot(max(int(duration * 1000), 0), self, lambda: self._expire(toast))
        return toast

    def _expire(self, toast: Toast) -> None:
        # Only clear if this timer's toast is still the one showing
        if self._current is toast:
            self._current = None
            self.toast_changed.emit(None)

    def dismiss(self) -> None:
        """Clear the current toast immediately."""
        if self._current is not None:
            self._current = None
            self.toast_changed.emit(None)
