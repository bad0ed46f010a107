"""
Toast banner shown at the bottom of the main window.
"""

from PySide6.QtWidgets import QLabel, QWidget
from PySide6.QtCore import Qt

from forward.config import ColorsConfig
from forward.toast import Toast, ToastStyle


class ToastBanner(QLabel):
    """Floating label that mirrors the view-model's current toast."""

    MARGIN = 16

    def __init__(self, colors: ColorsConfig, parent: QWidget = None):
        super().__init__(parent)
        self.colors = colors
        self.setAlignment(Qt.AlignCenter)
        self.setWordWrap(True)
        self.hide()

    def show_toast(self, toast: Toast):
        """Slot for toast_changed; None hides the banner."""
        if toast is None:
            self.hide()
            return

        background = (
            self.colors.toast_success_background if toast.style is ToastStyle.SUCCESS
            else self.colors.toast_error_background
        )
        self.setStyleSheet(
            f"background: {background}; color: {self.colors.toast_text}; "
            f"padding: 10px 16px; border-radius: 16px;"
        )
        self.setText(f"{toast.style.icon}  {toast.message}")
        self.reposition()
        self.show()
        self.raise_()

    def reposition(self):
        parent = self.parentWidget()
        if parent is None:
            return
        self.adjustSize()
        width = min(self.sizeHint().width(), parent.width() - 2 * self.MARGIN)
        self.resize(width, self.sizeHint().height())
        self.move(
            (parent.width() - width) // 2,
            parent.height() - self.height() - self.MARGIN,
        )
