"""
Forward Countdown GUI Module

PySide6-based graphical interface for the countdown tracker.
"""

from .main_window import MainWindow
from .event_dialog import EventDialog, EventDetailWindow

__all__ = ['MainWindow', 'EventDialog', 'EventDetailWindow']
