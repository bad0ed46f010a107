"""
Forward Countdown Widgets
"""

from .event_row import EventRowWidget, SponsoredRowWidget
from .toast_banner import ToastBanner

__all__ = ['EventRowWidget', 'SponsoredRowWidget', 'ToastBanner']
