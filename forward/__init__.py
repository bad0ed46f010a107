"""
Forward Countdown Core Module

This module provides the core functionality for countdown tracking:
- Configuration parsing (config.py)
- Event entity and day arithmetic (event.py, timezone_utils.py)
- Unit-of-work event storage (event_storage.py)
- Event list view-model (event_list_model.py)
- Toast notifications (toast.py)
- Sponsored item cache (ad_supply.py, network_worker.py)
"""

from .config import Config
from .event import Event, EventFilter
from .event_storage import EventStore, EventQuery, JsonEventStore, MemoryEventStore
from .event_list_model import EventListViewModel
from .toast import Toast, ToastStyle, ToastNotifier
from .ad_supply import AdSupplyCache, SponsoredItem, HttpAdSource
from .errors import ForwardError, PersistenceError, FetchError, CommitError, ValidationError

__all__ = [
    'Config',
    'Event',
    'EventFilter',
    'EventStore',
    'EventQuery',
    'JsonEventStore',
    'MemoryEventStore',
    'EventListViewModel',
    'Toast',
    'ToastStyle',
    'ToastNotifier',
    'AdSupplyCache',
    'SponsoredItem',
    'HttpAdSource',
    'ForwardError',
    'PersistenceError',
    'FetchError',
    'CommitError',
    'ValidationError',
]
