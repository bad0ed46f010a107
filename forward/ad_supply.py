"""
Sponsored item supply for the event list.

AdSupplyCache keeps a small pool of prefetched sponsored items so the list
rarely waits on the network. A failed fetch is simply "no item": callers
render nothing at that slot.

The pool is only touched on the thread that owns the cache; background
fetch results arrive through NetworkWorker signals.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional
import sys
import uuid

import requests
from PySide6.QtCore import QObject, Signal

from .network_worker import NetworkWorker, get_network_worker


def _debug_print(msg: str) -> None:
    timestamp = datetime.now().strftime("%H:%M:%S")
    print(f"[{timestamp}] ADS: {msg}", file=sys.stderr)


@dataclass
class SponsoredItem:
    """One displayable sponsored entry."""
    id: str
    headline: str
    body: str = ""
    advertiser: str = ""
    call_to_action: str = ""
    url: str = ""
    image_url: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> 'SponsoredItem':
        return cls(
            id=str(data.get("id") or uuid.uuid4()),
            headline=data["headline"],
            body=data.get("body", ""),
            advertiser=data.get("advertiser", ""),
            call_to_action=data.get("call_to_action", ""),
            url=data.get("url", ""),
            image_url=data.get("image_url", ""),
        )


class HttpAdSource:
    """
    Fetches one sponsored item per call from an HTTP endpoint.

    The endpoint answers a GET with a JSON object (see SponsoredItem).
    Any network, HTTP or format error yields None.
    """

    def __init__(self, endpoint: str, ad_unit_id: str = "", timeout: float = 10.0):
        self.endpoint = endpoint
        self.ad_unit_id = ad_unit_id
        self.timeout = timeout
        self._error: Optional[str] = None

    @property
    def error(self) -> Optional[str]:
        """Get the last error message."""
        return self._error

    def __call__(self) -> Optional[SponsoredItem]:
        params = {"ad_unit_id": self.ad_unit_id} if self.ad_unit_id else None
        try:
            response = requests.get(
                self.endpoint,
                params=params,
                timeout=self.timeout,
                headers={
                    'User-Agent': 'Forward-Countdown/1.0',
                    'Accept': 'application/json'
                }
            )
            response.raise_for_status()
            payload = response.json()
            if not isinstance(payload, dict):
                raise ValueError(f"expected a JSON object, got {type(payload).__name__}")
            item = SponsoredItem.from_dict(payload)
        except requests.RequestException as e:
            self._error = f"Network error: {e}"
            _debug_print(f"Failed to load sponsored item: {self._error}")
            return None
        except (ValueError, KeyError, TypeError) as e:
            self._error = f"Bad response: {e}"
            _debug_print(f"Failed to load sponsored item: {self._error}")
            return None

        self._error = None
        return item


class AdSupplyCache(QObject):
    """
    Bounded pool of prefetched sponsored items.

    get_item() hands out a cached item and asynchronously replenishes the
    pool; items that arrive while the pool is full are dropped.
    """

    # Emitted with the pool size whenever an item is added
    item_cached = Signal(int)

    def __init__(
        self,
        fetcher: Callable[[], Optional[SponsoredItem]],
        capacity: int = 5,
        preload_count: int = 3,
        interval: int = 10,
        worker: Optional[NetworkWorker] = None,
        parent=None,
    ):
        super().__init__(parent)
        self._fetcher = fetcher
        self.capacity = capacity
        self.preload_count = preload_count
        self.interval = interval
        self._worker = worker or get_network_worker()

        self._pool: list[SponsoredItem] = []
        self._has_started_preloading = False
        # operation_id -> callback receiving Optional[SponsoredItem]
        self._callbacks: dict[str, Callable[[Optional[SponsoredItem]], None]] = {}

        self._worker.operation_finished.connect(self._on_operation_finished)
        self._worker.operation_error.connect(self._on_operation_error)

    @property
    def cached_count(self) -> int:
        return len(self._pool)

    # ==================== Fetching ====================

    def _fetch_safely(self) -> Optional[SponsoredItem]:
        try:
            return self._fetcher()
        except Exception as e:
            _debug_print(f"Sponsored item fetch failed: {type(e).__name__}: {e}")
            return None

    def _submit(self, on_result: Callable[[Optional[SponsoredItem]], None]) -> None:
        operation_id = f"ad:{uuid.uuid4()}"
        self._callbacks[operation_id] = on_result
        self._worker.submit(operation_id, self._fetch_safely)

    def _on_operation_finished(self, operation_id: str, result: object) -> None:
        callback = self._callbacks.pop(operation_id, None)
        if callback is not None:
            callback(result if isinstance(result, SponsoredItem) else None)

    def _on_operation_error(self, operation_id: str, error_message: str) -> None:
        callback = self._callbacks.pop(operation_id, None)
        if callback is not None:
            _debug_print(f"Sponsored item fetch failed: {error_message}")
            callback(None)

    def _cache_item(self, item: Optional[SponsoredItem]) -> None:
        if item is None:
            return
        if len(self._pool) >= self.capacity:
            _debug_print("Cache full, discarding sponsored item")
            return
        self._pool.append(item)
        self.item_cached.emit(len(self._pool))

    # ==================== Public API ====================

    def preload(self, count: Optional[int] = None) -> None:
        """Start `count` concurrent fetches that fill the pool."""
        if count is None:
            count = self.preload_count
        for _ in range(count):
            self._submit(self._cache_item)

    def _start_preloading_if_needed(self) -> None:
        if self._has_started_preloading:
            return
        self._has_started_preloading = True
        self.preload(self.preload_count)

    def _pop_cached(self) -> Optional[SponsoredItem]:
        if not self._pool:
            return None
        item = self._pool.pop(0)
        # Keep the pool topped up
        self._submit(self._cache_item)
        return item

    def get_item(self) -> Optional[SponsoredItem]:
        """
        Get one sponsored item.

        Pops a cached item if there is one; otherwise fetches synchronously
        (bounded by the fetcher's timeout). Returns None on failure.
        """
        self._start_preloading_if_needed()
        item = self._pop_cached()
        if item is not None:
            return item
        return self._fetch_safely()

    def request_item(self, notify: Callable[[Optional[SponsoredItem]], None]) -> None:
        """
        Non-blocking variant of get_item().

        notify is called with the item (or None) on the owning thread,
        immediately if the pool has one.
        """
        self._start_preloading_if_needed()
        item = self._pop_cached()
        if item is not None:
            notify(item)
            return
        self._submit(notify)

    def should_show_at(self, index: int) -> bool:
        """True for every `interval`-th row (0-based index 9, 19, ...)."""
        return (index + 1) % self.interval == 0

    def ad_position_index(self, index: int) -> int:
        """Ordinal of the sponsored slot following row `index` (0 for the first)."""
        return (index + 1) // self.interval - 1

    def clear(self) -> None:
        self._pool.clear()
