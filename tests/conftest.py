"""
Shared pytest fixtures.

Stores run in memory and background work runs on the test thread, so no
real disk or network is touched.
"""
from concurrent.futures import Executor, Future
import os
from datetime import datetime, timedelta

import pytest
import pytz
from PySide6.QtWidgets import QApplication

from forward.event import Event
from forward.event_storage import MemoryEventStore
from forward.event_list_model import EventListViewModel
from forward.network_worker import NetworkWorker
from forward.timezone_utils import set_timezone

# Widgets are built without a display
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")


# Fixed "now" for every time-dependent test: midday, so day boundaries are far away
NOW = datetime(2026, 3, 15, 12, 0, tzinfo=pytz.UTC)


def fixed_clock():
    return NOW


def make_event(title="Trip", days=3, hour=9, created_offset=0, **kwargs) -> Event:
    """Event `days` calendar days after NOW's day, at `hour` UTC."""
    date = NOW.replace(hour=hour, minute=0) + timedelta(days=days)
    created_at = NOW + timedelta(seconds=created_offset)
    return Event(title=title, emoji="🎉", date=date, created_at=created_at, **kwargs)


class FailingStore(MemoryEventStore):
    """Memory store whose reads or writes can be made to fail on demand."""

    def __init__(self, events=None):
        super().__init__(events)
        self.fail_reads = False
        self.fail_writes = False
        self.write_count = 0

    def _load_records(self):
        if self.fail_reads:
            raise OSError("disk unavailable")
        return super()._load_records()

    def _write_records(self, records):
        if self.fail_writes:
            raise OSError("disk full")
        self.write_count += 1
        super()._write_records(records)


class InlineExecutor(Executor):
    """Runs every submitted call immediately on the calling thread."""

    def submit(self, fn, /, *args, **kwargs):
        future = Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except Exception as e:
            future.set_exception(e)
        return future


class ManualExecutor(Executor):
    """Queues submitted calls until run_all() is called."""

    def __init__(self):
        self.jobs = []

    def submit(self, fn, /, *args, **kwargs):
        future = Future()
        self.jobs.append((future, fn, args, kwargs))
        return future

    def run_all(self):
        jobs, self.jobs = self.jobs, []
        for future, fn, args, kwargs in jobs:
            try:
                future.set_result(fn(*args, **kwargs))
            except Exception as e:
                future.set_exception(e)


@pytest.fixture(scope="session")
def qapp():
    app = QApplication.instance() or QApplication([])
    yield app


@pytest.fixture(autouse=True)
def utc_timezone():
    set_timezone("UTC")
    yield
    set_timezone("")


@pytest.fixture
def store():
    return FailingStore()


@pytest.fixture
def view_model(qapp, store):
    vm = EventListViewModel(store, toast_duration=60, clock=fixed_clock)
    vm.initialize()
    return vm


@pytest.fixture
def inline_worker(qapp):
    return NetworkWorker(executor=InlineExecutor())


@pytest.fixture
def manual_executor():
    return ManualExecutor()


@pytest.fixture
def manual_worker(qapp, manual_executor):
    return NetworkWorker(executor=manual_executor)
