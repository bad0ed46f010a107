"""
Tests for the Event entity and local-day arithmetic.

Covers:
- days_until / is_past use start-of-day differences, not elapsed hours
- Local timezone and DST handling in days_between
- time_remaining countdown segments
- validate_draft problems
- Record conversion
"""
from datetime import datetime, timedelta

import pytest
import pytz

from forward.event import Event, EventFilter, validate_draft, normalize_optional
from forward.timezone_utils import set_timezone, days_between

from conftest import NOW, make_event


# ---------------------------------------------------------------------------
# Day counts
# ---------------------------------------------------------------------------

class TestDaysUntil:
    def test_same_day_later_time_is_zero(self):
        event = make_event(days=0, hour=23)
        assert event.days_until(NOW) == 0
        assert not event.is_past(NOW)

    def test_same_day_earlier_time_is_zero(self):
        event = make_event(days=0, hour=1)
        assert event.days_until(NOW) == 0
        assert not event.is_past(NOW)

    def test_next_day_within_24_hours_is_one(self):
        # 13 hours away but on tomorrow's calendar day
        event = make_event(days=1, hour=1)
        assert event.days_until(NOW) == 1

    def test_yesterday_is_past(self):
        event = make_event(days=-1, hour=23)
        assert event.days_until(NOW) == -1
        assert event.is_past(NOW)

    @pytest.mark.parametrize("days", [-40, -1, 0, 1, 11, 38, 80])
    def test_is_past_matches_negative_days(self, days):
        event = make_event(days=days)
        assert event.is_past(NOW) == (event.days_until(NOW) < 0)
        assert event.days_until(NOW) == days

    def test_uses_local_calendar_day(self):
        set_timezone("America/New_York")
        # 03:00 UTC on the 16th is still the evening of the 15th in New York
        event = Event(title="Late", emoji="🌙",
                      date=datetime(2026, 3, 16, 3, 0, tzinfo=pytz.UTC))
        assert event.days_until(NOW) == 0

    def test_naive_date_is_local(self):
        set_timezone("Europe/Amsterdam")
        event = Event(title="Dinner", emoji="🍷", date=datetime(2026, 3, 20, 10, 0))
        assert event.date.tzinfo is not None
        assert event.date.hour == 9  # CET is UTC+1 in March before DST


class TestDaysBetween:
    def test_across_dst_start(self):
        set_timezone("Europe/Amsterdam")
        tz = pytz.timezone("Europe/Amsterdam")
        start = tz.localize(datetime(2026, 3, 28, 12, 0))
        end = tz.localize(datetime(2026, 3, 30, 0, 30))
        assert days_between(start, end) == 2

    def test_negative_when_end_is_earlier(self):
        assert days_between(NOW, NOW - timedelta(days=3)) == -3


# ---------------------------------------------------------------------------
# Countdown
# ---------------------------------------------------------------------------

class TestTimeRemaining:
    def test_segments(self):
        event = Event(title="Launch", emoji="🚀",
                      date=NOW + timedelta(days=1, hours=2, minutes=3, seconds=4))
        assert event.time_remaining(NOW) == (1, 2, 3, 4)

    def test_clamped_at_zero(self):
        event = Event(title="Gone", emoji="⌛", date=NOW - timedelta(hours=5))
        assert event.time_remaining(NOW) == (0, 0, 0, 0)


# ---------------------------------------------------------------------------
# Validation and helpers
# ---------------------------------------------------------------------------

class TestValidateDraft:
    def test_valid_draft(self):
        assert validate_draft("Trip", "✈️", NOW + timedelta(days=2), now=NOW) == []

    def test_today_is_allowed(self):
        earlier_today = NOW.replace(hour=0, minute=5)
        assert validate_draft("Trip", "✈️", earlier_today, now=NOW) == []

    def test_all_problems_reported(self):
        problems = validate_draft("   ", "", NOW - timedelta(days=1), now=NOW)
        assert problems == [
            "Title is required",
            "Pick an emoji",
            "Date must be today or later",
        ]


class TestHelpers:
    def test_normalize_optional(self):
        assert normalize_optional(None) is None
        assert normalize_optional("   ") is None
        assert normalize_optional("  Paris ") == "Paris"

    def test_filter_flags(self):
        assert EventFilter.FUTURE.is_archived is False
        assert EventFilter.FUTURE.descending is False
        assert EventFilter.PAST.is_archived is True
        assert EventFilter.PAST.descending is True

    def test_equality_is_by_id(self):
        event = make_event()
        twin = Event.from_dict(event.to_dict())
        twin.title = "Changed"
        assert twin == event
        assert len({event, twin}) == 1

    def test_record_round_trip(self):
        event = make_event(location="Lisbon", notes="Window seat", category="travel")
        restored = Event.from_dict(event.to_dict())
        assert restored.to_dict() == event.to_dict()
        assert restored.date == event.date
        assert restored.created_at == event.created_at

    def test_apply_dict_keeps_identity(self):
        event = make_event(title="Before")
        snapshot = event.to_dict()
        event.title = "After"
        event.apply_dict(snapshot)
        assert event.title == "Before"
