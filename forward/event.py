"""
Countdown event entity.

Event is the only persistent record in Forward Countdown. Day counts are
derived (never stored) and always computed from local start-of-day
differences via timezone_utils.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional
import uuid

from .timezone_utils import now_utc, to_utc_datetime, days_between


class EventFilter(Enum):
    """Which half of the event list is visible."""
    FUTURE = "future"
    PAST = "past"

    @property
    def title(self) -> str:
        return "Future" if self is EventFilter.FUTURE else "Past"

    @property
    def is_archived(self) -> bool:
        """Archived flag matched by this filter."""
        return self is EventFilter.PAST

    @property
    def descending(self) -> bool:
        """Future events count up from today, past events count back."""
        return self is EventFilter.PAST


# Fields that the edit action may change in place
EDITABLE_FIELDS = ("title", "emoji", "date", "location", "category", "notes")


def _parse_datetime(value: str) -> datetime:
    return to_utc_datetime(datetime.fromisoformat(value))


def normalize_optional(value: Optional[str]) -> Optional[str]:
    """Blank form input means "not set"."""
    if value is None:
        return None
    value = value.strip()
    return value or None


@dataclass
class Event:
    """
    A dated event with a countdown.

    `date` and `created_at` are timezone-aware; naive values passed in are
    interpreted as local time and converted to UTC.
    """
    title: str
    emoji: str
    date: datetime
    location: Optional[str] = None
    category: Optional[str] = None
    notes: Optional[str] = None
    is_archived: bool = False
    created_at: datetime = field(default_factory=now_utc)
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def __post_init__(self):
        self.date = to_utc_datetime(self.date)
        self.created_at = to_utc_datetime(self.created_at)

    def __hash__(self):
        return hash(self.id)

    def __eq__(self, other):
        if isinstance(other, Event):
            return self.id == other.id
        return False

    # ==================== Derived Values ====================

    def days_until(self, now: Optional[datetime] = None) -> int:
        """
        Calendar days from today to the event's day.

        Negative values indicate past events.
        """
        return days_between(now or now_utc(), self.date)

    def is_past(self, now: Optional[datetime] = None) -> bool:
        """True once the event's day is before today."""
        return self.days_until(now) < 0

    def time_remaining(self, now: Optional[datetime] = None) -> tuple[int, int, int, int]:
        """(days, hours, minutes, seconds) until the event, clamped at zero."""
        now = to_utc_datetime(now) if now else now_utc()
        total = max(int((self.date - now).total_seconds()), 0)
        days, rest = divmod(total, 86_400)
        hours, rest = divmod(rest, 3_600)
        minutes, seconds = divmod(rest, 60)
        return days, hours, minutes, seconds

    # ==================== Persistence ====================

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "emoji": self.emoji,
            "date": self.date.isoformat(),
            "location": self.location,
            "category": self.category,
            "notes": self.notes,
            "is_archived": self.is_archived,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Event':
        return cls(
            id=data["id"],
            title=data.get("title", ""),
            emoji=data.get("emoji", ""),
            date=_parse_datetime(data["date"]),
            location=data.get("location"),
            category=data.get("category"),
            notes=data.get("notes"),
            is_archived=bool(data.get("is_archived", False)),
            created_at=_parse_datetime(data["created_at"]),
        )

    def apply_dict(self, data: dict) -> None:
        """Overwrite all fields except id from a stored record."""
        restored = Event.from_dict(data)
        self.title = restored.title
        self.emoji = restored.emoji
        self.date = restored.date
        self.location = restored.location
        self.category = restored.category
        self.notes = restored.notes
        self.is_archived = restored.is_archived
        self.created_at = restored.created_at


def validate_draft(title: str, emoji: str, date: datetime,
                   now: Optional[datetime] = None) -> list[str]:
    """
    Check user input for a new event.

    Returns a list of problems; empty means the draft can be saved.
    """
    problems = []
    if not (title or "").strip():
        problems.append("Title is required")
    if not emoji:
        problems.append("Pick an emoji")
    if days_between(now or now_utc(), to_utc_datetime(date)) < 0:
        problems.append("Date must be today or later")
    return problems
