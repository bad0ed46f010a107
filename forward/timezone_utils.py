"""
Timezone utilities for Forward Countdown.

Event dates are stored in UTC and compared in the local timezone.
Every "how many days until" question in the application goes through
days_between() so the day count never depends on time of day.
"""

from datetime import datetime, date
import time as _time
import pytz


# Empty means "use the system timezone" - can be overridden by config
_local_timezone_name: str = ""


def set_timezone(timezone_name: str):
    """Set the local timezone for the application."""
    global _local_timezone_name
    _local_timezone_name = timezone_name or ""


def get_local_timezone():
    """
    Get the local timezone as a pytz timezone object.

    Returns:
        pytz timezone object for the configured local timezone.
    """
    if _local_timezone_name:
        try:
            return pytz.timezone(_local_timezone_name)
        except pytz.UnknownTimeZoneError:
            pass
    # Fallback: try system timezone name
    try:
        return pytz.timezone(_time.tzname[0])
    except pytz.UnknownTimeZoneError:
        # Last resort: calculate offset and use fixed offset timezone
        if _time.localtime().tm_isdst:
            offset_seconds = -_time.altzone
        else:
            offset_seconds = -_time.timezone
        return pytz.FixedOffset(offset_seconds // 60)


def now_utc() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(pytz.UTC)


def to_local_datetime(dt: datetime) -> datetime:
    """
    Convert an aware datetime to the local timezone.

    Naive datetimes are assumed to already be local and get localized.
    """
    local_tz = get_local_timezone()
    if dt.tzinfo is None:
        return local_tz.localize(dt)
    return dt.astimezone(local_tz)


def to_utc_datetime(dt: datetime) -> datetime:
    """
    Convert a datetime to UTC.

    Naive datetimes are interpreted in the local timezone.
    """
    if dt.tzinfo is None:
        local_dt = get_local_timezone().localize(dt)
        return local_dt.astimezone(pytz.UTC)
    return dt.astimezone(pytz.UTC)


def local_date(dt: datetime) -> date:
    """Calendar date of dt in the local timezone."""
    return to_local_datetime(dt).date()


def days_between(start: datetime, end: datetime) -> int:
    """
    Number of calendar days from start's local day to end's local day.

    Negative when end falls on an earlier day. Time of day is ignored,
    and DST transitions do not shift the result.
    """
    return (local_date(end) - local_date(start)).days


def local_naive_to_utc(dt: datetime) -> datetime:
    """
    Convert a naive local datetime to UTC.

    Used for UI components (like QDateTimeEdit) that provide naive datetimes.
    """
    return to_utc_datetime(dt)
