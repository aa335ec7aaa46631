from __future__ import annotations

from datetime import date, datetime
from typing import Any, Iterable, Optional, TypeVar, Union

from django.utils import timezone


Timestamp = Union[str, datetime, date]

T = TypeVar("T")


def parse_timestamp(value: Timestamp) -> datetime:
    """
    Convert an ISO 8601 value into an aware datetime.

    Args:
        value: An ISO string ("2024-01-01", "2024-01-01T09:30:00.000Z", ...),
            a datetime, or a date (read as local midnight).

    Returns:
        An aware datetime. Values without an offset are interpreted in the
        current (settings.TIME_ZONE) zone.

    Raises:
        ValueError: If the value is empty or not a recognised timestamp.
    """
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        raw = value.strip()
        if not raw:
            raise ValueError("Timestamp cannot be empty.")
        if raw.endswith(("Z", "z")):
            raw = raw[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(raw)
        except ValueError:
            raise ValueError(f"Invalid ISO timestamp: {value!r}")
    else:
        raise ValueError(f"Unsupported timestamp type: {type(value).__name__}")

    if timezone.is_naive(dt):
        dt = timezone.make_aware(dt)
    return dt


def local_datetime(value: Optional[Timestamp] = None) -> datetime:
    """Return the timestamp (or now) converted to the local calendar zone."""
    dt = timezone.now() if value is None else parse_timestamp(value)
    return timezone.localtime(dt)


def get_date_key(value: Optional[Timestamp] = None) -> str:
    """
    Calendar-day key ("YYYY-MM-DD") of a timestamp in the local zone, not UTC.

    A plain date is taken as-is.
    """
    if isinstance(value, date) and not isinstance(value, datetime):
        return value.isoformat()
    return local_datetime(value).date().isoformat()


def is_today(value: Timestamp, now: Optional[datetime] = None) -> bool:
    return get_date_key(value) == get_date_key(now)


def get_check_in_for_date(check_ins: Iterable[T], day: Optional[Timestamp] = None) -> Optional[T]:
    """
    Find the record that falls on the given calendar day.

    Args:
        check_ins: Records exposing a ``date`` attribute.
        day: Day to look up (date, datetime or ISO string). Defaults to today.

    Returns:
        The first matching record, or None.
    """
    key = get_date_key(day)
    for record in check_ins:
        if get_date_key(getattr(record, "date")) == key:
            return record
    return None


def new_record_id(prefix: str, now: Optional[datetime] = None) -> str:
    # "<prefix>-<epoch millis>"
    now = now or timezone.now()
    return f"{prefix}-{int(now.timestamp() * 1000)}"


def strip_or_none(value: Any) -> Optional[str]:
    """Trim a string value; empty strings become None."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


# -------------------------
# Display formatting
# -------------------------

def format_record_date(value: Timestamp) -> str:
    """e.g. 'Jan 1, 2024, 09:30'"""
    dt = local_datetime(value)
    return f"{dt:%b} {dt.day}, {dt.year}, {dt:%H:%M}"


def format_record_date_short(value: Timestamp) -> str:
    """e.g. 'Jan 1'"""
    dt = local_datetime(value)
    return f"{dt:%b} {dt.day}"


def format_check_in_date(value: Timestamp) -> str:
    """e.g. 'Jan 1, 2024'"""
    dt = local_datetime(value)
    return f"{dt:%b} {dt.day}, {dt.year}"
