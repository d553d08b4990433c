from __future__ import annotations

from datetime import date, datetime, time, timezone, tzinfo
from typing import Optional

# Attendance and sales use different day conventions:
# attendance rows are keyed by the UTC calendar day, assignments and sales
# by the server-local calendar day. Keep the two functions separate.


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_iso_datetime(value: str) -> datetime:
    """Parse an ISO-8601 timestamp; a trailing 'Z' means UTC."""
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return ensure_aware(datetime.fromisoformat(value))


def parse_hhmm(value: str) -> time:
    hh, mm = value.strip().split(":")
    return time(int(hh), int(mm))


def format_hhmm(value: time) -> str:
    return value.strftime("%H:%M")


def ensure_aware(ts: datetime) -> datetime:
    """Naive timestamps are treated as UTC."""
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts


def to_naive_utc(ts: Optional[datetime]) -> Optional[datetime]:
    """Storage form for MySQL DATETIME columns."""
    if ts is None:
        return None
    return ensure_aware(ts).astimezone(timezone.utc).replace(tzinfo=None)


def utc_day_bucket(ts: datetime) -> date:
    """Attendance day key: the UTC calendar day containing ts."""
    return ensure_aware(ts).astimezone(timezone.utc).date()


def local_day_bucket(ts: datetime, tz: tzinfo) -> date:
    """Assignment/sale day key: the server-local calendar day containing ts."""
    return ensure_aware(ts).astimezone(tz).date()


def local_wall_time(ts: datetime, tz: tzinfo) -> time:
    """Local wall-clock time truncated to the minute (HH:MM granularity)."""
    local = ensure_aware(ts).astimezone(tz)
    return time(local.hour, local.minute)
