from datetime import date, datetime, time, timezone


def parse_iso(s: str) -> datetime:
    """Parses an ISO 8601 string, handling 'Z' for UTC."""
    s = s.strip()
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    return datetime.fromisoformat(s)


def to_utc(dt: datetime) -> datetime:
    """Converts a naive datetime to a timezone-aware UTC datetime."""
    return dt if dt.tzinfo is not None else dt.replace(tzinfo=timezone.utc)


def db_utc_naive(dt: datetime) -> datetime:
    """Converts a timezone-aware datetime to a naive UTC datetime for DB storage."""
    return to_utc(dt).astimezone(timezone.utc).replace(tzinfo=None)


def utcnow() -> datetime:
    """Current instant as a naive UTC datetime, comparable with stored values."""
    return datetime.now(tz=timezone.utc).replace(tzinfo=None)


def api_iso_z(dt: datetime) -> str:
    """Formats a datetime into an ISO 8601 string ending in 'Z' for API responses."""
    return to_utc(dt).astimezone(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def parse_day(s: str) -> date:
    """Parses a strict YYYY-MM-DD date."""
    return date.fromisoformat(s.strip())


def parse_hhmm(s: str) -> time:
    """Parses an HH:MM time of day."""
    hour, _, minute = s.strip().partition(":")
    if len(hour) != 2 or len(minute) != 2:
        raise ValueError(f"expected HH:MM, got {s!r}")
    return time(int(hour), int(minute))


def weekday_index(day: date) -> int:
    """Day of week with Sunday as 0, the numbering used by schedule rows."""
    return (day.weekday() + 1) % 7


def at(day: date, t: time) -> datetime:
    """Naive UTC instant for a time of day on a calendar date."""
    return datetime.combine(day, t)
