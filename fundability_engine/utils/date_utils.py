"""Date manipulation utilities"""

from datetime import date, datetime, time, timezone


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime"""
    return datetime.now(timezone.utc)


def to_iso(moment: datetime) -> str:
    """UTC ISO-8601 timestamp with milliseconds and a Z suffix, assuming UTC for naive datetimes"""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_iso_datetime(value: str, end_of_day: bool = False) -> datetime:
    """
    Parse an ISO date or datetime string into an aware UTC datetime.

    A bare date ("2024-01-31") maps to the start of that day, or to its last
    microsecond when end_of_day is set, so date-only ranges are inclusive.

    Raises:
        ValueError: If the string is not ISO-8601
    """
    value = value.strip()
    if len(value) == 10:
        day = date.fromisoformat(value)
        moment = datetime.combine(day, time.max if end_of_day else time.min)
    else:
        moment = datetime.fromisoformat(value.replace("Z", "+00:00"))

    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)
