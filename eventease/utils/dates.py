from datetime import datetime
import pytz


def as_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime.

    SQLite hands timestamps back naive; they are always stored as UTC.
    """
    if value.tzinfo is None:
        return pytz.UTC.localize(value)
    return value.astimezone(pytz.UTC)


def parse_iso_datetime(value: str) -> datetime:
    """Parse an ISO-8601 timestamp into an aware UTC datetime; naive input is taken as UTC."""
    return as_utc(datetime.fromisoformat(value.replace("Z", "+00:00")))


def isoformat(value) -> str:
    return as_utc(value).isoformat() if value else None
