"""
Time utility.

Timestamp parsing and age arithmetic shared by all engines.
"""

from datetime import datetime, timezone
from typing import Optional, Union

SECONDS_PER_HOUR = 3600.0
SECONDS_PER_DAY = 86400.0


def parse_timestamp(value: Union[str, datetime, None]) -> Optional[datetime]:
    """
    Parse an ISO-8601 timestamp into a timezone-aware UTC datetime.

    Naive datetimes are assumed to be UTC. A trailing "Z" is accepted.

    Raises:
        ValueError: If the value is not a datetime or a valid ISO-8601 string
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
    else:
        raise ValueError(f"Unsupported timestamp type: {type(value).__name__}")

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def parse_date(value: str) -> datetime:
    """Parse a YYYY-MM-DD calendar date as midnight UTC."""
    return datetime.strptime(value, "%Y-%m-%d").replace(tzinfo=timezone.utc)


def today_iso(now: datetime) -> str:
    """Calendar date of `now` (UTC) in YYYY-MM-DD format."""
    return parse_timestamp(now).date().isoformat()


def hours_between(earlier: datetime, later: datetime) -> float:
    """Signed number of hours from `earlier` to `later`."""
    return (parse_timestamp(later) - parse_timestamp(earlier)).total_seconds() / SECONDS_PER_HOUR


def hours_old(created_at: datetime, now: datetime) -> float:
    """Age in hours, clamped at zero for timestamps in the future."""
    return max(0.0, hours_between(created_at, now))


def days_since_date(date: str, now: datetime) -> float:
    """Age of a YYYY-MM-DD date in days, clamped at zero."""
    elapsed = (parse_timestamp(now) - parse_date(date)).total_seconds()
    return elapsed / SECONDS_PER_DAY if elapsed > 0 else 0.0
