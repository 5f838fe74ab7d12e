"""
Time semantics utilities for market vs wall-clock time handling.

Every session decision is made in US Eastern civil time. Instants coming
from providers are UTC; naive datetimes are treated as UTC.
"""

from datetime import date, datetime, time, timedelta, timezone
from typing import Optional

import pytz

EASTERN = pytz.timezone("America/New_York")


def get_timezone(name: Optional[str] = None) -> pytz.BaseTzInfo:
    """Resolve a timezone name, defaulting to US Eastern."""
    if name is None:
        return EASTERN
    return pytz.timezone(name)


def ensure_utc(ts: datetime) -> datetime:
    """Return an aware UTC datetime, treating naive input as UTC."""
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


def to_eastern(ts: datetime, tz: Optional[pytz.BaseTzInfo] = None) -> datetime:
    """Convert an instant to Eastern civil time."""
    return ensure_utc(ts).astimezone(tz or EASTERN)


def trading_date(ts: datetime, tz: Optional[pytz.BaseTzInfo] = None) -> date:
    """Calendar date of the instant in Eastern time."""
    return to_eastern(ts, tz).date()


def eastern_instant(day: date, at: time, tz: Optional[pytz.BaseTzInfo] = None) -> datetime:
    """
    Build the UTC instant of an Eastern wall-clock time on a given day.

    Args:
        day: Eastern calendar date
        at: Eastern wall-clock time

    Returns:
        Aware UTC datetime
    """
    zone = tz or EASTERN
    local = zone.localize(datetime.combine(day, at))
    return local.astimezone(timezone.utc)


def next_friday(day: date) -> date:
    """Next Friday strictly after the given date."""
    days_ahead = (4 - day.weekday()) % 7 or 7
    return day + timedelta(days=days_ahead)


def format_market_time(market_ts: datetime) -> str:
    """
    Format market timestamp for snapshot emission and logging.

    Args:
        market_ts: Market timestamp to format

    Returns:
        ISO8601 UTC string with millisecond precision and a Z suffix
    """
    iso = ensure_utc(market_ts).isoformat(timespec="milliseconds")
    return iso.replace("+00:00", "Z")


def parse_market_time(value: str) -> datetime:
    """Parse an ISO8601 timestamp produced by format_market_time."""
    return ensure_utc(datetime.fromisoformat(value.replace("Z", "+00:00")))


def from_epoch_seconds(seconds: float) -> datetime:
    """Convert a provider epoch timestamp to an aware UTC datetime."""
    return datetime.fromtimestamp(seconds, tz=timezone.utc)


def time_elapsed_seconds(start_time: datetime, end_time: datetime) -> float:
    """Elapsed seconds between two market timestamps."""
    return (ensure_utc(end_time) - ensure_utc(start_time)).total_seconds()
