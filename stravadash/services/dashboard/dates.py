"""
Start-date handling for activities.

Strava sends ``start_date`` as an ISO-8601 string; exports and older clients
sometimes carry epoch numbers instead. Both are normalised to ``datetime``.
"""
from datetime import datetime, timezone
from typing import Union

# Epoch values above this are taken to be milliseconds.
EPOCH_MS_THRESHOLD = 1e11


def parse_start_date(value: Union[str, int, float, datetime]) -> datetime:
    """
    Parse an activity start date.

    Args:
        value: ISO-8601 string (date-only, naive, ``Z`` or offset suffixed),
            epoch seconds/milliseconds, or an existing datetime.

    Returns:
        The parsed datetime. Epoch inputs come back timezone-aware (UTC);
        ISO strings keep whatever offset they carried.

    Raises:
        ValueError: if the value cannot be interpreted as a timestamp.
    """
    if isinstance(value, datetime):
        return value
    if isinstance(value, bool):
        raise ValueError(f"Invalid start date: {value!r}")
    if isinstance(value, (int, float)):
        seconds = value / 1000.0 if value > EPOCH_MS_THRESHOLD else float(value)
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            raise ValueError("Empty start date")
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        return datetime.fromisoformat(text)
    raise ValueError(f"Invalid start date: {value!r}")


def format_display_date(moment: datetime) -> str:
    """Format as ``M/D/YYYY`` without zero padding (e.g. ``1/2/2024``)."""
    return f"{moment.month}/{moment.day}/{moment.year}"


def sort_key(moment: datetime) -> float:
    """Comparable key for naive and aware datetimes alike (naive read as UTC)."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.timestamp()
