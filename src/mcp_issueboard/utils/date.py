"""Timestamp helpers for store records."""

from datetime import datetime, timezone

import dateutil.parser


def parse_date(value: str | int | datetime | None) -> datetime | None:
    """
    Read a timestamp as stores and seed files hand it over.

    Accepted forms are a datetime (returned unchanged), epoch milliseconds
    as an int or a digit-only string, and ISO 8601 strings. Offsets are kept
    and strings without one stay naive.

    Args:
        value: The stored timestamp

    Returns:
        The datetime, or None for None and the empty string

    Raises:
        ValueError: If a string is not a timestamp
        TypeError: If the value has any other type
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise TypeError(f"Unsupported timestamp value: {value!r}")
    if isinstance(value, int) or value.isdigit():
        return datetime.fromtimestamp(int(value) / 1000, tz=timezone.utc)
    return dateutil.parser.isoparse(value.strip())


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)
