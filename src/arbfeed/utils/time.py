"""
Time utilities.

Timestamps on the wire are RFC 3339 strings produced by a Go service,
which may carry nanosecond fractions; everything inside the client is a
timezone-aware UTC datetime.
"""

import re
import time
from datetime import UTC, datetime


# Fraction digits beyond microseconds are dropped before parsing
_FRACTION_RE = re.compile(r"(\.\d{6})\d+")


def get_timestamp_us() -> int:
    """
    Get current timestamp in microseconds.

    Returns:
        Current Unix timestamp in microseconds.
    """
    return time.time_ns() // 1000


def utc_now() -> datetime:
    """Get the current time as an aware UTC datetime."""
    return datetime.now(tz=UTC)


def parse_timestamp(value: str | datetime) -> datetime:
    """
    Parse an RFC 3339 timestamp into an aware UTC datetime.

    Args:
        value: Timestamp string or datetime.

    Returns:
        Aware datetime in UTC. Naive inputs are taken as UTC.

    Raises:
        ValueError: If the string is not a valid timestamp.

    Example:
        >>> parse_timestamp("2024-01-01T12:00:00.123456789Z")
        datetime.datetime(2024, 1, 1, 12, 0, 0, 123456, tzinfo=datetime.timezone.utc)
    """
    if isinstance(value, datetime):
        dt = value
    else:
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        text = _FRACTION_RE.sub(r"\1", text)
        dt = datetime.fromisoformat(text)

    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)

    try:
        return dt.astimezone(UTC)
    except OverflowError as e:
        raise ValueError(f"Timestamp out of range: {value}") from e


def seconds_until(expires_at: datetime, now: datetime) -> float:
    """Seconds from `now` until `expires_at` (negative once past)."""
    return (expires_at - now).total_seconds()


def format_countdown(seconds_left: float) -> str:
    """
    Format time left as minutes and seconds.

    Args:
        seconds_left: Remaining time in seconds (must be positive).

    Returns:
        Label in M:SS form.

    Examples:
        >>> format_countdown(125.7)
        '2:05'
        >>> format_countdown(0.4)
        '0:00'
    """
    minutes, seconds = divmod(int(seconds_left), 60)
    return f"{minutes}:{seconds:02d}"
