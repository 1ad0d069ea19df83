"""RFC 3339 timestamp helpers for persisted credentials."""

from __future__ import annotations

import re
from datetime import datetime, timezone

# Fractional seconds of any precision (servers may send 7 digits)
_FRACTION = re.compile(r"\.(\d+)")


def now_utc() -> datetime:
    """Return the current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def parse_rfc3339(value: str) -> datetime:
    """Parse an RFC 3339 timestamp into a timezone-aware UTC datetime.

    Naive values are interpreted as UTC.

    Args:
        value: Timestamp such as ``2024-05-01T12:00:00Z``.

    Returns:
        Parsed UTC datetime.

    Raises:
        ValueError: If the value is empty or not a valid timestamp.

    Examples:
        >>> parse_rfc3339("2024-05-01T12:00:00Z").isoformat()
        '2024-05-01T12:00:00+00:00'
    """
    if not isinstance(value, str) or not value.strip():
        raise ValueError("RFC 3339 value must be a non-empty string")

    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"

    text = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def to_rfc3339(value: datetime) -> str:
    """Format a datetime as RFC 3339 in UTC with a ``Z`` suffix.

    Args:
        value: Datetime to format. Naive values are treated as UTC.

    Returns:
        Formatted timestamp string.

    Examples:
        >>> from datetime import datetime, timezone
        >>> to_rfc3339(datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc))
        '2024-05-01T12:00:00Z'
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    text = value.astimezone(timezone.utc).isoformat(timespec="microseconds" if value.microsecond else "seconds")
    return text.replace("+00:00", "Z")


__all__ = [
    "now_utc",
    "parse_rfc3339",
    "to_rfc3339",
]
