"""Small helpers shared across logsh modules."""

from logsh.utils.timestamps import now_utc, parse_rfc3339, to_rfc3339

__all__ = [
    "now_utc",
    "parse_rfc3339",
    "to_rfc3339",
]
