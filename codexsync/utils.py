"""Utility functions for Codex sync."""

from datetime import datetime, timezone
from typing import Optional

# =============================================================================
# Constants for remote operations
# =============================================================================

# Page size for the content listing endpoint
DEFAULT_PAGE_SIZE: int = 100

# Retry configuration for transient errors
DEFAULT_MAX_RETRIES: int = 3
DEFAULT_RETRY_DELAY: float = 1.0  # seconds

# Per-request timeout
DEFAULT_TIMEOUT: float = 30.0  # seconds


# =============================================================================
# Timestamp parsing utilities
# =============================================================================


def parse_iso_timestamp(timestamp_str: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp into a timezone-aware datetime.

    Accepts a trailing ``Z``, explicit offsets and fractional seconds.
    Timestamps without zone information are read as UTC.

    Args:
        timestamp_str: ISO format timestamp string
            (e.g., "2025-01-15T10:30:00.000000Z")

    Returns:
        Aware datetime, or None if the value is empty or cannot be parsed
    """
    if not timestamp_str:
        return None

    value = timestamp_str.strip()
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"

    try:
        dt = datetime.fromisoformat(value)
    except ValueError:
        # Older interpreters reject fraction lengths other than 3 or 6 digits
        if "." not in value:
            return None
        head, _, tail = value.partition(".")
        offset = ""
        for sign in ("+", "-"):
            if sign in tail:
                offset = sign + tail.split(sign, 1)[1]
                break
        try:
            dt = datetime.fromisoformat(head + offset)
        except ValueError:
            return None

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def to_epoch(timestamp_str: Optional[str]) -> int:
    """Convert an ISO-8601 timestamp to whole epoch seconds.

    Args:
        timestamp_str: ISO format timestamp string, or None

    Returns:
        Seconds since the epoch; 0 when the value is absent or unparsable

    Examples:
        >>> to_epoch("1970-01-01T00:01:40Z")
        100
        >>> to_epoch(None)
        0
        >>> to_epoch("not a date")
        0
    """
    dt = parse_iso_timestamp(timestamp_str)
    if dt is None:
        return 0
    return int(dt.timestamp())


def format_mtime(mtime: float) -> str:
    """Render a filesystem mtime as a UTC ISO-8601 string.

    Examples:
        >>> format_mtime(0)
        '1970-01-01T00:00:00+00:00'
    """
    return datetime.fromtimestamp(int(mtime), tz=timezone.utc).isoformat()


def date_part(timestamp_str: Optional[str]) -> str:
    """Return the date portion of an ISO timestamp for display.

    Examples:
        >>> date_part("2025-01-15T10:30:00Z")
        '2025-01-15'
        >>> date_part(None)
        ''
    """
    if not timestamp_str:
        return ""
    return timestamp_str.split("T", 1)[0]
