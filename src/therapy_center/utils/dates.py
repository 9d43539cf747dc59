"""
Date normalization helpers.

Stored instants can come back from a document store as a native datetime,
a {seconds, nanoseconds} mapping (Firestore export shape), an ISO string
or epoch milliseconds. Everything is normalized to an aware UTC datetime.
"""

import logging
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Optional, Tuple

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_date(value: Any) -> datetime:
    """
    Normalize any supported date representation to an aware UTC datetime.

    Never raises: unparsable input is logged and replaced with the current time.
    """
    if isinstance(value, datetime):
        return _as_utc(value)

    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)

    if isinstance(value, dict):
        seconds = value.get("seconds", value.get("_seconds"))
        if isinstance(seconds, (int, float)) and not isinstance(seconds, bool):
            nanos = value.get("nanoseconds", value.get("_nanoseconds")) or 0
            try:
                return datetime.fromtimestamp(seconds + nanos / 1e9, tz=timezone.utc)
            except (OverflowError, OSError, ValueError, TypeError):
                pass

    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return _as_utc(datetime.fromisoformat(text))
        except ValueError:
            pass

    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError, TypeError):
            pass

    logger.warning(f"Could not parse date value {value!r}, using current time")
    return utc_now()


def to_optional_date(value: Any) -> Optional[datetime]:
    """Like to_date, but None stays None."""
    if value is None:
        return None
    return to_date(value)


def week_range(week_of: Any) -> Tuple[datetime, datetime]:
    """Return the half-open [start, start + 7 days) range beginning at week_of."""
    start = to_date(week_of)
    return start, start + timedelta(days=7)
