"""Shared helpers."""

from .dates import to_date, to_optional_date, utc_now, week_range

__all__ = ["to_date", "to_optional_date", "utc_now", "week_range"]
