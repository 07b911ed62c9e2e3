"""Datetime helpers shared by ranking and prompt rendering."""
from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """
    Normalize a datetime to an aware UTC value.

    Naive values are treated as UTC, which is how every timestamp is written;
    some drivers (sqlite) drop the tzinfo on read.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def format_date(value: Optional[datetime]) -> str:
    if value is None:
        return "Not set"
    return ensure_utc(value).strftime("%Y-%m-%d")
