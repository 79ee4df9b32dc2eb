#!/usr/bin/env python3

"""
Timestamp Utilities - capture timestamps for queries and events

Standard: All internal timestamps use UTC with 'Z' suffix (ISO 8601)
Display: Local time conversion available for user-facing output
"""

from datetime import datetime, timezone
from typing import Callable, Optional


def utc_now() -> datetime:
    """Get current UTC datetime with timezone awareness"""
    return datetime.now(timezone.utc)


def timestamp_utc() -> str:
    """
    Generate ISO 8601 UTC timestamp with 'Z' suffix
    
    Returns:
        str: e.g., "2025-06-20T23:17:27.832348Z"
    """
    return to_iso_utc(utc_now())


def to_iso_utc(dt: datetime) -> str:
    """Format an aware datetime as ISO 8601 UTC with 'Z' suffix"""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat().replace('+00:00', 'Z')


def format_for_display(dt: Optional[datetime] = None, include_seconds: bool = True) -> str:
    """Local wall-clock time for the interactive console"""
    dt = dt or utc_now()
    fmt = '%H:%M:%S' if include_seconds else '%H:%M'
    return dt.astimezone().strftime(fmt)


class CaptureClock:
    """
    UTC clock whose readings never go backwards.
    
    The system clock can step back (NTP adjustments); event capture
    timestamps must stay non-decreasing in arrival order, so a reading
    earlier than the previous one is clamped to the previous one.
    Equal consecutive readings are allowed.
    """
    
    def __init__(self, source: Callable[[], datetime] = utc_now):
        self._source = source
        self._last: Optional[datetime] = None
    
    def now(self) -> datetime:
        current = self._source()
        if self._last is not None and current < self._last:
            current = self._last
        self._last = current
        return current
