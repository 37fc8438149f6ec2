"""
Time utilities for the circulation core.
Provides the injectable clock used for due dates, overdue checks and fine
timestamps, plus millisecond timestamps for the event log.
"""

import time
from datetime import date, datetime, timedelta
from typing import Optional


def now_ms() -> int:
    """Get current timestamp in milliseconds since epoch"""
    return int(time.time() * 1000)


def format_timestamp_ms(timestamp_ms: int) -> str:
    """
    Format a millisecond timestamp as readable string.

    Args:
        timestamp_ms: Timestamp in milliseconds

    Returns:
        Formatted timestamp string
    """
    dt = datetime.fromtimestamp(timestamp_ms / 1000)
    return dt.strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]


class Clock:
    """Source of the current time. Subclasses override now()."""

    def now(self) -> datetime:
        raise NotImplementedError

    def today(self) -> date:
        return self.now().date()

    def today_plus_days(self, days: int) -> date:
        """Get today's date plus the given number of days"""
        return self.today() + timedelta(days=days)


class SystemClock(Clock):
    """Wall-clock time"""

    def now(self) -> datetime:
        return datetime.now()


class FixedClock(Clock):
    """
    Clock frozen at a given instant until advanced explicitly.
    Used by tests and the demo to make due dates deterministic.
    """

    def __init__(self, start: Optional[datetime] = None):
        self._now = start or datetime(2024, 1, 1, 9, 0, 0)

    def now(self) -> datetime:
        return self._now

    def advance(self, days: int = 0, hours: int = 0) -> datetime:
        """Move the clock forward and return the new instant"""
        self._now = self._now + timedelta(days=days, hours=hours)
        return self._now


SYSTEM_CLOCK = SystemClock()
