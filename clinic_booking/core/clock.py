"""Wall-clock access for scheduling decisions.

Slot comparisons are single-zone: every "now" handed to the availability
engine is a naive datetime in the clinic's local wall-clock time, matching
how appointment dates and times are stored (plain text, no offset).
"""

from datetime import date, datetime
from zoneinfo import ZoneInfo


class Clock:
    """Clock reading local time in the clinic time zone."""

    def __init__(self, timezone: str | None = None):
        """Initialize clock; ``None`` uses the server's local zone."""
        self.tz = ZoneInfo(timezone) if timezone else None

    def now(self) -> datetime:
        """Current naive local wall-clock time."""
        if self.tz is None:
            return datetime.now()
        return datetime.now(self.tz).replace(tzinfo=None)

    def today(self) -> date:
        """Current local calendar day."""
        return self.now().date()


class FixedClock(Clock):
    """Clock frozen at a given instant, for tests and replays."""

    def __init__(self, instant: datetime):
        super().__init__()
        self.instant = instant.replace(tzinfo=None)

    def now(self) -> datetime:
        return self.instant
