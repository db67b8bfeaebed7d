"""Clock implementations for the engine's notion of "today" """

from datetime import date, datetime
from zoneinfo import ZoneInfo

from rto_validity.config import settings


class SystemClock:
    """Today's date in the office's timezone"""

    def __init__(self, timezone: str | None = None):
        self.timezone = ZoneInfo(timezone or settings.timezone)

    def today(self) -> date:
        return datetime.now(self.timezone).date()

    def now(self) -> datetime:
        return datetime.now(self.timezone)


class FixedClock:
    """Clock pinned to one instant, for tests and replays"""

    def __init__(self, current: datetime):
        self.current = current

    def today(self) -> date:
        return self.current.date()

    def now(self) -> datetime:
        return self.current
