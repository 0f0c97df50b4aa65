'''
Clock abstraction so "now" can be injected instead of read globally.
'''
from datetime import datetime, timezone


class Clock:
    """Source of the current instant."""

    def now(self) -> datetime:
        raise NotImplementedError


class SystemClock(Clock):
    """Reads the server clock, always in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock(Clock):
    """
    Always returns the same instant.
    Naive datetimes are taken as UTC.
    """

    def __init__(self, instant: datetime):
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=timezone.utc)
        self.instant = instant

    def now(self) -> datetime:
        return self.instant


def get_clock() -> Clock:
    """FastAPI dependency providing the production clock."""
    return SystemClock()
