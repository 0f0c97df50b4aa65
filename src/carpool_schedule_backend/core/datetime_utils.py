'''
Pure date/time helpers shared by the validators.

All instants handled by the backend are timezone-aware and normalised to UTC.
Civil (wall-clock) projections into an IANA timezone go through zoneinfo so
DST rules always come from the timezone database.
'''
import re
from datetime import datetime, timezone
from typing import Any, NamedTuple, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..common.exceptions import InvalidDateTimeError, InvalidTimezoneError
from ..models.enums import Weekday

DateTimeLike = Union[datetime, str]

UTC_NAME = "UTC"
HHMM_PATTERN = re.compile(r"^([01][0-9]|2[0-3]):([0-5][0-9])$")


def parse_instant(candidate: Any) -> datetime:
    """
    Parses a datetime or an ISO 8601 string into an aware UTC datetime.
    Naive values (and strings without an offset) are read as UTC.
    Raises InvalidDateTimeError for anything else.
    """
    if isinstance(candidate, datetime):
        parsed = candidate
    elif isinstance(candidate, str):
        text = candidate.strip()
        if text[-1:] in ("Z", "z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            raise InvalidDateTimeError(f"Invalid datetime: {candidate}") from None
    else:
        raise InvalidDateTimeError(f"Invalid datetime: {candidate!r}")

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    try:
        return parsed.astimezone(timezone.utc)
    except OverflowError:
        raise InvalidDateTimeError(f"Invalid datetime: {candidate} is out of range") from None


def resolve_timezone(name: str) -> ZoneInfo:
    """Returns the ZoneInfo for an IANA identifier or raises InvalidTimezoneError."""
    if not isinstance(name, str) or not name.strip():
        raise InvalidTimezoneError(f"Invalid timezone: {name!r}")
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        raise InvalidTimezoneError(f"Invalid timezone: {name}") from None


def _shift(instant: datetime, tz: ZoneInfo | timezone) -> datetime:
    try:
        return instant.astimezone(tz)
    except OverflowError:
        raise InvalidDateTimeError(f"Datetime out of range in {tz}: {instant.isoformat()}") from None


def to_civil(instant: datetime, tz: ZoneInfo) -> datetime:
    """Projects an absolute instant onto the naive wall-clock time of `tz`."""
    return _shift(instant, tz).replace(tzinfo=None)


def format_local(instant: datetime, tz: ZoneInfo) -> str:
    return _shift(instant, tz).strftime("%Y-%m-%d %H:%M")


def parse_hhmm(value: str) -> tuple[int, int]:
    """Parses a zero-padded 24-hour 'HH:MM' string."""
    match = HHMM_PATTERN.match(value) if isinstance(value, str) else None
    if not match:
        raise ValueError(f"Invalid time format: {value}. Expected HH:MM")
    return int(match.group(1)), int(match.group(2))


def hhmm_to_minutes(value: str) -> int:
    hour, minute = parse_hhmm(value)
    return hour * 60 + minute


class SlotTimeKey(NamedTuple):
    """A (weekday, hour, minute) triple; the unit of schedule matching."""
    weekday: Weekday
    hour: int
    minute: int

    @classmethod
    def from_instant(cls, instant: datetime, tz: ZoneInfo | timezone = timezone.utc) -> "SlotTimeKey":
        local = _shift(instant, tz)
        return cls(Weekday.from_index(local.weekday()), local.hour, local.minute)

    @classmethod
    def from_config(cls, weekday: str, hhmm: str) -> "SlotTimeKey":
        hour, minute = parse_hhmm(hhmm)
        return cls(Weekday(weekday), hour, minute)

    @property
    def time_label(self) -> str:
        return f"{self.hour:02d}:{self.minute:02d}"
