'''
Timing Validator
'''
from typing import Optional

from ..common.clock import Clock, SystemClock
from ..common.exceptions import PastDateTimeError
from ..common.logger import log
from ..core.datetime_utils import DateTimeLike, format_local, parse_instant, resolve_timezone, to_civil


class TimingValidator:
    """
    Decides whether a candidate instant is still in the future.
    "Now" always comes from the injected clock.
    """
    def __init__(self, clock: Optional[Clock] = None):
        self.clock = clock or SystemClock()

    def validate_slot_timing(self, candidate: DateTimeLike) -> None:
        """
        Raises InvalidDateTimeError if the candidate does not parse and
        PastDateTimeError if it lies strictly before now (UTC).
        """
        instant = parse_instant(candidate)
        now = self.clock.now()

        if instant < now:
            log.info(f"Rejected past slot time {instant.isoformat()} (now {now.isoformat()}).")
            raise PastDateTimeError(f"Cannot schedule slot in the past: {instant.isoformat()}")

    def validate_slot_timing_with_timezone(self, candidate: DateTimeLike, timezone: str) -> None:
        """
        Same check, but the candidate and "now" are both projected onto the
        civil calendar of `timezone` before being compared.
        """
        tz = resolve_timezone(timezone)
        instant = parse_instant(candidate)

        local_candidate = to_civil(instant, tz)
        local_now = to_civil(self.clock.now(), tz)

        if local_candidate < local_now:
            local_label = format_local(instant, tz)
            log.info(f"Rejected past slot time {local_label} in {timezone} (now {local_now:%Y-%m-%d %H:%M}).")
            raise PastDateTimeError(
                f"Cannot schedule slot in the past: {local_label} ({timezone})",
                details={"timezone": timezone, "local_datetime": local_label},
            )
