'''
Schedule Config Validator
'''
from typing import Any, Mapping, Optional
from uuid import UUID

from ..common.clock import Clock, SystemClock
from ..common.exceptions import InvalidScheduleConfigError, ScheduleChangeConflictError
from ..common.logger import log
from ..core.datetime_utils import HHMM_PATTERN, SlotTimeKey, hhmm_to_minutes
from ..database.repository import ScheduleSlotRepository
from ..models.enums import Weekday
from ..models.schedule import OperatingHours
from .schedule_template_validator import configured_slot_keys

MAX_TIMES_PER_WEEKDAY = 20
MIN_INTERVAL_MINUTES = 15

_DEFAULT_TIMES = ['07:00', '07:30', '08:00', '08:30', '15:00', '15:30', '16:00', '16:30']

# Template for new groups; every time is UTC.
DEFAULT_SCHEDULE_HOURS: dict[str, list[str]] = {
    day.value: list(_DEFAULT_TIMES)
    for day in (Weekday.MONDAY, Weekday.TUESDAY, Weekday.WEDNESDAY, Weekday.THURSDAY, Weekday.FRIDAY)
}


class ScheduleConfigValidator:
    """
    Checks for a group's schedule template before it is saved.
    Times and operating hours are both UTC 'HH:MM' strings.

    The structural checks need nothing injected; the check against existing
    bookings needs the repository and a clock.
    """
    def __init__(self, repository: Optional[ScheduleSlotRepository] = None, clock: Optional[Clock] = None):
        self.repository = repository
        self.clock = clock or SystemClock()

    @staticmethod
    def _validate_operating_hours(operating_hours: OperatingHours) -> None:
        for label, value in (("start_hour", operating_hours.start_hour), ("end_hour", operating_hours.end_hour)):
            if not HHMM_PATTERN.match(value):
                raise InvalidScheduleConfigError(f"Invalid {label} format: {value}. Expected HH:MM")

        if hhmm_to_minutes(operating_hours.start_hour) >= hhmm_to_minutes(operating_hours.end_hour):
            raise InvalidScheduleConfigError(
                f"Operating hours start_hour ({operating_hours.start_hour}) "
                f"must be before end_hour ({operating_hours.end_hour})"
            )

    def validate_schedule_hours(
        self,
        schedule_hours: Mapping[str, Any],
        operating_hours: Optional[OperatingHours] = None
    ) -> None:
        """Raises InvalidScheduleConfigError on the first problem found."""
        if operating_hours is not None:
            self._validate_operating_hours(operating_hours)

        valid_weekdays = Weekday.get_all_names()

        for weekday, times in schedule_hours.items():
            if weekday not in valid_weekdays:
                raise InvalidScheduleConfigError(f"Invalid weekday: {weekday}")

            if not isinstance(times, list):
                raise InvalidScheduleConfigError(f"Times for {weekday} must be an array")

            if len(times) > MAX_TIMES_PER_WEEKDAY:
                raise InvalidScheduleConfigError(
                    f"Maximum {MAX_TIMES_PER_WEEKDAY} time slots allowed per weekday"
                )

            if len(set(times)) != len(times):
                raise InvalidScheduleConfigError(f"Duplicate time slots found for {weekday}")

            for hhmm in times:
                if not isinstance(hhmm, str) or not HHMM_PATTERN.match(hhmm):
                    raise InvalidScheduleConfigError(f"Invalid time format: {hhmm}. Expected HH:MM")

                if operating_hours is not None:
                    minutes = hhmm_to_minutes(hhmm)
                    start = hhmm_to_minutes(operating_hours.start_hour)
                    end = hhmm_to_minutes(operating_hours.end_hour)
                    if not start <= minutes <= end:
                        raise InvalidScheduleConfigError(
                            f"Schedule time {hhmm} on {weekday} is outside operating hours "
                            f"({operating_hours.start_hour}-{operating_hours.end_hour} UTC)."
                        )

            ordered = sorted(hhmm_to_minutes(hhmm) for hhmm in times)
            for current, following in zip(ordered, ordered[1:]):
                if following - current < MIN_INTERVAL_MINUTES:
                    raise InvalidScheduleConfigError(
                        f"Minimum {MIN_INTERVAL_MINUTES}-minute interval required between time slots"
                    )

    async def validate_no_conflicts_with_existing_slots(
        self,
        group_id: UUID,
        schedule_hours: Mapping[str, Any]
    ) -> None:
        """
        Raises ScheduleChangeConflictError when the new template drops a UTC
        weekday/time that still has an upcoming slot with children assigned.
        Past slots and slots without children never block a change.
        """
        if self.repository is None:
            raise RuntimeError("ScheduleConfigValidator needs a repository to check existing slots.")

        kept = configured_slot_keys(group_id, schedule_hours)
        upcoming = await self.repository.find_future_schedule_slots_by_group(group_id, self.clock.now())

        conflicts = []
        for slot in upcoming:
            child_count = len(slot.child_assignments)
            if child_count == 0:
                continue
            key = SlotTimeKey.from_instant(slot.datetime)
            if key not in kept:
                conflicts.append(f"{key.weekday.value} {key.time_label} ({child_count} children assigned)")

        if conflicts:
            log.warning(f"Rejected schedule change for group {group_id}: {conflicts}.")
            raise ScheduleChangeConflictError(
                f"Cannot remove time slots with existing bookings: {', '.join(conflicts)}",
                details={"group_id": str(group_id), "conflicts": conflicts},
            )
