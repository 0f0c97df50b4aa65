'''
Schedule Template Validator
'''
from datetime import timezone as dt_timezone
from typing import Annotated, Any, Mapping
from uuid import UUID

from fastapi import Depends

from ..common.exceptions import NoScheduleConfigError, TimeNotConfiguredError, InvalidTimezoneError
from ..common.logger import log
from ..core.datetime_utils import DateTimeLike, SlotTimeKey, parse_instant, resolve_timezone, UTC_NAME
from ..database.repository import ScheduleSlotRepository


def configured_slot_keys(group_id: UUID, schedule_hours: Mapping[str, Any]) -> set[SlotTimeKey]:
    """
    Every weekday/time pair of a template as SlotTimeKeys.
    Malformed weekdays, times and non-list entries are skipped with a warning.
    """
    keys = set()
    for weekday, times in schedule_hours.items():
        if not isinstance(times, list):
            log.warning(f"Ignoring schedule entry {weekday} for group {group_id}: expected a list, got {times!r}.")
            continue
        for hhmm in times:
            try:
                keys.add(SlotTimeKey.from_config(weekday, hhmm))
            except ValueError:
                log.warning(f"Ignoring malformed schedule entry {weekday} {hhmm!r} for group {group_id}.")
    return keys


class ScheduleTemplateValidator:
    """
    Checks a candidate instant against the group's allow-list of
    weekday + time-of-day pairs.

    The configuration is written in UTC, so the instant is always matched by
    its UTC weekday and time. A slot authored as "Monday 01:00" in Tokyo is
    "Sunday 16:00" UTC and only matches a SUNDAY entry.
    """
    def __init__(self, repository: Annotated[ScheduleSlotRepository, Depends(ScheduleSlotRepository)]):
        self.repository = repository

    def _log_local_view(self, instant, timezone: str, key: SlotTimeKey) -> None:
        try:
            tz = resolve_timezone(timezone)
        except InvalidTimezoneError:
            log.warning(f"Invalid timezone '{timezone}', defaulting to UTC.")
            tz = dt_timezone.utc
            timezone = UTC_NAME
        local = SlotTimeKey.from_instant(instant, tz)
        log.info(
            f"Schedule check: {local.weekday.value} {local.time_label} in {timezone} "
            f"resolves to {key.weekday.value} {key.time_label} UTC."
        )

    async def validate_schedule_time(
        self,
        group_id: UUID,
        candidate: DateTimeLike,
        timezone: str = UTC_NAME
    ) -> None:
        """
        Raises NoScheduleConfigError when the group has no template and
        TimeNotConfiguredError when the instant's UTC weekday/time is not listed.
        """
        config = await self.repository.find_group_schedule_config(group_id)
        if config is None:
            raise NoScheduleConfigError(
                "Group has no schedule configuration. "
                "Please contact an administrator to configure schedule times.",
                details={"group_id": str(group_id)},
            )

        instant = parse_instant(candidate)
        key = SlotTimeKey.from_instant(instant)
        self._log_local_view(instant, timezone, key)

        if key not in configured_slot_keys(config.group_id, config.schedule_hours):
            available = config.all_configured_times()
            raise TimeNotConfiguredError(
                f"Time {key.time_label} is not configured for {key.weekday.value} in this group. "
                f"Available times: {', '.join(available)}",
                details={
                    "weekday": key.weekday.value,
                    "time": key.time_label,
                    "available_times": available,
                },
            )
