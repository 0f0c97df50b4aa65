'''
Validation Service
'''
from datetime import datetime
from typing import Annotated, Any, Iterable, Mapping, Optional
from uuid import UUID

from fastapi import Depends

from ..common.clock import Clock, get_clock
from ..common.config import settings
from ..common.exceptions import SlotNotFoundError, PastDateTimeError
from ..common.logger import log
from ..core.datetime_utils import DateTimeLike, UTC_NAME
from ..core.slot_shapes import normalize_slot_datetime
from ..database.repository import ScheduleSlotRepository
from ..models.schedule import OperatingHours, SlotStats
from .capacity_calculator import CapacityCalculator
from .conflict_detector import ConflictDetector
from .schedule_config_validator import ScheduleConfigValidator
from .schedule_template_validator import ScheduleTemplateValidator
from .slot_integrity_validator import SlotIntegrityValidator
from .timing_validator import TimingValidator


class ValidationService:
    """
    Facade over the slot validators, called by request handlers before any
    mutating operation (create slot, assign vehicle/driver/child, override seats).

    Failures are never caught or reinterpreted here: every
    ScheduleValidationError reaches the caller unchanged.
    No locking is done; two concurrent requests may both pass a capacity
    check against the same state.
    """
    def __init__(
        self,
        repository: Annotated[ScheduleSlotRepository, Depends(ScheduleSlotRepository)],
        clock: Annotated[Clock, Depends(get_clock)]
    ):
        self.repository = repository
        self.capacity_calculator = CapacityCalculator()
        self.timing_validator = TimingValidator(clock)
        self.schedule_template_validator = ScheduleTemplateValidator(repository)
        self.conflict_detector = ConflictDetector(repository)
        self.slot_integrity_validator = SlotIntegrityValidator(repository, self.capacity_calculator)
        self.schedule_config_validator = ScheduleConfigValidator(repository, clock)

    # --- Timing ---

    def validate_slot_timing(self, candidate: DateTimeLike) -> None:
        self.timing_validator.validate_slot_timing(candidate)

    def validate_slot_timing_with_timezone(self, candidate: DateTimeLike, timezone: str) -> None:
        self.timing_validator.validate_slot_timing_with_timezone(candidate, timezone)

    # --- Schedule Template ---

    async def validate_schedule_time(self, group_id: UUID, candidate: DateTimeLike, timezone: str = UTC_NAME) -> None:
        await self.schedule_template_validator.validate_schedule_time(group_id, candidate, timezone)

    def validate_schedule_hours(
        self,
        schedule_hours: Mapping[str, Any],
        operating_hours: Optional[OperatingHours] = None
    ) -> None:
        self.schedule_config_validator.validate_schedule_hours(schedule_hours, operating_hours)

    async def validate_schedule_config_update(
        self,
        group_id: UUID,
        schedule_hours: Mapping[str, Any],
        operating_hours: Optional[OperatingHours] = None
    ) -> None:
        """Structural checks first, then the check against upcoming booked slots."""
        self.schedule_config_validator.validate_schedule_hours(schedule_hours, operating_hours)
        await self.schedule_config_validator.validate_no_conflicts_with_existing_slots(group_id, schedule_hours)

    # --- Capacity ---

    def get_effective_capacity(self, assignment: Any) -> int:
        return self.capacity_calculator.get_effective_capacity(assignment)

    def compute_total_effective_capacity(self, assignments: Iterable[Any]) -> int:
        return self.capacity_calculator.compute_total_effective_capacity(assignments)

    def validate_seat_override(self, value: int) -> None:
        self.capacity_calculator.validate_seat_override(value)

    # --- Conflicts ---

    async def validate_vehicle_assignment(self, vehicle_id: UUID, schedule_slot_id: UUID, timezone: str = UTC_NAME) -> None:
        await self.conflict_detector.validate_vehicle_assignment(vehicle_id, schedule_slot_id, timezone)

    async def validate_driver_availability(self, driver_id: UUID, schedule_slot_id: UUID, timezone: str = UTC_NAME) -> None:
        await self.conflict_detector.validate_driver_availability(driver_id, schedule_slot_id, timezone)

    async def validate_parent_conflicts(self, parent_id: UUID, schedule_slot_id: UUID) -> list[str]:
        return await self.conflict_detector.validate_parent_conflicts(parent_id, schedule_slot_id)

    async def validate_parent_availability(self, parent_id: UUID, schedule_slot_id: UUID, timezone: str = UTC_NAME) -> None:
        await self.conflict_detector.validate_parent_availability(parent_id, schedule_slot_id, timezone)

    # --- Slot Integrity ---

    async def validate_child_assignment(self, child_id: UUID, schedule_slot_id: UUID) -> None:
        await self.slot_integrity_validator.validate_child_assignment(child_id, schedule_slot_id)

    async def validate_slot_integrity(self, schedule_slot_id: UUID) -> bool:
        return await self.slot_integrity_validator.validate_slot_integrity(schedule_slot_id)

    async def get_slot_stats(self, schedule_slot_id: UUID) -> Optional[SlotStats]:
        return await self.slot_integrity_validator.get_slot_stats(schedule_slot_id)

    # --- Composite Checks ---

    async def validate_slot_creation(self, group_id: UUID, slot: Any, timezone: Optional[str] = None) -> datetime:
        """
        Full check before a new slot is written.
        1. Normalises the slot input (datetime or legacy day/time/week) to UTC.
        2. Rejects instants in the past for the creator's timezone.
        3. Rejects instants that are not part of the group's schedule template.
        Returns the canonical UTC instant to persist.
        """
        timezone = timezone or settings.DEFAULT_TIMEZONE
        instant = normalize_slot_datetime(slot)
        log.info(f"Validating new slot for group {group_id} at {instant.isoformat()} ({timezone}).")

        self.timing_validator.validate_slot_timing_with_timezone(instant, timezone)
        await self.schedule_template_validator.validate_schedule_time(group_id, instant, timezone)
        return instant

    async def validate_slot_not_in_past(self, schedule_slot_id: UUID, timezone: Optional[str] = None) -> None:
        """Guards modifications of an existing slot that has already taken place."""
        timezone = timezone or settings.DEFAULT_TIMEZONE
        slot = await self.repository.find_schedule_slot_by_id(schedule_slot_id)
        if not slot:
            raise SlotNotFoundError(
                "Schedule slot not found",
                details={"schedule_slot_id": str(schedule_slot_id)},
            )
        try:
            self.timing_validator.validate_slot_timing_with_timezone(slot.datetime, timezone)
        except PastDateTimeError as e:
            raise PastDateTimeError(
                f"Cannot modify trips in the past ({e.details['local_datetime']} in {timezone})",
                details=e.details,
            ) from e
