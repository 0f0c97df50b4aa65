'''
Conflict Detector
'''
from typing import Annotated, Callable
from uuid import UUID

from fastapi import Depends

from ..common.exceptions import (
    DriverConflictError,
    InvalidTimezoneError,
    ParentConflictError,
    SlotNotFoundError,
    VehicleConflictError,
)
from ..common.logger import log
from ..core.datetime_utils import format_local, resolve_timezone, UTC_NAME
from ..database.repository import ScheduleSlotRepository
from ..models.schedule import ScheduleSlotRecord, VehicleAssignmentRecord


class ConflictDetector:
    """
    Detects double bookings of a vehicle, a driver or a parent.

    Only other slots of the *same group* at the *same absolute instant* are
    considered. Bookings in other groups or at other times are not conflicts.
    """
    def __init__(self, repository: Annotated[ScheduleSlotRepository, Depends(ScheduleSlotRepository)]):
        self.repository = repository

    async def _get_slot_or_raise(self, schedule_slot_id: UUID) -> ScheduleSlotRecord:
        slot = await self.repository.find_schedule_slot_by_id(schedule_slot_id)
        if not slot:
            log.warning(f"Conflict check requested for non-existing slot {schedule_slot_id}.")
            raise SlotNotFoundError(
                "Schedule slot not found",
                details={"schedule_slot_id": str(schedule_slot_id)},
            )
        return slot

    async def _find_conflicting_slots(
        self,
        slot: ScheduleSlotRecord,
        matches: Callable[[VehicleAssignmentRecord], bool]
    ) -> list[ScheduleSlotRecord]:
        """Other slots of the same group and instant holding a matching assignment."""
        others = await self.repository.find_schedule_slots_by_group_and_datetime(
            slot.group_id, slot.datetime, excluding_id=slot.id
        )
        return [
            other for other in others
            if any(matches(assignment) for assignment in other.vehicle_assignments)
        ]

    @staticmethod
    def _format_when(slot: ScheduleSlotRecord, timezone: str) -> str:
        try:
            tz = resolve_timezone(timezone)
        except InvalidTimezoneError:
            log.warning(f"Invalid timezone '{timezone}', defaulting to UTC.")
            tz, timezone = resolve_timezone(UTC_NAME), UTC_NAME
        return f"{format_local(slot.datetime, tz)} ({timezone})"

    async def validate_vehicle_assignment(
        self,
        vehicle_id: UUID,
        schedule_slot_id: UUID,
        timezone: str = UTC_NAME
    ) -> None:
        """
        Raises SlotNotFoundError or VehicleConflictError.
        A vehicle record that does not exist yet is not a failure.
        """
        slot = await self._get_slot_or_raise(schedule_slot_id)

        vehicle = await self.repository.find_vehicle_by_id(vehicle_id)
        if vehicle is None:
            log.info(f"Vehicle {vehicle_id} not found yet; checking conflicts optimistically.")

        conflicting = await self._find_conflicting_slots(
            slot, lambda assignment: assignment.vehicle_id == vehicle_id
        )
        if conflicting:
            when = self._format_when(slot, timezone)
            log.warning(f"Vehicle {vehicle_id} double-booked at {when}: slots {[s.id for s in conflicting]}.")
            raise VehicleConflictError(
                "Cannot assign to schedule slot due to conflicts: "
                f"vehicle already assigned to another schedule slot at {when}",
                details={
                    "vehicle_id": str(vehicle_id),
                    "conflicting_slot_ids": [str(s.id) for s in conflicting],
                },
            )

    async def validate_driver_availability(
        self,
        driver_id: UUID,
        schedule_slot_id: UUID,
        timezone: str = UTC_NAME
    ) -> None:
        """
        Raises SlotNotFoundError or DriverConflictError.
        A driver record that does not exist yet is not a failure.
        """
        slot = await self._get_slot_or_raise(schedule_slot_id)

        driver = await self.repository.find_user_by_id(driver_id)
        if driver is None:
            log.info(f"Driver {driver_id} not found yet; checking conflicts optimistically.")

        conflicting = await self._find_conflicting_slots(
            slot, lambda assignment: assignment.driver_id == driver_id
        )
        if conflicting:
            when = self._format_when(slot, timezone)
            log.warning(f"Driver {driver_id} double-booked at {when}: slots {[s.id for s in conflicting]}.")
            raise DriverConflictError(
                "Cannot assign to schedule slot due to conflicts: "
                f"driver already assigned to another schedule slot at {when}",
                details={
                    "driver_id": str(driver_id),
                    "conflicting_slot_ids": [str(s.id) for s in conflicting],
                },
            )

    async def _find_parent_slots(self, parent_id: UUID, slot: ScheduleSlotRecord) -> list[ScheduleSlotRecord]:
        """Slots of the same group and instant the parent is involved in, `slot` included."""
        return await self.repository.find_schedule_slots_involving_parent(parent_id, slot.group_id, slot.datetime)

    async def validate_parent_conflicts(self, parent_id: UUID, schedule_slot_id: UUID) -> list[str]:
        """
        Returns ['PARENT_DOUBLE_BOOKING'] when the parent is involved (as a
        driver, or through a vehicle or child of one of their families) in
        more than one slot of the group at the slot's instant, the slot itself
        included. A missing slot reports no conflicts.
        """
        slot = await self.repository.find_schedule_slot_by_id(schedule_slot_id)
        if not slot:
            return []

        involved = await self._find_parent_slots(parent_id, slot)
        if len(involved) > 1:
            log.warning(f"Parent {parent_id} double-booked at {slot.datetime.isoformat()}: slots {[s.id for s in involved]}.")
            return [ParentConflictError.code]
        return []

    async def validate_parent_availability(
        self,
        parent_id: UUID,
        schedule_slot_id: UUID,
        timezone: str = UTC_NAME
    ) -> None:
        """Raising form of validate_parent_conflicts: SlotNotFoundError or ParentConflictError."""
        slot = await self._get_slot_or_raise(schedule_slot_id)

        involved = await self._find_parent_slots(parent_id, slot)
        if len(involved) > 1:
            when = self._format_when(slot, timezone)
            log.warning(f"Parent {parent_id} double-booked at {when}: slots {[s.id for s in involved]}.")
            raise ParentConflictError(
                f"Parent is already involved in another schedule slot at {when}",
                details={
                    "parent_id": str(parent_id),
                    "conflicting_slot_ids": [str(s.id) for s in involved if s.id != slot.id],
                },
            )
