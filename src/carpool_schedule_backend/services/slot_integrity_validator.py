'''
Slot Integrity Validator
'''
from typing import Annotated, Optional
from uuid import UUID

from fastapi import Depends

from ..common.exceptions import (
    SlotNotFoundError,
    NoVehiclesError,
    AtCapacityError,
    OverCapacityError,
    ChildAlreadyAssignedError
)
from ..common.logger import log
from ..database.repository import ScheduleSlotRepository
from ..models.schedule import ScheduleSlotRecord, SlotStats
from .capacity_calculator import CapacityCalculator


class SlotIntegrityValidator:
    """
    Occupancy rules of a single slot: children need a vehicle, and the
    number of children never exceeds the total effective capacity.
    """
    def __init__(
        self,
        repository: Annotated[ScheduleSlotRepository, Depends(ScheduleSlotRepository)],
        capacity_calculator: Annotated[CapacityCalculator, Depends(CapacityCalculator)]
    ):
        self.repository = repository
        self.capacity_calculator = capacity_calculator

    async def _get_slot_or_raise(self, schedule_slot_id: UUID) -> ScheduleSlotRecord:
        slot = await self.repository.find_schedule_slot_by_id(schedule_slot_id)
        if not slot:
            log.warning(f"Integrity check requested for non-existing slot {schedule_slot_id}.")
            raise SlotNotFoundError(
                "Schedule slot not found",
                details={"schedule_slot_id": str(schedule_slot_id)},
            )
        return slot

    async def validate_child_assignment(self, child_id: UUID, schedule_slot_id: UUID) -> None:
        """
        Checks that one more child fits in the slot.
        Raises SlotNotFoundError, NoVehiclesError, AtCapacityError or
        ChildAlreadyAssignedError.
        """
        slot = await self._get_slot_or_raise(schedule_slot_id)

        if not slot.vehicle_assignments:
            raise NoVehiclesError(
                "Cannot assign child to schedule slot without vehicles",
                details={"schedule_slot_id": str(schedule_slot_id)},
            )

        total_capacity = self.capacity_calculator.compute_total_effective_capacity(slot.vehicle_assignments)
        child_count = len(slot.child_assignments)
        if total_capacity <= child_count:
            log.info(f"Slot {schedule_slot_id} full: {child_count}/{total_capacity} seats taken.")
            raise AtCapacityError(
                "Schedule slot is at full capacity",
                details={"child_count": child_count, "total_capacity": total_capacity},
            )

        if any(assignment.child_id == child_id for assignment in slot.child_assignments):
            raise ChildAlreadyAssignedError(
                "Child is already assigned to this schedule slot",
                details={"child_id": str(child_id), "schedule_slot_id": str(schedule_slot_id)},
            )

    async def validate_slot_integrity(self, schedule_slot_id: UUID) -> bool:
        """
        Canonical occupancy invariant, usable before committing an assignment
        or as a standalone audit. Returns True when the slot is consistent.
        """
        slot = await self._get_slot_or_raise(schedule_slot_id)

        if not slot.vehicle_assignments and not slot.child_assignments:
            return True

        total_capacity = self.capacity_calculator.compute_total_effective_capacity(slot.vehicle_assignments)
        child_count = len(slot.child_assignments)
        if child_count > total_capacity:
            log.warning(f"Slot {schedule_slot_id} over capacity: {child_count} children, {total_capacity} seats.")
            raise OverCapacityError(
                f"Schedule slot exceeds capacity: {child_count} children assigned to {total_capacity} seats",
                details={"child_count": child_count, "total_capacity": total_capacity},
            )
        return True

    async def audit_slots(self, group_id: Optional[UUID] = None) -> dict[UUID, str]:
        """
        Runs validate_slot_integrity over every stored slot (optionally of one
        group). Returns the failure message of each inconsistent slot.
        """
        failures: dict[UUID, str] = {}
        slot_ids = await self.repository.list_schedule_slot_ids(group_id)
        log.info(f"Auditing {len(slot_ids)} schedule slot(s)...")

        for slot_id in slot_ids:
            try:
                await self.validate_slot_integrity(slot_id)
            except (OverCapacityError, SlotNotFoundError) as e:
                failures[slot_id] = e.message

        log.info(f"Audit finished: {len(failures)} inconsistent slot(s).")
        return failures

    async def get_slot_stats(self, schedule_slot_id: UUID) -> Optional[SlotStats]:
        """Occupancy summary for monitoring; None when the slot does not exist."""
        slot = await self.repository.find_schedule_slot_by_id(schedule_slot_id)
        if not slot:
            return None

        vehicle_count = len(slot.vehicle_assignments)
        child_count = len(slot.child_assignments)
        total_capacity = self.capacity_calculator.compute_total_effective_capacity(slot.vehicle_assignments)

        return SlotStats(
            schedule_slot_id=slot.id,
            datetime=slot.datetime,
            vehicle_count=vehicle_count,
            child_count=child_count,
            total_capacity=total_capacity,
            available_seats=max(0, total_capacity - child_count),
            is_at_capacity=child_count >= total_capacity,
            is_empty=vehicle_count == 0 and child_count == 0,
            has_vehicles_only=vehicle_count > 0 and child_count == 0,
            has_children_only=vehicle_count == 0 and child_count > 0,
        )
