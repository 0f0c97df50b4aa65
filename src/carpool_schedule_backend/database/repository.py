'''
Read-only storage collaborator for the slot validators.

Every finder returns plain pydantic records (or None) so that validators
work on detached data and never trigger lazy loads.
'''
from datetime import datetime, timezone
from typing import Annotated, Optional
from uuid import UUID

from fastapi import Depends
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from .engine import get_db_session
from . import models as db_models
from ..models import schedule as schedule_models
from ..common.logger import log


class ScheduleSlotRepository:
    """
    Fetches slots, vehicles, users and schedule configurations.
    This class never writes.
    """
    def __init__(self, db: Annotated[AsyncSession, Depends(get_db_session)]):
        self.db = db

    def _slot_query(self):
        """Slot query with assignments (and each assignment's vehicle) eagerly loaded."""
        return select(db_models.ScheduleSlots).options(
            selectinload(db_models.ScheduleSlots.vehicle_assignments).selectinload(
                db_models.ScheduleSlotVehicles.vehicle
            ),
            selectinload(db_models.ScheduleSlots.child_assignments),
        )

    # --- Slots ---

    async def find_schedule_slot_by_id(self, schedule_slot_id: UUID) -> Optional[schedule_models.ScheduleSlotRecord]:
        stmt = self._slot_query().filter(db_models.ScheduleSlots.id == schedule_slot_id)
        result = await self.db.execute(stmt)
        slot = result.scalars().first()
        if not slot:
            log.info(f"Schedule slot {schedule_slot_id} not found.")
            return None
        return schedule_models.ScheduleSlotRecord.model_validate(slot)

    async def find_schedule_slots_by_group_and_datetime(
        self,
        group_id: UUID,
        slot_datetime: datetime,
        excluding_id: Optional[UUID] = None
    ) -> list[schedule_models.ScheduleSlotRecord]:
        """
        Returns every slot of the group anchored at exactly `slot_datetime`,
        optionally leaving out one slot (usually the one being validated).
        """
        instant = slot_datetime.astimezone(timezone.utc)
        stmt = self._slot_query().filter(
            db_models.ScheduleSlots.group_id == group_id,
            db_models.ScheduleSlots.datetime == instant,
        )
        if excluding_id is not None:
            stmt = stmt.filter(db_models.ScheduleSlots.id != excluding_id)

        result = await self.db.execute(stmt)
        slots = result.scalars().all()
        log.info(f"Found {len(slots)} slot(s) in group {group_id} at {instant.isoformat()} (excluding {excluding_id}).")
        return [schedule_models.ScheduleSlotRecord.model_validate(slot) for slot in slots]

    async def find_future_schedule_slots_by_group(
        self,
        group_id: UUID,
        since: datetime
    ) -> list[schedule_models.ScheduleSlotRecord]:
        """Slots of the group at or after `since`, ordered by time."""
        instant = since.astimezone(timezone.utc)
        stmt = self._slot_query().filter(
            db_models.ScheduleSlots.group_id == group_id,
            db_models.ScheduleSlots.datetime >= instant,
        ).order_by(db_models.ScheduleSlots.datetime)

        result = await self.db.execute(stmt)
        slots = result.scalars().all()
        log.info(f"Found {len(slots)} upcoming slot(s) in group {group_id} from {instant.isoformat()}.")
        return [schedule_models.ScheduleSlotRecord.model_validate(slot) for slot in slots]

    async def find_schedule_slots_involving_parent(
        self,
        parent_id: UUID,
        group_id: UUID,
        slot_datetime: datetime
    ) -> list[schedule_models.ScheduleSlotRecord]:
        """
        Slots of the group at exactly `slot_datetime` where the parent drives,
        or where a vehicle or a child of one of the parent's families is assigned.
        """
        instant = slot_datetime.astimezone(timezone.utc)
        family_ids = select(db_models.FamilyMembers.family_id).filter(
            db_models.FamilyMembers.user_id == parent_id
        )
        stmt = self._slot_query().filter(
            db_models.ScheduleSlots.group_id == group_id,
            db_models.ScheduleSlots.datetime == instant,
            or_(
                db_models.ScheduleSlots.vehicle_assignments.any(
                    db_models.ScheduleSlotVehicles.driver_id == parent_id
                ),
                db_models.ScheduleSlots.vehicle_assignments.any(
                    db_models.ScheduleSlotVehicles.vehicle.has(db_models.Vehicles.family_id.in_(family_ids))
                ),
                db_models.ScheduleSlots.child_assignments.any(
                    db_models.ScheduleSlotChildren.child.has(db_models.Children.family_id.in_(family_ids))
                ),
            ),
        )

        result = await self.db.execute(stmt)
        slots = result.scalars().all()
        log.info(f"Parent {parent_id} is involved in {len(slots)} slot(s) of group {group_id} at {instant.isoformat()}.")
        return [schedule_models.ScheduleSlotRecord.model_validate(slot) for slot in slots]

    async def list_schedule_slot_ids(
self, group_id: Optional[UUID] = None) -> list[UUID]:
        """Slot IDs ordered by time, optionally restricted to one group."""
        stmt = select(db_models.ScheduleSlots.id).order_by(db_models.ScheduleSlots.datetime)
        if group_id is not None:
            stmt = stmt.filter(db_models.ScheduleSlots.group_id == group_id)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    # --- Vehicles & Users ---

    async def find_vehicle_by_id(self, vehicle_id: UUID) -> Optional[schedule_models.VehicleRecord]:
        vehicle = await self.db.get(db_models.Vehicles, vehicle_id)
        if not vehicle:
            return None
        return schedule_models.VehicleRecord.model_validate(vehicle)

    async def find_user_by_id(self, user_id: UUID) -> Optional[schedule_models.UserRecord]:
        user = await self.db.get(db_models.Users, user_id)
        if not user:
            return None
        return schedule_models.UserRecord.model_validate(user)

    # --- Group Schedule Config ---

    async def find_group_schedule_config(self, group_id: UUID) -> Optional[schedule_models.GroupScheduleConfigRecord]:
        stmt = select(db_models.GroupScheduleConfigs).filter(
            db_models.GroupScheduleConfigs.group_id == group_id
        )
        result = await self.db.execute(stmt)
        config = result.scalars().first()
        if not config:
            log.warning(f"No schedule configuration found for group {group_id}.")
            return None
        return schedule_models.GroupScheduleConfigRecord.model_validate(config)
