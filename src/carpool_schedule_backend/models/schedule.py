'''
Schedule slot records.

These are the plain records the storage collaborator hands to the
validators. They are built straight from ORM rows (from_attributes) so the
validators never touch a live session.
'''
import datetime
from typing import Annotated, Any, Literal, Optional, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..core.datetime_utils import parse_hhmm
from .enums import Weekday


def _as_utc(value: datetime.datetime) -> datetime.datetime:
    # SQLite hands back naive values; everything stored is UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=datetime.timezone.utc)
    return value.astimezone(datetime.timezone.utc)


# --- Entity Records ---

class VehicleRecord(BaseModel):
    id: UUID
    name: Optional[str] = None
    capacity: int = Field(..., gt=0, description="Default number of child seats.")

    model_config = ConfigDict(from_attributes=True)


class UserRecord(BaseModel):
    id: UUID
    name: Optional[str] = None
    timezone: str = "UTC"

    model_config = ConfigDict(from_attributes=True)


class VehicleAssignmentRecord(BaseModel):
    """
    One vehicle (and optionally its driver) committed to one slot.
    seat_override, when set, replaces vehicle.capacity for this trip only.
    """
    id: UUID
    schedule_slot_id: UUID
    vehicle_id: UUID
    driver_id: Optional[UUID] = None
    seat_override: Optional[int] = None
    vehicle: VehicleRecord

    model_config = ConfigDict(from_attributes=True)


class ChildAssignmentRecord(BaseModel):
    schedule_slot_id: UUID
    child_id: UUID
    vehicle_assignment_id: Optional[UUID] = None

    model_config = ConfigDict(from_attributes=True)


class ScheduleSlotRecord(BaseModel):
    """
    One occurrence of a recurring trip, anchored to an absolute UTC instant.
    """
    id: UUID
    group_id: UUID
    datetime: datetime.datetime
    vehicle_assignments: list[VehicleAssignmentRecord] = Field(default_factory=list)
    child_assignments: list[ChildAssignmentRecord] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)

    @field_validator("datetime")
    @classmethod
    def _normalise_datetime(cls, value: datetime.datetime) -> datetime.datetime:
        return _as_utc(value)


class GroupScheduleConfigRecord(BaseModel):
    """
    Allow-list of weekday + HH:MM pairs (UTC) at which a group may run trips.

    schedule_hours is kept as stored. Entries written before the template was
    validated on save may not be lists of strings; readers skip those.
    """
    group_id: UUID
    schedule_hours: dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(from_attributes=True)

    def all_configured_times(self) -> list[str]:
        """Every HH:MM across all weekdays, sorted and deduplicated."""
        return sorted({
            t for times in self.schedule_hours.values() if isinstance(times, list)
            for t in times if isinstance(t, str)
        })


class OperatingHours(BaseModel):
    """Optional daily window (UTC) that every configured time must fall in."""
    start_hour: str
    end_hour: str


class SlotStats(BaseModel):
    """Occupancy summary of a slot, used for monitoring."""
    schedule_slot_id: UUID
    datetime: datetime.datetime
    vehicle_count: int
    child_count: int
    total_capacity: int
    available_seats: int
    is_at_capacity: bool
    is_empty: bool
    has_vehicles_only: bool
    has_children_only: bool


# --- Slot Input Shapes ---

class DatetimeSlotShape(BaseModel):
    """Canonical shape: a single absolute instant."""
    shape: Literal["datetime"] = "datetime"
    datetime: datetime.datetime

    def to_datetime(self) -> datetime.datetime:
        return _as_utc(self.datetime)


class LegacySlotShape(BaseModel):
    """
    Older day/time/week shape still produced by some clients.
    day is a weekday name, time is 'HH:MM' (UTC) and week an ISO week 'YYYY-Www'.
    """
    shape: Literal["legacy"] = "legacy"
    day: Weekday
    time: str
    week: str = Field(..., pattern=r"^\d{4}-W\d{2}$")

    @field_validator("time")
    @classmethod
    def _check_time(cls, value: str) -> str:
        parse_hhmm(value)
        return value

    def to_datetime(self) -> datetime.datetime:
        year, week = self.week.split("-W")
        hour, minute = parse_hhmm(self.time)
        try:
            day = datetime.date.fromisocalendar(int(year), int(week), self.day.iso_number)
        except ValueError as e:
            raise ValueError(f"Invalid ISO week: {self.week}") from e
        return datetime.datetime.combine(
            day, datetime.time(hour, minute), tzinfo=datetime.timezone.utc
        )


SlotShape = Annotated[
    Union[DatetimeSlotShape, LegacySlotShape],
    Field(discriminator="shape"),
]
