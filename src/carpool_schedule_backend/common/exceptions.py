"""
This file contains custom, application-specific exceptions.

Every validation failure derives from ScheduleValidationError so request
handlers can catch one type and still tell the kinds apart through `code`.
"""
from typing import Any, Optional

from fastapi import status


class ScheduleValidationError(Exception):
    """Base class for all slot validation failures."""
    code: str = "VALIDATION_ERROR"
    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_response(self) -> dict[str, Any]:
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
            }
        }


# --- Timing ---

class InvalidDateTimeError(ScheduleValidationError):
    """Raised when a candidate does not parse to a valid instant."""
    code = "INVALID_DATETIME"


class InvalidTimezoneError(ScheduleValidationError):
    """Raised when a timezone is not a known IANA identifier."""
    code = "INVALID_TIMEZONE"


class PastDateTimeError(ScheduleValidationError):
    """Raised when a candidate instant is not strictly in the future."""
    code = "PAST_DATETIME"


# --- Schedule template ---

class NoScheduleConfigError(ScheduleValidationError):
    """Raised when the group has no schedule configuration at all."""
    code = "NO_SCHEDULE_CONFIG"


class TimeNotConfiguredError(ScheduleValidationError):
    """Raised when the weekday/time pair is not part of the group's template."""
    code = "TIME_NOT_CONFIGURED"


class InvalidScheduleConfigError(ScheduleValidationError):
    """Raised when a schedule template itself is malformed."""
    code = "INVALID_SCHEDULE_CONFIG"


class ScheduleChangeConflictError(ScheduleValidationError):
    """Raised when a template change would drop times that still have booked future slots."""
    code = "SCHEDULE_CHANGE_CONFLICT"


# --- Slots and assignments ---

class SlotNotFoundError(ScheduleValidationError):
    """Raised when a schedule slot ID is not found in the database."""
    code = "SLOT_NOT_FOUND"
    status_code = status.HTTP_404_NOT_FOUND


class VehicleConflictError(ScheduleValidationError):
    """Raised when a vehicle is already used by another slot at the same time."""
    code = "VEHICLE_CONFLICT"
    status_code = status.HTTP_409_CONFLICT


class DriverConflictError(ScheduleValidationError):
    """Raised when a driver is already driving in another slot at the same time."""
    code = "DRIVER_CONFLICT"
    status_code = status.HTTP_409_CONFLICT


class ParentConflictError(ScheduleValidationError):
    """Raised when a parent is involved in more than one slot of the group at the same time."""
    code = "PARENT_DOUBLE_BOOKING"
    status_code = status.HTTP_409_CONFLICT


class NoVehiclesError(ScheduleValidationError):
    """Raised when a child is added to a slot without any vehicle."""
    code = "NO_VEHICLES"


class AtCapacityError(ScheduleValidationError):
    """Raised when every effective seat of a slot is already taken."""
    code = "AT_CAPACITY"
    status_code = status.HTTP_409_CONFLICT


class OverCapacityError(ScheduleValidationError):
    """Raised when a slot holds more children than its effective capacity."""
    code = "OVER_CAPACITY"
    status_code = status.HTTP_409_CONFLICT


class ChildAlreadyAssignedError(ScheduleValidationError):
    """Raised when a child already rides in the target slot."""
    code = "CHILD_ALREADY_ASSIGNED"
    status_code = status.HTTP_409_CONFLICT


# --- Seat overrides ---

class InvalidSeatOverrideError(ScheduleValidationError):
    code = "INVALID_SEAT_OVERRIDE"


class NegativeOverrideError(ScheduleValidationError):
    code = "NEGATIVE_OVERRIDE"


class OverrideTooHighError(ScheduleValidationError):
    code = "OVERRIDE_TOO_HIGH"
