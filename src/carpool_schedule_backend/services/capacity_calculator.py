'''
Capacity Calculator
'''
from typing import Any, Iterable

from ..common.exceptions import InvalidSeatOverrideError, NegativeOverrideError, OverrideTooHighError

MIN_SEAT_OVERRIDE = 0
# Application policy limit, independent of any vehicle's real capacity.
MAX_SEAT_OVERRIDE = 10


class CapacityCalculator:
    """
    Effective seat accounting for vehicle assignments.
    The effective capacity of an assignment is its seat override when one is
    set (0 included), otherwise the vehicle's default capacity.
    """

    @staticmethod
    def get_effective_capacity(assignment: Any) -> int:
        seat_override = getattr(assignment, "seat_override", None)
        if seat_override is not None:
            return seat_override
        return assignment.vehicle.capacity

    @staticmethod
    def validate_seat_override(value: int) -> None:
        # bool is an int subclass; True is not a seat count.
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidSeatOverrideError(
                "Seat override must be a whole number of seats",
                details={"seat_override": repr(value)},
            )
        if value < MIN_SEAT_OVERRIDE:
            raise NegativeOverrideError(
                "Seat override cannot be negative",
                details={"seat_override": value},
            )
        if value > MAX_SEAT_OVERRIDE:
            raise OverrideTooHighError(
                f"Seat override cannot exceed {MAX_SEAT_OVERRIDE} seats (application limit)",
                details={"seat_override": value, "max_seat_override": MAX_SEAT_OVERRIDE},
            )

    @classmethod
    def compute_total_effective_capacity(cls, assignments: Iterable[Any]) -> int:
        return sum(cls.get_effective_capacity(assignment) for assignment in assignments)
