import pytest
from types import SimpleNamespace

from src.carpool_schedule_backend.common.exceptions import (
    InvalidSeatOverrideError,
    NegativeOverrideError,
    OverrideTooHighError,
)
from src.carpool_schedule_backend.services.capacity_calculator import (
    CapacityCalculator,
    MAX_SEAT_OVERRIDE,
)

from tests.records import make_assignment


class TestCapacityCalculator:

    # --- Tests for get_effective_capacity ---

    def test_uses_override_when_set(self, capacity_calculator: CapacityCalculator):
        assert capacity_calculator.get_effective_capacity(make_assignment(7, seat_override=3)) == 3

    def test_uses_vehicle_capacity_when_override_is_null(self, capacity_calculator: CapacityCalculator):
        assert capacity_calculator.get_effective_capacity(make_assignment(7, seat_override=None)) == 7

    def test_zero_override_is_respected(self, capacity_calculator: CapacityCalculator):
        assert capacity_calculator.get_effective_capacity(make_assignment(7, seat_override=0)) == 0

    def test_override_may_exceed_vehicle_capacity(self, capacity_calculator: CapacityCalculator):
        assert capacity_calculator.get_effective_capacity(make_assignment(4, seat_override=9)) == 9

    def test_assignment_without_override_attribute(self, capacity_calculator: CapacityCalculator):
        assignment = SimpleNamespace(vehicle=SimpleNamespace(capacity=5))
        assert capacity_calculator.get_effective_capacity(assignment) == 5

    # --- Tests for compute_total_effective_capacity ---

    def test_total_mixes_overrides_and_defaults(self, capacity_calculator: CapacityCalculator):
        assignments = [
            make_assignment(7),
            make_assignment(5, seat_override=3),
            make_assignment(4, seat_override=0),
        ]
        assert capacity_calculator.compute_total_effective_capacity(assignments) == 10

    def test_total_of_no_assignments_is_zero(self, capacity_calculator: CapacityCalculator):
        assert capacity_calculator.compute_total_effective_capacity([]) == 0

    # --- Tests for validate_seat_override ---

    @pytest.mark.parametrize("value", [0, 1, 5, MAX_SEAT_OVERRIDE])
    def test_override_within_bounds(self, capacity_calculator: CapacityCalculator, value: int):
        capacity_calculator.validate_seat_override(value)

    def test_negative_override(self, capacity_calculator: CapacityCalculator):
        with pytest.raises(NegativeOverrideError) as e:
            capacity_calculator.validate_seat_override(-1)
        assert e.value.message == "Seat override cannot be negative"
        assert e.value.code == "NEGATIVE_OVERRIDE"

    def test_override_above_application_limit(self, capacity_calculator: CapacityCalculator):
        with pytest.raises(OverrideTooHighError) as e:
            capacity_calculator.validate_seat_override(11)
        assert e.value.message == "Seat override cannot exceed 10 seats (application limit)"
        assert e.value.details["max_seat_override"] == 10

    @pytest.mark.parametrize("value", [True, False, 3.5, 3.0, "3", None])
    def test_override_must_be_a_whole_number(self, capacity_calculator: CapacityCalculator, value):
        with pytest.raises(InvalidSeatOverrideError) as e:
            capacity_calculator.validate_seat_override(value)
        assert e.value.code == "INVALID_SEAT_OVERRIDE"
        assert e.value.message == "Seat override must be a whole number of seats"
