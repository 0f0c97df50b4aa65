import pytest
from datetime import datetime, timezone

from src.carpool_schedule_backend.common.exceptions import InvalidDateTimeError
from src.carpool_schedule_backend.core.slot_shapes import normalize_slot_datetime, parse_slot_shape
from src.carpool_schedule_backend.models.enums import Weekday
from src.carpool_schedule_backend.models.schedule import DatetimeSlotShape, LegacySlotShape

from tests.constants import NEXT_MONDAY_0730


class TestParseSlotShape:

    def test_untagged_datetime_payload(self):
        shape = parse_slot_shape({"datetime": "2025-06-16T07:30:00Z"})
        assert isinstance(shape, DatetimeSlotShape)
        assert shape.to_datetime() == NEXT_MONDAY_0730

    def test_untagged_legacy_payload(self):
        shape = parse_slot_shape({"day": "MONDAY", "time": "07:30", "week": "2025-W25"})
        assert isinstance(shape, LegacySlotShape)
        assert shape.day is Weekday.MONDAY

    def test_tagged_payload_is_used_as_is(self):
        shape = parse_slot_shape({"shape": "legacy", "day": "FRIDAY", "time": "15:00", "week": "2025-W25"})
        assert shape.to_datetime() == datetime(2025, 6, 20, 15, 0, tzinfo=timezone.utc)

    @pytest.mark.parametrize("payload", [
        {"day": "MONDAY"},
        {"day": "MONDAY", "time": "7:30", "week": "2025-W25"},
        {"day": "FUNDAY", "time": "07:30", "week": "2025-W25"},
        {"day": "MONDAY", "time": "07:30", "week": "2025-25"},
        {"shape": "datetime", "datetime": "soon"},
    ])
    def test_malformed_payloads_raise_invalid_datetime(self, payload):
        with pytest.raises(InvalidDateTimeError) as e:
            parse_slot_shape(payload)
        assert e.value.code == "INVALID_DATETIME"
        assert e.value.details["errors"]


class TestNormalizeSlotDatetime:

    def test_all_inputs_resolve_to_the_same_instant(self):
        candidates = [
            NEXT_MONDAY_0730,
            "2025-06-16T07:30:00Z",
            "2025-06-16T09:30:00+02:00",
            {"datetime": "2025-06-16T07:30:00Z"},
            {"day": "MONDAY", "time": "07:30", "week": "2025-W25"},
            LegacySlotShape(day=Weekday.MONDAY, time="07:30", week="2025-W25"),
        ]
        assert {normalize_slot_datetime(candidate) for candidate in candidates} == {NEXT_MONDAY_0730}

    def test_result_is_aware_utc(self):
        instant = normalize_slot_datetime({"datetime": "2025-06-16T07:30:00"})
        assert instant.tzinfo == timezone.utc

    def test_legacy_week_out_of_range(self):
        with pytest.raises(InvalidDateTimeError) as e:
            normalize_slot_datetime({"day": "MONDAY", "time": "07:30", "week": "2025-W60"})
        assert e.value.message == "Invalid ISO week: 2025-W60"

    def test_unparseable_string(self):
        with pytest.raises(InvalidDateTimeError):
            normalize_slot_datetime("next monday")

    def test_payload_past_the_end_of_the_calendar(self):
        with pytest.raises(InvalidDateTimeError):
            normalize_slot_datetime({"datetime": "9999-12-31T23:30:00-05:00"})
