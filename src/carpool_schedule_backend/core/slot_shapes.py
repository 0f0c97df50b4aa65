'''
Normalises the two slot input shapes into one canonical UTC instant.

Validators only ever see the output of normalize_slot_datetime, so the
legacy day/time/week shape never flows past this boundary.
'''
from datetime import datetime
from typing import Any, Mapping

from pydantic import TypeAdapter, ValidationError

from ..common.exceptions import InvalidDateTimeError
from ..models.schedule import DatetimeSlotShape, LegacySlotShape, SlotShape
from .datetime_utils import parse_instant

_slot_shape_adapter = TypeAdapter(SlotShape)

LEGACY_FIELDS = ("day", "time", "week")


def parse_slot_shape(payload: Mapping[str, Any]) -> DatetimeSlotShape | LegacySlotShape:
    """
    Builds the tagged shape from a raw payload.
    Untagged payloads are tagged from the fields they carry.
    """
    data = dict(payload)
    if "shape" not in data:
        if "datetime" in data:
            data["shape"] = "datetime"
        elif all(field in data for field in LEGACY_FIELDS):
            data["shape"] = "legacy"
    try:
        return _slot_shape_adapter.validate_python(data)
    except ValidationError as e:
        raise InvalidDateTimeError(
            f"Invalid slot datetime: {payload}",
            details={"errors": e.errors(include_url=False, include_context=False, include_input=False)},
        ) from None


def normalize_slot_datetime(slot: Any) -> datetime:
    """
    Returns the canonical aware UTC instant for any accepted slot input:
    a shape model, a raw payload mapping, a datetime or an ISO string.
    """
    if isinstance(slot, Mapping):
        slot = parse_slot_shape(slot)

    if isinstance(slot, (DatetimeSlotShape, LegacySlotShape)):
        try:
            return slot.to_datetime()
        except (ValueError, OverflowError) as e:
            raise InvalidDateTimeError(str(e)) from None

    return parse_instant(slot)
