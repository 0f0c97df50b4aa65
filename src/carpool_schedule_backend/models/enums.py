'''
Enums shared by the schedule models and validators.
'''
import enum


# --- Base Enum Class ---
class ListableEnum(str, enum.Enum):
    """A custom Enum base class that can list all member names."""
    @classmethod
    def get_all_names(cls) -> list[str]:
        return [member.value for member in cls]


class Weekday(ListableEnum):
    """
    Weekday keys used by group schedule configurations.
    Declared in Python's datetime.weekday() order (0=Monday).
    """
    MONDAY = "MONDAY"
    TUESDAY = "TUESDAY"
    WEDNESDAY = "WEDNESDAY"
    THURSDAY = "THURSDAY"
    FRIDAY = "FRIDAY"
    SATURDAY = "SATURDAY"
    SUNDAY = "SUNDAY"

    @classmethod
    def from_index(cls, index: int) -> "Weekday":
        """Maps datetime.weekday() (0-6) to a Weekday."""
        return list(cls)[index]

    @property
    def index(self) -> int:
        return list(Weekday).index(self)

    @property
    def iso_number(self) -> int:
        """ISO 8601 weekday number, 1=Monday ... 7=Sunday."""
        return self.index + 1


