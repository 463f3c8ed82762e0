"""Order number value object."""
import re
from dataclasses import dataclass
from datetime import date

from ..constants import ORDER_NUMBER_PREFIX

_PATTERN = re.compile(rf"^{ORDER_NUMBER_PREFIX}-(\d{{8}})-(\d{{3,}})$")


@dataclass(frozen=True)
class OrderNumber:
    """
    Human-readable order identifier.

    Format: ORD-YYYYMMDD-NNN (sequence restarts every calendar day)
    Examples:
    - ORD-20240115-001
    - ORD-20240115-042
    """
    value: str

    def __post_init__(self):
        if not self.value:
            raise ValueError("Order number cannot be empty")

        match = _PATTERN.match(self.value)
        if not match:
            raise ValueError(
                f"Invalid order number format (expected ORD-YYYYMMDD-NNN): {self.value}"
            )

        if int(match.group(2)) < 1:
            raise ValueError(f"Order number sequence must start at 1: {self.value}")

    @classmethod
    def build(cls, day: date, sequence: int) -> "OrderNumber":
        """Format a day and its sequence value, zero-padded to 3 digits."""
        return cls(f"{ORDER_NUMBER_PREFIX}-{day.strftime('%Y%m%d')}-{sequence:03d}")

    @property
    def day(self) -> date:
        raw = self.value.split("-")[1]
        return date(int(raw[:4]), int(raw[4:6]), int(raw[6:]))

    @property
    def sequence(self) -> int:
        return int(self.value.split("-")[2])

    def __str__(self) -> str:
        return self.value
