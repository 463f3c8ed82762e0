"""Per-day order number sequence interface."""

from abc import ABC, abstractmethod
from datetime import date


class OrderSequence(ABC):
    """Source of the NNN part of ORD-YYYYMMDD-NNN."""

    @abstractmethod
    async def next_value(self, day: date) -> int:
        """Return the next sequence value for the calendar day (first is 1)."""
