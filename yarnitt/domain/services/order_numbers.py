"""
Order number generation.

Format: ORD-YYYYMMDD-NNN. The date is the calendar day in the configured
timezone; NNN comes from an OrderSequence scoped to that day. Uniqueness
is ultimately enforced by the order store, which reports a collision as
a retryable ConflictError.
"""
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import TYPE_CHECKING, Callable, Tuple

from ..value_objects import OrderNumber

if TYPE_CHECKING:
    from ..repositories import OrderRepository, OrderSequence

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def day_bounds(day: date, tz: tzinfo) -> Tuple[datetime, datetime]:
    """Local midnight of ``day`` and of the next day, as UTC datetimes."""
    start = datetime.combine(day, time.min, tzinfo=tz)
    end = start + timedelta(days=1)
    return start.astimezone(timezone.utc), end.astimezone(timezone.utc)


class OrderNumberGenerator:
    """Builds the next order number for "today"."""

    def __init__(self, sequence: "OrderSequence", clock: Clock = utc_now, tz: tzinfo = timezone.utc) -> None:
        self._sequence = sequence
        self._clock = clock
        self._tz = tz

    def today(self) -> date:
        return self._clock().astimezone(self._tz).date()

    async def generate(self) -> OrderNumber:
        day = self.today()
        value = await self._sequence.next_value(day)
        return OrderNumber.build(day, value)


class CreatedTodaySequence:
    """
    Sequence derived from the number of orders created today.

    Has a race window between counting and inserting; concurrent
    creators can compute the same value and one of them gets a
    ConflictError from the unique constraint.
    """

    def __init__(self, orders: "OrderRepository", tz: tzinfo = timezone.utc) -> None:
        self._orders = orders
        self._tz = tz

    async def next_value(self, day: date) -> int:
        start, end = day_bounds(day, self._tz)
        return await self._orders.count_created_between(start, end) + 1
