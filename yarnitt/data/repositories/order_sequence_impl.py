"""Per-day order number counter backed by the order_counters table."""

from datetime import date

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from yarnitt.domain.exceptions import ConflictError
from yarnitt.domain.repositories.order_sequence import OrderSequence

from ..models import OrderCounterModel


class DailyCounterSequence(OrderSequence):
    """
    Atomic per-day counter.

    The increment runs in the caller's transaction: the row lock it takes
    serializes concurrent creators for the same day, and a rolled-back
    order gives its number back.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def next_value(self, day: date) -> int:
        result = await self._session.execute(
            update(OrderCounterModel)
            .where(OrderCounterModel.day == day)
            .values(value=OrderCounterModel.value + 1)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 1:
            value = await self._session.execute(
                select(OrderCounterModel.value).where(OrderCounterModel.day == day)
            )
            return value.scalar_one()

        # First order of the day
        self._session.add(OrderCounterModel(day=day, value=1))
        try:
            await self._session.flush()
        except IntegrityError as exc:
            raise ConflictError(
                f"Order counter for {day.isoformat()} was created concurrently",
                details={"day": day.isoformat()},
            ) from exc
        return 1
