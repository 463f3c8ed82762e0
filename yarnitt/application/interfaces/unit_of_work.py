"""Unit of Work interface used by application services."""
from abc import ABC, abstractmethod
from typing import Callable

from yarnitt.domain.repositories import OrderRepository, OrderSequence, ProductRepository


class AbstractUnitOfWork(ABC):
    """
    Transaction boundary for one engine operation.

    Every write made through the repositories of one unit of work is
    applied all-or-nothing: ``commit()`` makes them durable, leaving the
    context without committing (or with an exception) discards them.

    Usage:
        async with uow_factory() as uow:
            order = await uow.orders.find_by_id(order_id)
            ...
            await uow.commit()
    """

    orders: OrderRepository
    products: ProductRepository
    counters: OrderSequence

    async def __aenter__(self) -> "AbstractUnitOfWork":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.rollback()

    @abstractmethod
    async def commit(self) -> None:
        """Commit all pending changes."""
        pass

    @abstractmethod
    async def rollback(self) -> None:
        """Discard all pending changes. Safe to call more than once."""
        pass


UnitOfWorkFactory = Callable[[], AbstractUnitOfWork]
