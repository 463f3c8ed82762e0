"""Repository implementations."""

from .order_repository_impl import SqlAlchemyOrderRepository
from .order_sequence_impl import DailyCounterSequence
from .product_repository_impl import SqlAlchemyProductRepository

__all__ = ["DailyCounterSequence", "SqlAlchemyOrderRepository", "SqlAlchemyProductRepository"]
