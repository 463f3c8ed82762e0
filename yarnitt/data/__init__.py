"""Data layer - SQLAlchemy persistence and mapping."""

from .mappers import OrderItemMapper, OrderMapper, ProductMapper
from .models import Base, OrderCounterModel, OrderItemModel, OrderModel, ProductModel
from .repositories import (
    DailyCounterSequence,
    SqlAlchemyOrderRepository,
    SqlAlchemyProductRepository,
)
from .uow import SqlAlchemyUnitOfWork, create_uow

__all__ = [
    "Base",
    "create_uow",
    "DailyCounterSequence",
    "OrderCounterModel",
    "OrderItemMapper",
    "OrderItemModel",
    "OrderMapper",
    "OrderModel",
    "ProductMapper",
    "ProductModel",
    "SqlAlchemyOrderRepository",
    "SqlAlchemyProductRepository",
    "SqlAlchemyUnitOfWork",
]
