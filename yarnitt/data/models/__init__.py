"""Database models."""

from .base import Base
from .order_model import OrderCounterModel, OrderItemModel, OrderModel
from .product_model import ProductModel

__all__ = ["Base", "OrderCounterModel", "OrderItemModel", "OrderModel", "ProductModel"]
