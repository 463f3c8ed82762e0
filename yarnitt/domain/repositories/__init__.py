"""Repository interfaces (ports)."""
from .order_repository import (
    OrderFilters,
    OrderPage,
    OrderRepository,
    OrderStats,
    ProductSales,
    SellerSummary,
)
from .order_sequence import OrderSequence
from .product_repository import ProductRepository

__all__ = [
    "OrderFilters",
    "OrderPage",
    "OrderRepository",
    "OrderSequence",
    "OrderStats",
    "ProductRepository",
    "ProductSales",
    "SellerSummary",
]
