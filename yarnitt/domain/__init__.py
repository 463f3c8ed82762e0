"""Domain layer - pure domain models and interfaces."""

from .entities import Order, OrderItem, Product
from .enums import ActorRole, OrderStatus, PaymentMethod, PaymentStatus
from .repositories import OrderRepository, OrderSequence, ProductRepository
from .value_objects import Actor, Money, OrderNumber, ShippingAddress

__all__ = [
    "Actor",
    "ActorRole",
    "Money",
    "Order",
    "OrderItem",
    "OrderNumber",
    "OrderRepository",
    "OrderSequence",
    "OrderStatus",
    "PaymentMethod",
    "PaymentStatus",
    "Product",
    "ProductRepository",
    "ShippingAddress",
]
