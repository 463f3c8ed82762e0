"""Domain value objects."""

from .value_objects import Actor, Money, ShippingAddress
from .order_number import OrderNumber

__all__ = [
    "Actor",
    "Money",
    "OrderNumber",
    "ShippingAddress",
]
