"""Catalog product as seen by the order engine."""
from dataclasses import dataclass

from ..value_objects import Money


@dataclass
class Product:
    """
    Product with available stock and cumulative sold counter.

    Stock is only ever changed through the catalog store's atomic
    conditional updates, never by mutating this object and saving it.
    """
    id: str
    seller_id: str
    name: str
    price: Money
    stock: int = 0
    sold: int = 0

    def __post_init__(self):
        if self.stock < 0:
            raise ValueError(f"Product stock cannot be negative: {self.stock}")
        if self.sold < 0:
            raise ValueError(f"Product sold counter cannot be negative: {self.sold}")
        if self.price.is_negative():
            raise ValueError(f"Product price cannot be negative: {self.price}")

    def has_stock(self, quantity: int) -> bool:
        return self.stock >= quantity
