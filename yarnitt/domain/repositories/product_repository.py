"""Catalog store interface used by the order engine."""

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from ..entities.product import Product


class ProductRepository(ABC):
    """
    Catalog store.

    Stock is the one piece of shared mutable state in the system, so every
    stock change goes through a single atomic conditional update.
    """

    @abstractmethod
    async def add(self, product: Product) -> Product:
        """Insert a product (catalog seeding)."""

    @abstractmethod
    async def find_by_id(self, product_id: str) -> Optional[Product]:
        """Retrieve a product, None if missing."""

    @abstractmethod
    async def find_many_by_ids(self, product_ids: Sequence[str]) -> List[Product]:
        """Batch fetch. Missing ids are simply absent from the result."""

    @abstractmethod
    async def conditional_decrement_stock(self, product_id: str, quantity: int) -> Optional[Product]:
        """Atomically reserve stock.

        Applies ``stock -= quantity, sold += quantity`` only when
        ``stock >= quantity`` at update time.

        Returns:
            Updated product, or None if stock was insufficient or the
            product does not exist
        """

    @abstractmethod
    async def increment_stock(self, product_id: str, quantity: int) -> Product:
        """Atomically restore stock.

        Applies ``stock += quantity, sold = max(0, sold - quantity)``.

        Raises:
            NotFoundError: If the product does not exist
        """
