"""Repository interfaces for Order aggregate."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional

from ..entities.order import Order
from ..enums import OrderStatus


@dataclass(frozen=True)
class OrderFilters:
    """Listing filters shared by buyer, seller and admin views."""
    buyer_id: Optional[str] = None
    seller_id: Optional[str] = None
    status: Optional[OrderStatus] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    search: Optional[str] = None
    page: int = 1
    limit: int = 20

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass(frozen=True)
class OrderPage:
    """One page of orders, newest first."""
    orders: List[Order]
    total: int
    page: int
    limit: int

    @property
    def pages(self) -> int:
        return -(-self.total // self.limit) if self.limit else 0


@dataclass(frozen=True)
class SellerSummary:
    total_orders: int = 0
    total_revenue: Decimal = Decimal("0.00")
    pending_orders: int = 0


@dataclass(frozen=True)
class ProductSales:
    product_id: str
    name: str
    total_quantity: int
    total_revenue: Decimal


@dataclass(frozen=True)
class OrderStats:
    """Marketplace-wide order statistics."""
    total_orders: int = 0
    total_revenue: Decimal = Decimal("0.00")
    total_commission: Decimal = Decimal("0.00")
    average_order_value: Decimal = Decimal("0.00")
    orders_by_status: Dict[str, int] = field(default_factory=dict)
    top_products: List[ProductSales] = field(default_factory=list)


class OrderRepository(ABC):
    """Abstract repository for Order aggregate persistence."""

    @abstractmethod
    async def create(self, order: Order) -> Order:
        """Insert a new order.

        Args:
            order: Freshly placed order

        Returns:
            The persisted order

        Raises:
            ConflictError: If the order number is already taken
        """

    @abstractmethod
    async def find_by_id(self, order_id: str) -> Optional[Order]:
        """Retrieve order by unique identifier.

        Returns:
            Order if found, None otherwise
        """

    @abstractmethod
    async def save(self, order: Order, expected_version: int) -> Order:
        """Persist mutable order fields with compare-and-swap on version.

        Args:
            order: Mutated order
            expected_version: Version read before mutating

        Returns:
            The order with its version bumped

        Raises:
            ConflictError: If another writer saved the order in between
        """

    @abstractmethod
    async def count_created_between(self, start: datetime, end: datetime) -> int:
        """Count orders with start <= created_at < end."""

    @abstractmethod
    async def search(self, filters: OrderFilters) -> OrderPage:
        """List orders matching filters, newest first."""

    @abstractmethod
    async def seller_summary(self, seller_id: str) -> SellerSummary:
        """Totals over all orders of one seller."""

    @abstractmethod
    async def stats(
        self,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        top_limit: int = 10,
    ) -> OrderStats:
        """Aggregate statistics for orders created within the window."""
