"""
In-memory persistence adapters.

Used by tests, demos and the concurrency checks. State lives in an
``InMemoryStore``; every unit of work writes straight into it and keeps an
undo journal that is replayed in reverse on rollback.

Reads yield to the event loop before touching state, so concurrent
operations interleave the way they would against a real database. Each
conditional write runs without an ``await`` between check and update, which
makes it atomic under asyncio.
"""
import asyncio
import copy
import logging
from collections import defaultdict
from dataclasses import replace
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from yarnitt.application.interfaces import AbstractUnitOfWork
from yarnitt.domain.entities import Order, Product
from yarnitt.domain.enums import OrderStatus
from yarnitt.domain.exceptions import ConflictError, NotFoundError
from yarnitt.domain.repositories import (
    OrderFilters,
    OrderPage,
    OrderRepository,
    OrderSequence,
    OrderStats,
    ProductRepository,
    ProductSales,
    SellerSummary,
)

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")

UndoJournal = List[Callable[[], None]]


def _cents(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def _snapshot(order: Order) -> Order:
    """Detached copy without pending events."""
    stored = copy.deepcopy(order)
    stored.clear_domain_events()
    return stored


class InMemoryStore:
    """Backing state shared by all units of work of one "database"."""

    def __init__(self) -> None:
        self.products: Dict[str, Product] = {}
        self.orders: Dict[str, Order] = {}
        self.order_numbers: Dict[str, str] = {}
        self.counters: Dict[date, int] = {}

    def unit_of_work(self) -> "InMemoryUnitOfWork":
        return InMemoryUnitOfWork(self)

    def seed_products(self, products: Iterable[Product]) -> None:
        for product in products:
            self.products[product.id] = replace(product)

    def clear(self) -> None:
        self.products.clear()
        self.orders.clear()
        self.order_numbers.clear()
        self.counters.clear()


# =============================================================================
# CATALOG STORE
# =============================================================================

class InMemoryProductRepository(ProductRepository):
    """In-memory implementation of ProductRepository."""

    def __init__(self, store: InMemoryStore, journal: UndoJournal) -> None:
        self._store = store
        self._journal = journal

    async def add(self, product: Product) -> Product:
        await asyncio.sleep(0)
        self._store.products[product.id] = replace(product)
        self._journal.append(lambda: self._store.products.pop(product.id, None))
        return replace(product)

    async def find_by_id(self, product_id: str) -> Optional[Product]:
        await asyncio.sleep(0)
        product = self._store.products.get(product_id)
        return replace(product) if product else None

    async def find_many_by_ids(self, product_ids: Sequence[str]) -> List[Product]:
        await asyncio.sleep(0)
        return [
            replace(self._store.products[product_id])
            for product_id in dict.fromkeys(product_ids)
            if product_id in self._store.products
        ]

    async def conditional_decrement_stock(self, product_id: str, quantity: int) -> Optional[Product]:
        if quantity < 1:
            raise ValueError(f"Quantity must be positive, got: {quantity}")
        await asyncio.sleep(0)

        # Check and update with no await in between
        product = self._store.products.get(product_id)
        if product is None or product.stock < quantity:
            return None
        self._store.products[product_id] = replace(
            product, stock=product.stock - quantity, sold=product.sold + quantity
        )

        def undo() -> None:
            current = self._store.products[product_id]
            self._store.products[product_id] = replace(
                current,
                stock=current.stock + quantity,
                sold=max(0, current.sold - quantity),
            )

        self._journal.append(undo)
        return replace(self._store.products[product_id])

    async def increment_stock(self, product_id: str, quantity: int) -> Product:
        if quantity < 1:
            raise ValueError(f"Quantity must be positive, got: {quantity}")
        await asyncio.sleep(0)

        product = self._store.products.get(product_id)
        if product is None:
            raise NotFoundError("Product", product_id)
        new_sold = max(0, product.sold - quantity)
        sold_delta = product.sold - new_sold
        self._store.products[product_id] = replace(
            product, stock=product.stock + quantity, sold=new_sold
        )

        def undo() -> None:
            current = self._store.products[product_id]
            if current.stock < quantity:
                logger.warning(
                    f"Rollback of restored stock for {product_id} clamped at 0: "
                    f"stock={current.stock}, restored={quantity}"
                )
            self._store.products[product_id] = replace(
                current,
                stock=max(0, current.stock - quantity),
                sold=current.sold + sold_delta,
            )

        self._journal.append(undo)
        return replace(self._store.products[product_id])


# =============================================================================
# ORDER STORE
# =============================================================================

class InMemoryOrderRepository(OrderRepository):
    """In-memory implementation of OrderRepository."""

    def __init__(self, store: InMemoryStore, journal: UndoJournal) -> None:
        self._store = store
        self._journal = journal

    async def create(self, order: Order) -> Order:
        await asyncio.sleep(0)
        number = str(order.order_number)
        if number in self._store.order_numbers:
            raise ConflictError(
                f"Order number {number} already exists", details={"order_number": number}
            )
        self._store.orders[order.id] = _snapshot(order)
        self._store.order_numbers[number] = order.id

        def undo() -> None:
            self._store.orders.pop(order.id, None)
            self._store.order_numbers.pop(number, None)

        self._journal.append(undo)
        return order

    async def find_by_id(self, order_id: str) -> Optional[Order]:
        await asyncio.sleep(0)
        order = self._store.orders.get(order_id)
        return copy.deepcopy(order) if order else None

    async def save(self, order: Order, expected_version: int) -> Order:
        await asyncio.sleep(0)
        current = self._store.orders.get(order.id)
        if current is None or current.version != expected_version:
            raise ConflictError(
                f"Order {order.order_number} was modified concurrently",
                details={"order_id": order.id, "expected_version": expected_version},
            )
        order.version = expected_version + 1
        self._store.orders[order.id] = _snapshot(order)

        def undo() -> None:
            self._store.orders[order.id] = current

        self._journal.append(undo)
        return order

    async def count_created_between(self, start: datetime, end: datetime) -> int:
        await asyncio.sleep(0)
        return sum(1 for order in self._store.orders.values() if start <= order.created_at < end)

    async def search(self, filters: OrderFilters) -> OrderPage:
        await asyncio.sleep(0)
        matches = sorted(
            (order for order in self._store.orders.values() if self._matches(order, filters)),
            key=lambda order: (order.created_at, str(order.order_number)),
            reverse=True,
        )
        window = matches[filters.offset:filters.offset + filters.limit]
        return OrderPage(
            orders=[copy.deepcopy(order) for order in window],
            total=len(matches),
            page=filters.page,
            limit=filters.limit,
        )

    async def seller_summary(self, seller_id: str) -> SellerSummary:
        await asyncio.sleep(0)
        orders = [o for o in self._store.orders.values() if o.seller_id == seller_id]
        return SellerSummary(
            total_orders=len(orders),
            total_revenue=_cents(sum((o.seller_earnings.amount for o in orders), Decimal("0"))),
            pending_orders=sum(1 for o in orders if o.status == OrderStatus.PENDING),
        )

    async def stats(
        self,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        top_limit: int = 10,
    ) -> OrderStats:
        await asyncio.sleep(0)
        orders = [
            o for o in self._store.orders.values()
            if (start_date is None or o.created_at >= start_date)
            and (end_date is None or o.created_at <= end_date)
        ]
        total_revenue = sum((o.total_amount.amount for o in orders), Decimal("0"))
        total_commission = sum((o.commission.amount for o in orders), Decimal("0"))

        by_status: Dict[str, int] = defaultdict(int)
        quantities: Dict[str, int] = defaultdict(int)
        revenues: Dict[str, Decimal] = defaultdict(Decimal)
        for order in orders:
            by_status[order.status.value] += 1
            for item in order.items:
                quantities[item.product_id] += item.quantity
                revenues[item.product_id] += item.line_total.amount

        ranked = sorted(quantities, key=lambda pid: (-quantities[pid], pid))[:top_limit]
        top_products = [
            ProductSales(
                product_id=pid,
                name=self._store.products[pid].name if pid in self._store.products else "",
                total_quantity=quantities[pid],
                total_revenue=_cents(revenues[pid]),
            )
            for pid in ranked
        ]

        return OrderStats(
            total_orders=len(orders),
            total_revenue=_cents(total_revenue),
            total_commission=_cents(total_commission),
            average_order_value=_cents(total_revenue / len(orders)) if orders else _cents(Decimal("0")),
            orders_by_status=dict(by_status),
            top_products=top_products,
        )

    @staticmethod
    def _matches(order: Order, filters: OrderFilters) -> bool:
        if filters.buyer_id is not None and order.buyer_id != filters.buyer_id:
            return False
        if filters.seller_id is not None and order.seller_id != filters.seller_id:
            return False
        if filters.status is not None and order.status != OrderStatus(filters.status):
            return False
        if filters.start_date is not None and order.created_at < filters.start_date:
            return False
        if filters.end_date is not None and order.created_at > filters.end_date:
            return False
        if filters.search and filters.search.lower() not in str(order.order_number).lower():
            return False
        return True


# =============================================================================
# ORDER NUMBER COUNTER
# =============================================================================

class InMemoryDailyCounter(OrderSequence):
    """Per-day counter; the increment itself is atomic under asyncio."""

    def __init__(self, store: InMemoryStore, journal: UndoJournal) -> None:
        self._store = store
        self._journal = journal

    async def next_value(self, day: date) -> int:
        await asyncio.sleep(0)
        value = self._store.counters.get(day, 0) + 1
        self._store.counters[day] = value

        def undo() -> None:
            # Only give the number back if nobody took a later one
            if self._store.counters.get(day) == value:
                if value == 1:
                    del self._store.counters[day]
                else:
                    self._store.counters[day] = value - 1

        self._journal.append(undo)
        return value


# =============================================================================
# UNIT OF WORK
# =============================================================================

class InMemoryUnitOfWork(AbstractUnitOfWork):
    """Unit of work over an InMemoryStore with an undo journal."""

    def __init__(self, store: InMemoryStore) -> None:
        self._store = store
        self._journal: UndoJournal = []
        self._committed = False
        self.orders = InMemoryOrderRepository(store, self._journal)
        self.products = InMemoryProductRepository(store, self._journal)
        self.counters = InMemoryDailyCounter(store, self._journal)

    async def __aenter__(self) -> "InMemoryUnitOfWork":
        self._journal.clear()
        self._committed = False
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        if not self._committed:
            await self.rollback()

    async def commit(self) -> None:
        self._journal.clear()
        self._committed = True

    async def rollback(self) -> None:
        if self._journal:
            logger.warning(f"Rolling back {len(self._journal)} in-memory write(s)")
        while self._journal:
            undo = self._journal.pop()
            undo()
