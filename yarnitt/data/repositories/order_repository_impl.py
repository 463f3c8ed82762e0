"""SQLAlchemy implementation of OrderRepository."""

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, List, Optional

from sqlalchemy import case, desc, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from yarnitt.domain.entities.order import Order
from yarnitt.domain.enums import OrderStatus
from yarnitt.domain.exceptions import ConflictError
from yarnitt.domain.repositories.order_repository import (
    OrderFilters,
    OrderPage,
    OrderRepository,
    OrderStats,
    ProductSales,
    SellerSummary,
)

from ..mappers import OrderMapper, to_db_datetime
from ..models import OrderItemModel, OrderModel, ProductModel

CENT = Decimal("0.01")


def _decimal(value: Any) -> Decimal:
    return Decimal(str(value or 0)).quantize(CENT, rounding=ROUND_HALF_UP)


class SqlAlchemyOrderRepository(OrderRepository):
    """Concrete implementation of OrderRepository using SQLAlchemy."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with SQLAlchemy session.

        Args:
            session: SQLAlchemy async session
        """
        self._session = session

    async def create(self, order: Order) -> Order:
        self._session.add(OrderMapper.to_persistence(order))
        try:
            await self._session.flush()  # Propagate to DB without committing
        except IntegrityError as exc:
            raise ConflictError(
                f"Order number {order.order_number} already exists",
                details={"order_number": str(order.order_number)},
            ) from exc
        return order

    async def find_by_id(self, order_id: str) -> Optional[Order]:
        result = await self._session.execute(
            select(OrderModel)
            .where(OrderModel.id == order_id)
            .execution_options(populate_existing=True)
        )
        model = result.scalar_one_or_none()

        if not model:
            return None

        return OrderMapper.to_domain(model)

    async def save(self, order: Order, expected_version: int) -> Order:
        """Compare-and-swap update of the mutable order columns.

        Raises:
            ConflictError: If the stored version is no longer expected_version
        """
        result = await self._session.execute(
            update(OrderModel)
            .where(OrderModel.id == order.id, OrderModel.version == expected_version)
            .values(version=expected_version + 1, **OrderMapper.mutable_values(order))
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise ConflictError(
                f"Order {order.order_number} was modified concurrently",
                details={"order_id": order.id, "expected_version": expected_version},
            )
        order.version = expected_version + 1
        return order

    async def count_created_between(self, start: datetime, end: datetime) -> int:
        result = await self._session.execute(
            select(func.count(OrderModel.id)).where(
                OrderModel.created_at >= to_db_datetime(start),
                OrderModel.created_at < to_db_datetime(end),
            )
        )
        return result.scalar_one()

    async def search(self, filters: OrderFilters) -> OrderPage:
        conditions = self._conditions(filters)

        total = (
            await self._session.execute(select(func.count(OrderModel.id)).where(*conditions))
        ).scalar_one()

        result = await self._session.execute(
            select(OrderModel)
            .where(*conditions)
            .order_by(desc(OrderModel.created_at), desc(OrderModel.order_number))
            .offset(filters.offset)
            .limit(filters.limit)
            .execution_options(populate_existing=True)
        )
        orders = [OrderMapper.to_domain(model) for model in result.scalars().all()]

        return OrderPage(orders=orders, total=total, page=filters.page, limit=filters.limit)

    async def seller_summary(self, seller_id: str) -> SellerSummary:
        result = await self._session.execute(
            select(
                func.count(OrderModel.id),
                func.sum(OrderModel.seller_earnings),
                func.sum(case((OrderModel.status == OrderStatus.PENDING.value, 1), else_=0)),
            ).where(OrderModel.seller_id == seller_id)
        )
        total_orders, revenue, pending = result.one()
        return SellerSummary(
            total_orders=total_orders or 0,
            total_revenue=_decimal(revenue),
            pending_orders=int(pending or 0),
        )

    async def stats(
        self,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        top_limit: int = 10,
    ) -> OrderStats:
        conditions = self._date_conditions(start_date, end_date)

        totals = await self._session.execute(
            select(
                func.count(OrderModel.id),
                func.sum(OrderModel.total_amount),
                func.sum(OrderModel.commission),
            ).where(*conditions)
        )
        total_orders, revenue, commission = totals.one()
        total_orders = total_orders or 0
        total_revenue = _decimal(revenue)
        average = _decimal(total_revenue / total_orders) if total_orders else _decimal(0)

        by_status = await self._session.execute(
            select(OrderModel.status, func.count(OrderModel.id))
            .where(*conditions)
            .group_by(OrderModel.status)
        )

        quantity = func.sum(OrderItemModel.quantity).label("total_quantity")
        top = await self._session.execute(
            select(
                OrderItemModel.product_id,
                func.max(ProductModel.name),
                quantity,
                func.sum(OrderItemModel.quantity * OrderItemModel.price_amount),
            )
            .join(OrderModel, OrderItemModel.order_id == OrderModel.id)
            .outerjoin(ProductModel, ProductModel.id == OrderItemModel.product_id)
            .where(*conditions)
            .group_by(OrderItemModel.product_id)
            .order_by(desc(quantity), OrderItemModel.product_id)
            .limit(top_limit)
        )
        top_products: List[ProductSales] = [
            ProductSales(
                product_id=product_id,
                name=name or "",
                total_quantity=int(qty or 0),
                total_revenue=_decimal(product_revenue),
            )
            for product_id, name, qty, product_revenue in top.all()
        ]

        return OrderStats(
            total_orders=total_orders,
            total_revenue=total_revenue,
            total_commission=_decimal(commission),
            average_order_value=average,
            orders_by_status={status: count for status, count in by_status.all()},
            top_products=top_products,
        )

    @staticmethod
    def _date_conditions(start_date: Optional[datetime], end_date: Optional[datetime]) -> list:
        conditions = []
        if start_date is not None:
            conditions.append(OrderModel.created_at >= to_db_datetime(start_date))
        if end_date is not None:
            conditions.append(OrderModel.created_at <= to_db_datetime(end_date))
        return conditions

    def _conditions(self, filters: OrderFilters) -> list:
        conditions = self._date_conditions(filters.start_date, filters.end_date)
        if filters.buyer_id is not None:
            conditions.append(OrderModel.buyer_id == filters.buyer_id)
        if filters.seller_id is not None:
            conditions.append(OrderModel.seller_id == filters.seller_id)
        if filters.status is not None:
            conditions.append(OrderModel.status == OrderStatus(filters.status).value)
        if filters.search:
            conditions.append(
                func.lower(OrderModel.order_number).contains(filters.search.lower(), autoescape=True)
            )
        return conditions
