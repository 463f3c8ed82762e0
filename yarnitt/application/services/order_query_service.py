"""Read-side service: order lookup, listings and statistics."""

import logging
from datetime import datetime, timezone
from typing import Optional

from yarnitt.application.dtos.order_dto import (
    OrderDTO,
    OrderFiltersRequest,
    OrderListDTO,
    OrderStatsDTO,
    SellerStatsDTO,
)
from yarnitt.application.interfaces import UnitOfWorkFactory
from yarnitt.domain.enums import OrderStatus
from yarnitt.domain.exceptions import AuthorizationError, NotFoundError, ValidationError
from yarnitt.domain.repositories import OrderFilters
from yarnitt.domain.value_objects import Actor

logger = logging.getLogger(__name__)

TOP_PRODUCTS_LIMIT = 10


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Naive datetimes from clients are taken as UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class OrderQueryService:
    """Buyer, seller and admin views over stored orders."""

    def __init__(self, uow_factory: UnitOfWorkFactory) -> None:
        self._uow_factory = uow_factory

    async def get_order(self, order_id: str, actor: Actor) -> OrderDTO:
        """Get one order visible to the actor.

        Raises:
            NotFoundError: Order does not exist
            AuthorizationError: Actor is not the buyer, the seller or an admin
        """
        async with self._uow_factory() as uow:
            order = await uow.orders.find_by_id(order_id)

        if order is None:
            raise NotFoundError("Order", order_id)
        if not order.is_participant(actor):
            raise AuthorizationError(
                "Not authorized to view this order", actor_id=actor.id, action="view"
            )
        return OrderDTO.from_entity(order)

    async def list_buyer_orders(
        self, actor: Actor, filters: Optional[OrderFiltersRequest] = None
    ) -> OrderListDTO:
        criteria = self._to_filters(filters, buyer_id=actor.id)
        async with self._uow_factory() as uow:
            page = await uow.orders.search(criteria)
        return OrderListDTO.from_page(page)

    async def list_seller_orders(
        self, actor: Actor, filters: Optional[OrderFiltersRequest] = None
    ) -> OrderListDTO:
        """Orders sold by the actor, with totals over all of them."""
        criteria = self._to_filters(filters, seller_id=actor.id)
        async with self._uow_factory() as uow:
            page = await uow.orders.search(criteria)
            summary = await uow.orders.seller_summary(actor.id)
        return OrderListDTO.from_page(page, stats=SellerStatsDTO.from_summary(summary))

    async def list_all_orders(
        self, actor: Actor, filters: Optional[OrderFiltersRequest] = None
    ) -> OrderListDTO:
        self._require_admin(actor, "list_all")
        criteria = self._to_filters(filters)
        async with self._uow_factory() as uow:
            page = await uow.orders.search(criteria)
        return OrderListDTO.from_page(page)

    async def get_order_stats(
        self,
        actor: Actor,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> OrderStatsDTO:
        """Marketplace totals, per-status counts and top products."""
        self._require_admin(actor, "stats")
        start_date, end_date = _as_utc(start_date), _as_utc(end_date)
        if start_date and end_date and start_date > end_date:
            raise ValidationError("start_date must not be after end_date", field="start_date")

        async with self._uow_factory() as uow:
            stats = await uow.orders.stats(start_date, end_date, top_limit=TOP_PRODUCTS_LIMIT)

        logger.debug(f"Order stats computed: {stats.total_orders} orders")
        return OrderStatsDTO.from_stats(stats)

    @staticmethod
    def _require_admin(actor: Actor, action: str) -> None:
        if not actor.is_admin:
            raise AuthorizationError("Admin access required", actor_id=actor.id, action=action)

    @staticmethod
    def _to_filters(
        request: Optional[OrderFiltersRequest],
        buyer_id: Optional[str] = None,
        seller_id: Optional[str] = None,
    ) -> OrderFilters:
        request = request or OrderFiltersRequest()
        status = None
        if request.status:
            try:
                status = OrderStatus(request.status)
            except ValueError:
                raise ValidationError("Invalid status value", field="status") from None

        return OrderFilters(
            buyer_id=buyer_id,
            seller_id=seller_id,
            status=status,
            start_date=_as_utc(request.start_date),
            end_date=_as_utc(request.end_date),
            search=request.search.strip() if request.search else None,
            page=request.page,
            limit=request.limit,
        )
