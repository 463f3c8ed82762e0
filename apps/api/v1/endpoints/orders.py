"""Order endpoints for REST API."""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query

from apps.api.deps import get_actor, get_order_service, get_query_service
from yarnitt.application.dtos.order_dto import (
    CancelOrderRequest,
    CreateOrderRequest,
    OrderDTO,
    OrderFiltersRequest,
    OrderListDTO,
    OrderStatsDTO,
    RecordPaymentRequest,
    RefundOrderRequest,
    ShipOrderRequest,
    UpdateStatusRequest,
)
from yarnitt.application.services import OrderLifecycleService, OrderQueryService
from yarnitt.domain.value_objects import Actor

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/orders", tags=["orders"])


def get_filters(
    status: Optional[str] = Query(default=None, description="Order status"),
    start_date: Optional[datetime] = Query(default=None, alias="startDate"),
    end_date: Optional[datetime] = Query(default=None, alias="endDate"),
    search: Optional[str] = Query(default=None, description="Order number substring"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
) -> OrderFiltersRequest:
    return OrderFiltersRequest(
        status=status,
        start_date=start_date,
        end_date=end_date,
        search=search,
        page=page,
        limit=limit,
    )


# =============================================================================
# PLACEMENT AND LISTINGS
# =============================================================================

@router.post("", response_model=OrderDTO, status_code=201)
async def create_order(
    request: CreateOrderRequest,
    actor: Actor = Depends(get_actor),
    service: OrderLifecycleService = Depends(get_order_service),
) -> OrderDTO:
    """Place an order for the calling buyer.

    Args:
        request: Items, shipping address and payment method
        actor: Calling account
        service: OrderLifecycleService instance

    Returns:
        OrderDTO of the pending order
    """
    return await service.create_order(actor, request)


@router.get("", response_model=OrderListDTO)
async def list_all_orders(
    filters: OrderFiltersRequest = Depends(get_filters),
    actor: Actor = Depends(get_actor),
    service: OrderQueryService = Depends(get_query_service),
) -> OrderListDTO:
    """All orders (admin)."""
    return await service.list_all_orders(actor, filters)


@router.get("/buyer", response_model=OrderListDTO)
async def list_buyer_orders(
    filters: OrderFiltersRequest = Depends(get_filters),
    actor: Actor = Depends(get_actor),
    service: OrderQueryService = Depends(get_query_service),
) -> OrderListDTO:
    return await service.list_buyer_orders(actor, filters)


@router.get("/seller", response_model=OrderListDTO)
async def list_seller_orders(
    filters: OrderFiltersRequest = Depends(get_filters),
    actor: Actor = Depends(get_actor),
    service: OrderQueryService = Depends(get_query_service),
) -> OrderListDTO:
    """Orders sold by the caller, with totals."""
    return await service.list_seller_orders(actor, filters)


@router.get("/stats", response_model=OrderStatsDTO)
async def get_order_stats(
    start_date: Optional[datetime] = Query(default=None, alias="startDate"),
    end_date: Optional[datetime] = Query(default=None, alias="endDate"),
    actor: Actor = Depends(get_actor),
    service: OrderQueryService = Depends(get_query_service),
) -> OrderStatsDTO:
    """Marketplace statistics (admin)."""
    return await service.get_order_stats(actor, start_date, end_date)


@router.get("/{order_id}", response_model=OrderDTO)
async def get_order(
    order_id: str,
    actor: Actor = Depends(get_actor),
    service: OrderQueryService = Depends(get_query_service),
) -> OrderDTO:
    return await service.get_order(order_id, actor)


# =============================================================================
# LIFECYCLE
# =============================================================================

@router.patch("/{order_id}/status", response_model=OrderDTO)
async def update_order_status(
    order_id: str,
    request: UpdateStatusRequest,
    actor: Actor = Depends(get_actor),
    service: OrderLifecycleService = Depends(get_order_service),
) -> OrderDTO:
    """Move an order along the status table (seller or admin)."""
    return await service.update_status(order_id, request.status, actor)


@router.patch("/{order_id}/confirm", response_model=OrderDTO)
async def confirm_order(
    order_id: str,
    actor: Actor = Depends(get_actor),
    service: OrderLifecycleService = Depends(get_order_service),
) -> OrderDTO:
    return await service.confirm_order(order_id, actor)


@router.patch("/{order_id}/cancel", response_model=OrderDTO)
async def cancel_order(
    order_id: str,
    request: Optional[CancelOrderRequest] = None,
    actor: Actor = Depends(get_actor),
    service: OrderLifecycleService = Depends(get_order_service),
) -> OrderDTO:
    """Cancel a pending or confirmed order and restore its stock."""
    reason = request.reason if request else None
    return await service.cancel_order(order_id, actor, reason)


@router.patch("/{order_id}/ship", response_model=OrderDTO)
async def ship_order(
    order_id: str,
    request: ShipOrderRequest,
    actor: Actor = Depends(get_actor),
    service: OrderLifecycleService = Depends(get_order_service),
) -> OrderDTO:
    return await service.ship_order(order_id, actor, request.tracking_number)


@router.patch("/{order_id}/confirm-delivery", response_model=OrderDTO)
async def confirm_delivery(
    order_id: str,
    actor: Actor = Depends(get_actor),
    service: OrderLifecycleService = Depends(get_order_service),
) -> OrderDTO:
    return await service.confirm_delivery(order_id, actor)


@router.patch("/{order_id}/refund", response_model=OrderDTO)
async def refund_order(
    order_id: str,
    request: Optional[RefundOrderRequest] = None,
    actor: Actor = Depends(get_actor),
    service: OrderLifecycleService = Depends(get_order_service),
) -> OrderDTO:
    """Refund a delivered or cancelled order (admin)."""
    reason = request.reason if request else None
    return await service.refund_order(order_id, actor, reason)


@router.post("/{order_id}/payment", response_model=OrderDTO)
async def record_payment(
    order_id: str,
    request: RecordPaymentRequest,
    actor: Actor = Depends(get_actor),
    service: OrderLifecycleService = Depends(get_order_service),
) -> OrderDTO:
    """Payment-provider callback result."""
    return await service.record_payment(
        order_id, request.payment_status, actor, request.transaction_id
    )
