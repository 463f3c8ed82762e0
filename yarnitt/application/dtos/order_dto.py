"""Application DTOs for Order operations."""

from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from yarnitt.domain.entities.order import Order
from yarnitt.domain.repositories import OrderPage, OrderStats, SellerSummary

# =============================================================================
# REQUESTS
# =============================================================================
# Field-level rules (required address fields, positive quantities, status
# values) are enforced by the domain so direct callers and HTTP callers get
# the same ValidationError.


class OrderItemInput(BaseModel):
    """One requested line of a new order."""

    product_id: str = Field(default="", description="Product ID")
    quantity: int = Field(default=0, description="Quantity ordered")
    customization: Optional[str] = Field(None, description="Free-text customization")

    model_config = {"frozen": True}


class ShippingAddressDTO(BaseModel):
    """Delivery address."""

    full_name: Optional[str] = Field(None, description="Recipient name")
    phone: Optional[str] = Field(None, description="Contact phone")
    address: Optional[str] = Field(None, description="Street address")
    city: Optional[str] = Field(None, description="City")
    country: Optional[str] = Field(None, description="Country")
    postal_code: Optional[str] = Field(None, description="Postal code")

    model_config = {"frozen": True}


class CreateOrderRequest(BaseModel):
    """Request DTO for placing an order."""

    items: List[OrderItemInput] = Field(default_factory=list, description="Order items")
    shipping_address: Optional[ShippingAddressDTO] = Field(None, description="Delivery address")
    payment_method: str = Field(default="pending", description="mpesa, paypal, card or pending")

    model_config = {"frozen": True}


class UpdateStatusRequest(BaseModel):
    status: str = Field(..., description="Requested order status")

    model_config = {"frozen": True}


class CancelOrderRequest(BaseModel):
    reason: Optional[str] = Field(None, description="Cancellation reason")

    model_config = {"frozen": True}


class ShipOrderRequest(BaseModel):
    tracking_number: Optional[str] = Field(None, description="Carrier tracking number")

    model_config = {"frozen": True}


class RefundOrderRequest(BaseModel):
    reason: Optional[str] = Field(None, description="Refund note")

    model_config = {"frozen": True}


class RecordPaymentRequest(BaseModel):
    payment_status: str = Field(..., description="pending, paid, failed or refunded")
    transaction_id: Optional[str] = Field(None, description="Payment provider transaction ID")

    model_config = {"frozen": True}


class OrderFiltersRequest(BaseModel):
    """Listing filters."""

    status: Optional[str] = Field(None, description="Order status")
    start_date: Optional[datetime] = Field(None, description="Created at or after")
    end_date: Optional[datetime] = Field(None, description="Created at or before")
    search: Optional[str] = Field(None, description="Order number substring")
    page: int = Field(default=1, ge=1, description="Page number")
    limit: int = Field(default=20, ge=1, le=100, description="Page size")

    model_config = {"frozen": True}


# =============================================================================
# RESPONSES
# =============================================================================


class OrderItemDTO(BaseModel):
    """DTO for order item."""

    product_id: str = Field(..., description="Product ID")
    quantity: int = Field(..., gt=0, description="Quantity ordered")
    price_at_purchase: Decimal = Field(..., ge=0, description="Unit price frozen at purchase")
    line_total: Decimal = Field(..., ge=0, description="price_at_purchase * quantity")
    customization: Optional[str] = None

    model_config = {"frozen": True}


class OrderDTO(BaseModel):
    """Response DTO for order details."""

    id: str
    order_number: str
    buyer_id: str
    seller_id: str
    items: List[OrderItemDTO] = Field(default_factory=list)
    shipping_address: ShippingAddressDTO
    total_amount: Decimal = Field(..., ge=0)
    commission: Decimal = Field(..., ge=0)
    seller_earnings: Decimal = Field(..., ge=0)
    currency: str
    status: str
    payment_method: str
    payment_status: str
    transaction_id: Optional[str] = None
    tracking_number: Optional[str] = None
    estimated_delivery: Optional[datetime] = None
    delivered_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    cancellation_reason: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"frozen": True}

    @classmethod
    def from_entity(cls, order: Order) -> "OrderDTO":
        address = order.shipping_address
        return cls(
            id=order.id,
            order_number=str(order.order_number),
            buyer_id=order.buyer_id,
            seller_id=order.seller_id,
            items=[
                OrderItemDTO(
                    product_id=item.product_id,
                    quantity=item.quantity,
                    price_at_purchase=item.price_at_purchase.amount,
                    line_total=item.line_total.amount,
                    customization=item.customization,
                )
                for item in order.items
            ],
            shipping_address=ShippingAddressDTO(
                full_name=address.full_name,
                phone=address.phone,
                address=address.address,
                city=address.city,
                country=address.country,
                postal_code=address.postal_code,
            ),
            total_amount=order.total_amount.amount,
            commission=order.commission.amount,
            seller_earnings=order.seller_earnings.amount,
            currency=order.total_amount.currency,
            status=order.status.value,
            payment_method=order.payment_method.value,
            payment_status=order.payment_status.value,
            transaction_id=order.transaction_id,
            tracking_number=order.tracking_number,
            estimated_delivery=order.estimated_delivery,
            delivered_at=order.delivered_at,
            cancelled_at=order.cancelled_at,
            cancellation_reason=order.cancellation_reason,
            notes=order.notes,
            created_at=order.created_at,
            updated_at=order.updated_at,
        )


class PaginationDTO(BaseModel):
    page: int = Field(..., ge=1)
    limit: int = Field(..., ge=1)
    total: int = Field(..., ge=0)
    pages: int = Field(..., ge=0)

    model_config = {"frozen": True}


class SellerStatsDTO(BaseModel):
    """Seller dashboard totals."""

    total_orders: int = Field(default=0, ge=0)
    total_revenue: Decimal = Field(default=Decimal("0.00"), description="Sum of seller earnings")
    pending_orders: int = Field(default=0, ge=0)

    model_config = {"frozen": True}

    @classmethod
    def from_summary(cls, summary: SellerSummary) -> "SellerStatsDTO":
        return cls(
            total_orders=summary.total_orders,
            total_revenue=summary.total_revenue,
            pending_orders=summary.pending_orders,
        )


class OrderListDTO(BaseModel):
    """DTO for listing orders."""

    orders: List[OrderDTO] = Field(default_factory=list, description="List of orders")
    pagination: PaginationDTO
    stats: Optional[SellerStatsDTO] = Field(None, description="Seller totals (seller listing only)")

    model_config = {"frozen": True}

    @classmethod
    def from_page(cls, page: OrderPage, stats: Optional[SellerStatsDTO] = None) -> "OrderListDTO":
        return cls(
            orders=[OrderDTO.from_entity(order) for order in page.orders],
            pagination=PaginationDTO(
                page=page.page,
                limit=page.limit,
                total=page.total,
                pages=page.pages,
            ),
            stats=stats,
        )


class ProductSalesDTO(BaseModel):
    product_id: str
    name: str
    total_quantity: int = Field(..., ge=0)
    total_revenue: Decimal

    model_config = {"frozen": True}


class OrderStatsDTO(BaseModel):
    """Marketplace-wide statistics for administrators."""

    total_orders: int = Field(default=0, ge=0)
    total_revenue: Decimal = Decimal("0.00")
    total_commission: Decimal = Decimal("0.00")
    average_order_value: Decimal = Decimal("0.00")
    orders_by_status: Dict[str, int] = Field(default_factory=dict)
    top_products: List[ProductSalesDTO] = Field(default_factory=list)

    model_config = {"frozen": True}

    @classmethod
    def from_stats(cls, stats: OrderStats) -> "OrderStatsDTO":
        return cls(
            total_orders=stats.total_orders,
            total_revenue=stats.total_revenue,
            total_commission=stats.total_commission,
            average_order_value=stats.average_order_value,
            orders_by_status=dict(stats.orders_by_status),
            top_products=[
                ProductSalesDTO(
                    product_id=p.product_id,
                    name=p.name,
                    total_quantity=p.total_quantity,
                    total_revenue=p.total_revenue,
                )
                for p in stats.top_products
            ],
        )
