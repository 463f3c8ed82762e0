"""
Order Domain Events.

Events that occur during the order lifecycle. Published to the event bus
once the unit of work that produced them has committed.
"""
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from .base import DomainEvent


@dataclass
class _OrderEvent(DomainEvent):
    order_id: str = ""
    order_number: str = ""

    def __post_init__(self):
        """Set aggregate_id to order_id."""
        if not self.aggregate_id and self.order_id:
            object.__setattr__(self, 'aggregate_id', self.order_id)
        super().__post_init__()


@dataclass
class OrderPlacedEvent(_OrderEvent):
    """
    Order was created and its stock reserved.

    Consumers: seller notifications, payment initiation
    """

    buyer_id: str = ""
    seller_id: str = ""
    total_amount: Optional[Decimal] = None
    commission: Optional[Decimal] = None
    seller_earnings: Optional[Decimal] = None
    currency: str = ""
    payment_method: str = ""
    product_ids: List[str] = field(default_factory=list)


@dataclass
class OrderStatusChangedEvent(_OrderEvent):
    """Order moved along the transition table."""

    previous_status: str = ""
    new_status: str = ""


@dataclass
class OrderCancelledEvent(_OrderEvent):
    """Order was cancelled and its reservation compensated."""

    reason: str = ""


@dataclass
class OrderShippedEvent(_OrderEvent):
    """Seller handed the order to a carrier."""

    tracking_number: str = ""
    estimated_delivery: Optional[datetime] = None


@dataclass
class OrderDeliveredEvent(_OrderEvent):
    """Delivery confirmed."""

    delivered_at: Optional[datetime] = None


@dataclass
class OrderRefundedEvent(_OrderEvent):
    """Order refunded by an admin."""

    amount: Optional[Decimal] = None
    stock_restored: bool = False


@dataclass
class PaymentStatusChangedEvent(_OrderEvent):
    """Payment provider reported a new payment state."""

    previous_status: str = ""
    new_status: str = ""
    transaction_id: Optional[str] = None
