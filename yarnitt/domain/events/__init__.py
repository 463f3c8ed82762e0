"""Domain events for the event bus."""
from .base import DomainEvent
from .order_events import (
    OrderPlacedEvent,
    OrderStatusChangedEvent,
    OrderCancelledEvent,
    OrderShippedEvent,
    OrderDeliveredEvent,
    OrderRefundedEvent,
    PaymentStatusChangedEvent,
)

__all__ = [
    "DomainEvent",
    "OrderPlacedEvent",
    "OrderStatusChangedEvent",
    "OrderCancelledEvent",
    "OrderShippedEvent",
    "OrderDeliveredEvent",
    "OrderRefundedEvent",
    "PaymentStatusChangedEvent",
]
