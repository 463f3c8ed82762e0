"""
Order aggregate root.

CRITICAL: This file must contain ZERO imports from:
- sqlalchemy
- pydantic
- fastapi
"""
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import List, Optional

from ..enums import OrderStatus, PaymentMethod, PaymentStatus
from ..events.base import DomainEvent
from ..events.order_events import (
    OrderCancelledEvent,
    OrderDeliveredEvent,
    OrderPlacedEvent,
    OrderRefundedEvent,
    OrderShippedEvent,
    OrderStatusChangedEvent,
    PaymentStatusChangedEvent,
)
from ..exceptions import InvalidTransitionError, ValidationError
from ..services.commission import CommissionCalculator
from ..services.status_transitions import (
    REFUNDABLE_STATUSES,
    SHIPPABLE_STATUSES,
    assert_transition,
    can_cancel_order,
    can_update_payment_status,
)
from ..value_objects import Actor, Money, OrderNumber, ShippingAddress


@dataclass
class OrderItem:
    """Line item. Price is frozen at purchase time and never re-read."""
    product_id: str
    quantity: int
    price_at_purchase: Money
    customization: Optional[str] = None

    def __post_init__(self):
        if not self.product_id:
            raise ValidationError("Invalid product ID in items", field="items.product_id")
        if not isinstance(self.quantity, int) or self.quantity < 1:
            raise ValidationError("Item quantity must be at least 1", field="items.quantity")

    @property
    def line_total(self) -> Money:
        return self.price_at_purchase * self.quantity


@dataclass
class Order:
    """
    Order aggregate root.

    One buyer's purchase from one seller. All status changes go through
    the methods below, which validate the transition before mutating and
    record a domain event for each change.
    """
    id: str
    order_number: OrderNumber
    buyer_id: str
    seller_id: str
    items: List[OrderItem]
    shipping_address: ShippingAddress
    total_amount: Money
    commission: Money
    seller_earnings: Money

    status: OrderStatus = OrderStatus.PENDING
    payment_method: PaymentMethod = PaymentMethod.PENDING
    payment_status: PaymentStatus = PaymentStatus.PENDING
    transaction_id: Optional[str] = None

    tracking_number: Optional[str] = None
    estimated_delivery: Optional[datetime] = None
    delivered_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    cancellation_reason: Optional[str] = None
    notes: Optional[str] = None

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    # Optimistic concurrency token, bumped by the repository on every save
    version: int = 0

    _domain_events: List[DomainEvent] = field(default_factory=list, init=False, repr=False)

    @classmethod
    def place(
        cls,
        order_id: str,
        order_number: OrderNumber,
        buyer_id: str,
        seller_id: str,
        items: List[OrderItem],
        shipping_address: ShippingAddress,
        payment_method: PaymentMethod,
        calculator: CommissionCalculator,
        now: datetime,
    ) -> 'Order':
        """
        Factory for a new pending order.

        Computes totals from the frozen item prices and records
        OrderPlacedEvent.
        """
        if not items:
            raise ValidationError("Items array is required and must not be empty", field="items")

        total = items[0].line_total
        for item in items[1:]:
            total = total + item.line_total
        total = total.quantize()
        commission, seller_earnings = calculator.split(total)

        order = cls(
            id=order_id,
            order_number=order_number,
            buyer_id=buyer_id,
            seller_id=seller_id,
            items=list(items),
            shipping_address=shipping_address,
            total_amount=total,
            commission=commission,
            seller_earnings=seller_earnings,
            payment_method=payment_method,
            created_at=now,
            updated_at=now,
        )
        order._record_event(
            OrderPlacedEvent(
                order_id=order.id,
                order_number=str(order.order_number),
                actor_id=buyer_id,
                buyer_id=buyer_id,
                seller_id=seller_id,
                total_amount=total.amount,
                commission=commission.amount,
                seller_earnings=seller_earnings.amount,
                currency=total.currency,
                payment_method=payment_method.value,
                product_ids=[item.product_id for item in items],
            )
        )
        return order

    # =========================================================================
    # ROLE PREDICATES
    # =========================================================================

    def is_buyer(self, actor: Actor) -> bool:
        return actor.id == self.buyer_id

    def is_seller(self, actor: Actor) -> bool:
        return actor.id == self.seller_id

    def is_participant(self, actor: Actor) -> bool:
        return actor.is_admin or self.is_buyer(actor) or self.is_seller(actor)

    # =========================================================================
    # STATUS TRANSITIONS
    # =========================================================================

    def transition_to(self, new_status: OrderStatus, now: datetime, actor_id: Optional[str] = None) -> None:
        """
        Apply a transition from the table.

        Raises:
            InvalidTransitionError: If current -> new_status is not allowed
        """
        assert_transition(self.status, new_status)
        previous = self.status
        self.status = OrderStatus(new_status)
        self.updated_at = now

        if self.status == OrderStatus.DELIVERED:
            self.delivered_at = now
        elif self.status == OrderStatus.CANCELLED:
            self.cancelled_at = now

        self._record_status_change(previous, self.status, actor_id)

    def confirm(self, now: datetime, actor_id: Optional[str] = None) -> None:
        """Seller accepts a pending order."""
        if self.status != OrderStatus.PENDING:
            raise InvalidTransitionError(
                self.status.value,
                OrderStatus.CONFIRMED.value,
                f"Cannot confirm order with status {self.status.value}. Order must be pending.",
            )
        self.transition_to(OrderStatus.CONFIRMED, now, actor_id)

    def cancel(self, now: datetime, reason: Optional[str] = None, actor_id: Optional[str] = None) -> None:
        """
        Cancel before processing starts.

        The caller is responsible for restoring the reserved stock in the
        same unit of work.
        """
        if not can_cancel_order(self.status):
            raise InvalidTransitionError(
                self.status.value,
                OrderStatus.CANCELLED.value,
                f"Cannot cancel order with status {self.status.value}. "
                f"Orders can only be cancelled when pending or confirmed.",
            )
        self.transition_to(OrderStatus.CANCELLED, now, actor_id)
        if reason:
            self.cancellation_reason = reason
        self._record_event(
            OrderCancelledEvent(
                order_id=self.id,
                order_number=str(self.order_number),
                actor_id=actor_id,
                reason=self.cancellation_reason or "",
            )
        )

    def ship(
        self,
        tracking_number: Optional[str],
        now: datetime,
        delivery_days: int,
        actor_id: Optional[str] = None,
    ) -> None:
        """Hand over to the carrier. Allowed from confirmed or processing."""
        if self.status not in SHIPPABLE_STATUSES:
            raise InvalidTransitionError(
                self.status.value,
                OrderStatus.SHIPPED.value,
                f"Cannot ship order with status {self.status.value}. "
                f"Order must be confirmed or processing.",
            )
        if not tracking_number or not tracking_number.strip():
            raise ValidationError("Tracking number is required", field="tracking_number")

        previous = self.status
        self.status = OrderStatus.SHIPPED
        self.tracking_number = tracking_number.strip()
        self.estimated_delivery = now + timedelta(days=delivery_days)
        self.updated_at = now

        self._record_status_change(previous, self.status, actor_id)
        self._record_event(
            OrderShippedEvent(
                order_id=self.id,
                order_number=str(self.order_number),
                actor_id=actor_id,
                tracking_number=self.tracking_number,
                estimated_delivery=self.estimated_delivery,
            )
        )

    def mark_delivered(self, now: datetime, actor_id: Optional[str] = None) -> None:
        """Buyer (or admin) confirms receipt."""
        if self.status != OrderStatus.SHIPPED:
            raise InvalidTransitionError(
                self.status.value,
                OrderStatus.DELIVERED.value,
                f"Cannot confirm delivery for order with status {self.status.value}. "
                f"Order must be shipped.",
            )
        self.transition_to(OrderStatus.DELIVERED, now, actor_id)
        self._record_event(
            OrderDeliveredEvent(
                order_id=self.id,
                order_number=str(self.order_number),
                actor_id=actor_id,
                delivered_at=self.delivered_at,
            )
        )

    def refund(self, now: datetime, note: str, actor_id: Optional[str] = None) -> bool:
        """
        Refund a delivered or cancelled order.

        Returns:
            True if the caller must restore stock. A cancelled order had
            its reservation compensated already.
        """
        if self.status not in REFUNDABLE_STATUSES:
            raise InvalidTransitionError(
                self.status.value,
                OrderStatus.REFUNDED.value,
                "Only delivered or cancelled orders can be refunded",
            )

        restore_stock = self.status != OrderStatus.CANCELLED
        previous = self.status
        self.status = OrderStatus.REFUNDED
        self.notes = note
        self.updated_at = now
        self._record_status_change(previous, self.status, actor_id)

        if self.payment_status != PaymentStatus.REFUNDED:
            self._set_payment_status(PaymentStatus.REFUNDED, None, now, actor_id)

        self._record_event(
            OrderRefundedEvent(
                order_id=self.id,
                order_number=str(self.order_number),
                actor_id=actor_id,
                amount=self.total_amount.amount,
                stock_restored=restore_stock,
            )
        )
        return restore_stock

    # =========================================================================
    # PAYMENT
    # =========================================================================

    def record_payment(
        self,
        payment_status: PaymentStatus,
        now: datetime,
        transaction_id: Optional[str] = None,
        actor_id: Optional[str] = None,
    ) -> None:
        """Apply a payment-provider result. Independent of order status."""
        payment_status = PaymentStatus(payment_status)
        if not can_update_payment_status(self.payment_status, payment_status):
            raise InvalidTransitionError(
                self.payment_status.value,
                payment_status.value,
                f"Cannot change payment status from {self.payment_status.value} "
                f"to {payment_status.value}",
            )
        self._set_payment_status(payment_status, transaction_id, now, actor_id)

    def _set_payment_status(
        self,
        payment_status: PaymentStatus,
        transaction_id: Optional[str],
        now: datetime,
        actor_id: Optional[str],
    ) -> None:
        previous = self.payment_status
        self.payment_status = payment_status
        if transaction_id:
            self.transaction_id = transaction_id
        self.updated_at = now
        self._record_event(
            PaymentStatusChangedEvent(
                order_id=self.id,
                order_number=str(self.order_number),
                actor_id=actor_id,
                previous_status=previous.value,
                new_status=payment_status.value,
                transaction_id=self.transaction_id,
            )
        )

    # =========================================================================
    # EVENT COLLECTION
    # =========================================================================

    def get_domain_events(self) -> List[DomainEvent]:
        """Get all domain events collected by this aggregate."""
        return list(self._domain_events)

    def clear_domain_events(self) -> None:
        """Clear all collected domain events (after publishing)."""
        self._domain_events.clear()

    def pull_domain_events(self) -> List[DomainEvent]:
        """Return collected events and clear them."""
        events = self.get_domain_events()
        self.clear_domain_events()
        return events

    def _record_status_change(
        self,
        previous_status: OrderStatus,
        new_status: OrderStatus,
        actor_id: Optional[str] = None,
    ) -> None:
        """Record OrderStatusChangedEvent when status changes."""
        self._record_event(
            OrderStatusChangedEvent(
                order_id=self.id,
                order_number=str(self.order_number),
                actor_id=actor_id,
                previous_status=previous_status.value,
                new_status=new_status.value,
            )
        )

    def _record_event(self, event: DomainEvent) -> None:
        self._domain_events.append(event)
