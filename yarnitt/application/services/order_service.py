"""Application service for the order lifecycle."""

import logging
from collections import OrderedDict
from typing import Callable, Dict, Iterable, Optional
from uuid import uuid4

from yarnitt.application.dtos.order_dto import CreateOrderRequest, OrderDTO, ShippingAddressDTO
from yarnitt.application.interfaces import AbstractUnitOfWork, UnitOfWorkFactory
from yarnitt.domain.constants import DEFAULT_CANCELLATION_REASON, DEFAULT_REFUND_NOTE
from yarnitt.domain.entities import Order, OrderItem, Product
from yarnitt.domain.enums import OrderStatus, PaymentMethod, PaymentStatus
from yarnitt.domain.event_bus import EventBus
from yarnitt.domain.exceptions import (
    AuthorizationError,
    InsufficientStockError,
    NotFoundError,
    ValidationError,
)
from yarnitt.domain.services import (
    CommissionCalculator,
    CreatedTodaySequence,
    OrderNumberGenerator,
    assert_transition,
    utc_now,
)
from yarnitt.domain.services.order_numbers import Clock
from yarnitt.domain.value_objects import Actor, ShippingAddress
from yarnitt.settings import OrderSettings

logger = logging.getLogger(__name__)


def _new_order_id() -> str:
    return str(uuid4())


class OrderLifecycleService:
    """
    Orchestrates order placement and every later status change.

    Responsibilities:
    - Authorize the actor against the order
    - Run each operation inside one unit of work (all writes or none)
    - Keep product stock consistent with live orders
    - Publish domain events after a successful commit
    """

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        event_bus: Optional[EventBus] = None,
        settings: Optional[OrderSettings] = None,
        clock: Clock = utc_now,
        id_factory: Callable[[], str] = _new_order_id,
    ) -> None:
        """Initialize order lifecycle service.

        Args:
            uow_factory: Callable returning a fresh unit of work
            event_bus: Where committed domain events are published
            settings: Commission rate, delivery days, timezone, numbering
            clock: Returns the current aware datetime
            id_factory: Generates order ids
        """
        self._uow_factory = uow_factory
        self._event_bus = event_bus
        self._settings = settings or OrderSettings()
        self._clock = clock
        self._id_factory = id_factory
        self._calculator = CommissionCalculator(self._settings.commission_rate)

    # =========================================================================
    # PLACEMENT
    # =========================================================================

    async def create_order(self, actor: Actor, request: CreateOrderRequest) -> OrderDTO:
        """Place a new order and reserve its stock.

        Args:
            actor: Buying account
            request: Items, shipping address and payment method

        Returns:
            OrderDTO of the pending order

        Raises:
            ValidationError: Malformed items or address, mixed sellers or currencies
            NotFoundError: Unknown product ids
            InsufficientStockError: A product cannot cover the quantity
            ConflictError: Order number collision (retryable)
        """
        if not request.items:
            raise ValidationError("Items array is required and must not be empty", field="items")
        for item in request.items:
            if not item.product_id:
                raise ValidationError("Invalid product ID in items", field="items.product_id")
            if item.quantity < 1:
                raise ValidationError("Item quantity must be at least 1", field="items.quantity")

        shipping_address = self._build_address(request.shipping_address)
        payment_method = self._parse_payment_method(request.payment_method)

        # Combined quantity per product, first-seen order
        requested: Dict[str, int] = OrderedDict()
        for item in request.items:
            requested[item.product_id] = requested.get(item.product_id, 0) + item.quantity

        async with self._uow_factory() as uow:
            products = await uow.products.find_many_by_ids(list(requested))
            by_id = {product.id: product for product in products}

            missing = [product_id for product_id in requested if product_id not in by_id]
            if missing:
                raise NotFoundError("Product", missing)

            seller_id = self._single_seller(by_id.values())
            self._require_order_currency(by_id.values())

            for product_id, quantity in requested.items():
                product = by_id[product_id]
                if not product.has_stock(quantity):
                    raise InsufficientStockError(product_id, product.stock, quantity, product.name)

            order_items = [
                OrderItem(
                    product_id=item.product_id,
                    quantity=item.quantity,
                    price_at_purchase=by_id[item.product_id].price,
                    customization=item.customization,
                )
                for item in request.items
            ]

            order_number = await self._number_generator(uow).generate()
            order = Order.place(
                order_id=self._id_factory(),
                order_number=order_number,
                buyer_id=actor.id,
                seller_id=seller_id,
                items=order_items,
                shipping_address=shipping_address,
                payment_method=payment_method,
                calculator=self._calculator,
                now=self._clock(),
            )
            order = await uow.orders.create(order)

            for product_id, quantity in requested.items():
                reserved = await uow.products.conditional_decrement_stock(product_id, quantity)
                if reserved is None:
                    # Lost the race against a concurrent reservation
                    current = await uow.products.find_by_id(product_id)
                    available = current.stock if current else 0
                    raise InsufficientStockError(product_id, available, quantity, by_id[product_id].name)

            await uow.commit()

        logger.info(
            f"Order {order.order_number} placed by {actor.id} "
            f"(seller={order.seller_id} total={order.total_amount})"
        )
        await self._publish(order)
        return OrderDTO.from_entity(order)

    # =========================================================================
    # STATUS CHANGES
    # =========================================================================

    async def update_status(self, order_id: str, requested_status: str, actor: Actor) -> OrderDTO:
        """Generic seller/admin status change along the transition table.

        Moving to cancelled or refunded compensates the stock reservation.
        """
        new_status = self._parse_status(requested_status)

        async with self._uow_factory() as uow:
            order = await self._load(uow, order_id)
            self._require_seller_or_admin(order, actor, "update_status")
            assert_transition(order.status, new_status)

            expected_version = order.version
            now = self._clock()
            restore_stock = False
            if new_status == OrderStatus.CANCELLED:
                order.cancel(now, actor_id=actor.id)
                restore_stock = True
            elif new_status == OrderStatus.REFUNDED:
                restore_stock = order.refund(now, DEFAULT_REFUND_NOTE, actor.id)
            else:
                order.transition_to(new_status, now, actor.id)

            order = await uow.orders.save(order, expected_version)
            if restore_stock:
                await self._restore_stock(uow, order)
            await uow.commit()

        logger.info(f"Order {order.order_number} status -> {order.status.value} by {actor}")
        await self._publish(order)
        return OrderDTO.from_entity(order)

    async def confirm_order(self, order_id: str, actor: Actor) -> OrderDTO:
        """Seller accepts a pending order."""
        async with self._uow_factory() as uow:
            order = await self._load(uow, order_id)
            self._require_seller_or_admin(order, actor, "confirm")

            expected_version = order.version
            order.confirm(self._clock(), actor.id)
            order = await uow.orders.save(order, expected_version)
            await uow.commit()

        logger.info(f"Order {order.order_number} confirmed by {actor}")
        await self._publish(order)
        return OrderDTO.from_entity(order)

    async def cancel_order(self, order_id: str, actor: Actor, reason: Optional[str] = None) -> OrderDTO:
        """Buyer (or admin) cancels a pending or confirmed order.

        Raises:
            AuthorizationError: Actor is neither the buyer nor an admin
            InvalidTransitionError: Order is past confirmed
        """
        async with self._uow_factory() as uow:
            order = await self._load(uow, order_id)
            if not (actor.is_admin or order.is_buyer(actor)):
                raise AuthorizationError(
                    "Only the buyer can cancel this order", actor_id=actor.id, action="cancel"
                )

            expected_version = order.version
            order.cancel(self._clock(), reason or DEFAULT_CANCELLATION_REASON, actor.id)
            order = await uow.orders.save(order, expected_version)
            await self._restore_stock(uow, order)
            await uow.commit()

        logger.info(f"Order {order.order_number} cancelled by {actor}: {order.cancellation_reason}")
        await self._publish(order)
        return OrderDTO.from_entity(order)

    async def ship_order(self, order_id: str, actor: Actor, tracking_number: Optional[str]) -> OrderDTO:
        """Mark a confirmed or processing order as shipped."""
        async with self._uow_factory() as uow:
            order = await self._load(uow, order_id)
            self._require_seller_or_admin(order, actor, "ship")

            expected_version = order.version
            order.ship(
                tracking_number,
                self._clock(),
                self._settings.default_delivery_days,
                actor.id,
            )
            order = await uow.orders.save(order, expected_version)
            await uow.commit()

        logger.info(f"Order {order.order_number} shipped (tracking={order.tracking_number})")
        await self._publish(order)
        return OrderDTO.from_entity(order)

    async def confirm_delivery(self, order_id: str, actor: Actor) -> OrderDTO:
        """Buyer (or admin) confirms receipt of a shipped order."""
        async with self._uow_factory() as uow:
            order = await self._load(uow, order_id)
            if not (actor.is_admin or order.is_buyer(actor)):
                raise AuthorizationError(
                    "Only the buyer can confirm delivery", actor_id=actor.id, action="confirm_delivery"
                )

            expected_version = order.version
            order.mark_delivered(self._clock(), actor.id)
            order = await uow.orders.save(order, expected_version)
            await uow.commit()

        logger.info(f"Order {order.order_number} delivered")
        await self._publish(order)
        return OrderDTO.from_entity(order)

    async def refund_order(self, order_id: str, actor: Actor, reason: Optional[str] = None) -> OrderDTO:
        """Admin refund of a delivered or cancelled order."""
        if not actor.is_admin:
            raise AuthorizationError("Only admins can refund orders", actor_id=actor.id, action="refund")

        async with self._uow_factory() as uow:
            order = await self._load(uow, order_id)

            expected_version = order.version
            restore_stock = order.refund(self._clock(), reason or DEFAULT_REFUND_NOTE, actor.id)
            order = await uow.orders.save(order, expected_version)
            if restore_stock:
                await self._restore_stock(uow, order)
            await uow.commit()

        logger.info(f"Order {order.order_number} refunded (stock_restored={restore_stock})")
        await self._publish(order)
        return OrderDTO.from_entity(order)

    async def record_payment(
        self,
        order_id: str,
        payment_status: str,
        actor: Actor,
        transaction_id: Optional[str] = None,
    ) -> OrderDTO:
        """Apply a payment-provider callback result."""
        if not actor.is_admin:
            raise AuthorizationError(
                "Only the payment system can record payments", actor_id=actor.id, action="record_payment"
            )
        try:
            status = PaymentStatus(payment_status)
        except ValueError:
            raise ValidationError(
                f"Invalid payment status: {payment_status}", field="payment_status"
            ) from None

        async with self._uow_factory() as uow:
            order = await self._load(uow, order_id)

            expected_version = order.version
            order.record_payment(status, self._clock(), transaction_id, actor.id)
            order = await uow.orders.save(order, expected_version)
            await uow.commit()

        logger.info(f"Order {order.order_number} payment -> {order.payment_status.value}")
        await self._publish(order)
        return OrderDTO.from_entity(order)

    # =========================================================================
    # HELPERS
    # =========================================================================

    def _number_generator(self, uow: AbstractUnitOfWork) -> OrderNumberGenerator:
        tz = self._settings.tzinfo
        if self._settings.number_strategy == "count":
            sequence = CreatedTodaySequence(uow.orders, tz)
        else:
            sequence = uow.counters
        return OrderNumberGenerator(sequence, clock=self._clock, tz=tz)

    async def _load(self, uow: AbstractUnitOfWork, order_id: str) -> Order:
        order = await uow.orders.find_by_id(order_id)
        if order is None:
            raise NotFoundError("Order", order_id)
        return order

    async def _restore_stock(self, uow: AbstractUnitOfWork, order: Order) -> None:
        for item in order.items:
            await uow.products.increment_stock(item.product_id, item.quantity)

    async def _publish(self, order: Order) -> None:
        events = order.pull_domain_events()
        if self._event_bus is None or not events:
            return
        # Order is already committed; publish failures are logged only
        try:
            await self._event_bus.publish_all(events)
        except Exception as e:
            logger.warning(f"Failed to publish {len(events)} event(s) for order {order.order_number}: {e}")

    @staticmethod
    def _require_seller_or_admin(order: Order, actor: Actor, action: str) -> None:
        if not (actor.is_admin or order.is_seller(actor)):
            raise AuthorizationError(
                "Only the seller of this order can perform this action",
                actor_id=actor.id,
                action=action,
            )

    @staticmethod
    def _single_seller(products: Iterable[Product]) -> str:
        seller_ids = sorted({product.seller_id for product in products})
        if len(seller_ids) != 1:
            raise ValidationError(
                "All items in an order must belong to the same seller",
                field="items",
                details={"seller_ids": seller_ids},
            )
        return seller_ids[0]

    def _require_order_currency(self, products: Iterable[Product]) -> None:
        currencies = sorted({product.price.currency for product in products})
        if currencies != [self._settings.currency]:
            raise ValidationError(
                f"All items in an order must be priced in {self._settings.currency}",
                field="items",
                details={"currencies": currencies, "expected_currency": self._settings.currency},
            )

    @staticmethod
    def _build_address(dto: Optional[ShippingAddressDTO]) -> ShippingAddress:
        if dto is None:
            raise ValidationError("Shipping address is required", field="shipping_address")
        return ShippingAddress(
            full_name=dto.full_name or "",
            phone=dto.phone or "",
            address=dto.address or "",
            city=dto.city or "",
            country=dto.country or "",
            postal_code=dto.postal_code,
        )

    @staticmethod
    def _parse_payment_method(value: str) -> PaymentMethod:
        try:
            return PaymentMethod(value)
        except ValueError:
            raise ValidationError(
                f"Invalid payment method: {value}", field="payment_method"
            ) from None

    @staticmethod
    def _parse_status(value: str) -> OrderStatus:
        try:
            return OrderStatus(value)
        except ValueError:
            raise ValidationError("Invalid status value", field="status") from None
