"""Static mappers for domain entities ↔ database models."""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Optional

from yarnitt.domain.entities import Order, OrderItem, Product
from yarnitt.domain.enums import OrderStatus, PaymentMethod, PaymentStatus
from yarnitt.domain.value_objects import Money, OrderNumber, ShippingAddress

from .models import OrderItemModel, OrderModel, ProductModel


def to_db_datetime(value: Optional[datetime]) -> Optional[datetime]:
    """Aware datetime -> naive UTC for storage."""
    if value is None:
        return None
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def from_db_datetime(value: Optional[datetime]) -> Optional[datetime]:
    """Stored naive UTC -> aware UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _money(amount: Any, currency: str) -> Money:
    return Money(amount=Decimal(str(amount)), currency=currency).quantize()


class ProductMapper:
    """Static mapper for Product ↔ ProductModel transformation."""

    @staticmethod
    def to_domain(model: ProductModel) -> Product:
        return Product(
            id=model.id,
            seller_id=model.seller_id,
            name=model.name,
            price=_money(model.price_amount, model.price_currency),
            stock=model.stock,
            sold=model.sold,
        )

    @staticmethod
    def to_persistence(entity: Product) -> ProductModel:
        return ProductModel(
            id=entity.id,
            seller_id=entity.seller_id,
            name=entity.name,
            price_amount=entity.price.amount,
            price_currency=entity.price.currency,
            stock=entity.stock,
            sold=entity.sold,
        )


class OrderItemMapper:
    """Static mapper for OrderItem ↔ OrderItemModel transformation."""

    @staticmethod
    def to_domain(model: OrderItemModel) -> OrderItem:
        return OrderItem(
            product_id=model.product_id,
            quantity=model.quantity,
            price_at_purchase=_money(model.price_amount, model.price_currency),
            customization=model.customization,
        )

    @staticmethod
    def to_persistence(entity: OrderItem, order_id: str, position: int) -> OrderItemModel:
        return OrderItemModel(
            order_id=order_id,
            position=position,
            product_id=entity.product_id,
            quantity=entity.quantity,
            price_amount=entity.price_at_purchase.amount,
            price_currency=entity.price_at_purchase.currency,
            customization=entity.customization,
        )


class OrderMapper:
    """Static mapper for Order ↔ OrderModel transformation with nested items."""

    @staticmethod
    def to_domain(model: OrderModel) -> Order:
        """Convert ORM model to domain aggregate (with nested items).

        Args:
            model: OrderModel instance with items loaded

        Returns:
            Order domain aggregate (no pending events)
        """
        items = [OrderItemMapper.to_domain(item_model) for item_model in model.items]

        return Order(
            id=model.id,
            order_number=OrderNumber(value=model.order_number),
            buyer_id=model.buyer_id,
            seller_id=model.seller_id,
            items=items,
            shipping_address=ShippingAddress(
                full_name=model.shipping_full_name,
                phone=model.shipping_phone,
                address=model.shipping_address,
                city=model.shipping_city,
                country=model.shipping_country,
                postal_code=model.shipping_postal_code,
            ),
            total_amount=_money(model.total_amount, model.currency),
            commission=_money(model.commission, model.currency),
            seller_earnings=_money(model.seller_earnings, model.currency),
            status=OrderStatus(model.status),
            payment_method=PaymentMethod(model.payment_method),
            payment_status=PaymentStatus(model.payment_status),
            transaction_id=model.transaction_id,
            tracking_number=model.tracking_number,
            estimated_delivery=from_db_datetime(model.estimated_delivery),
            delivered_at=from_db_datetime(model.delivered_at),
            cancelled_at=from_db_datetime(model.cancelled_at),
            cancellation_reason=model.cancellation_reason,
            notes=model.notes,
            created_at=from_db_datetime(model.created_at),
            updated_at=from_db_datetime(model.updated_at),
            version=model.version,
        )

    @staticmethod
    def to_persistence(entity: Order) -> OrderModel:
        """Convert domain aggregate to ORM model (with nested items)."""
        address = entity.shipping_address
        order_model = OrderModel(
            id=entity.id,
            order_number=str(entity.order_number),
            buyer_id=entity.buyer_id,
            seller_id=entity.seller_id,
            total_amount=entity.total_amount.amount,
            commission=entity.commission.amount,
            seller_earnings=entity.seller_earnings.amount,
            currency=entity.total_amount.currency,
            shipping_full_name=address.full_name,
            shipping_phone=address.phone,
            shipping_address=address.address,
            shipping_city=address.city,
            shipping_country=address.country,
            shipping_postal_code=address.postal_code,
            created_at=to_db_datetime(entity.created_at),
            version=entity.version,
            **OrderMapper.mutable_values(entity),
        )

        order_model.items = [
            OrderItemMapper.to_persistence(item, entity.id, position)
            for position, item in enumerate(entity.items)
        ]

        return order_model

    @staticmethod
    def mutable_values(entity: Order) -> Dict[str, Any]:
        """Columns a lifecycle operation may change after placement."""
        return {
            "status": entity.status.value,
            "payment_method": entity.payment_method.value,
            "payment_status": entity.payment_status.value,
            "transaction_id": entity.transaction_id,
            "tracking_number": entity.tracking_number,
            "estimated_delivery": to_db_datetime(entity.estimated_delivery),
            "delivered_at": to_db_datetime(entity.delivered_at),
            "cancelled_at": to_db_datetime(entity.cancelled_at),
            "cancellation_reason": entity.cancellation_reason,
            "notes": entity.notes,
            "updated_at": to_db_datetime(entity.updated_at),
        }
