"""SQLAlchemy ORM models for Order aggregate."""

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from .base import Base


class OrderModel(Base):
    """
    SQLAlchemy ORM model for orders table.

    All datetimes are stored as naive UTC.
    """

    __tablename__ = "orders"

    id = Column(String(36), primary_key=True)
    order_number = Column(String(32), unique=True, nullable=False, index=True)
    buyer_id = Column(String(64), nullable=False, index=True)
    seller_id = Column(String(64), nullable=False, index=True)

    # Money
    total_amount = Column(Numeric(12, 2), nullable=False)
    commission = Column(Numeric(12, 2), nullable=False)
    seller_earnings = Column(Numeric(12, 2), nullable=False)
    currency = Column(String(3), nullable=False, default="KES")

    # Status
    status = Column(String(20), nullable=False, default="pending", index=True)
    payment_method = Column(String(20), nullable=False, default="pending")
    payment_status = Column(String(20), nullable=False, default="pending")
    transaction_id = Column(String(255), nullable=True)

    # Shipping address (embedded)
    shipping_full_name = Column(String(255), nullable=False)
    shipping_phone = Column(String(50), nullable=False)
    shipping_address = Column(String(500), nullable=False)
    shipping_city = Column(String(100), nullable=False)
    shipping_country = Column(String(100), nullable=False)
    shipping_postal_code = Column(String(20), nullable=True)

    # Fulfilment
    tracking_number = Column(String(255), nullable=True)
    estimated_delivery = Column(DateTime, nullable=True)
    delivered_at = Column(DateTime, nullable=True)
    cancelled_at = Column(DateTime, nullable=True)
    cancellation_reason = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, nullable=False, index=True)
    updated_at = Column(DateTime, nullable=False)

    # Optimistic concurrency token
    version = Column(Integer, nullable=False, default=0)

    items = relationship(
        "OrderItemModel",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItemModel.position",
        lazy="selectin",
    )


class OrderItemModel(Base):
    """SQLAlchemy ORM model for order_items table."""

    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(String(36), ForeignKey("orders.id"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    product_id = Column(String(36), nullable=False, index=True)
    quantity = Column(Integer, nullable=False)
    price_amount = Column(Numeric(12, 2), nullable=False)
    price_currency = Column(String(3), nullable=False, default="KES")
    customization = Column(Text, nullable=True)

    order = relationship("OrderModel", back_populates="items")


class OrderCounterModel(Base):
    """Per-day order number counter (one row per calendar day)."""

    __tablename__ = "order_counters"

    day = Column(Date, primary_key=True)
    value = Column(Integer, nullable=False, default=0)
