"""
Order, payment and actor enums.

Values are stored verbatim in the database and returned by the API.
"""
from enum import Enum


class OrderStatus(str, Enum):
    """Order lifecycle status."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


class PaymentStatus(str, Enum):
    """Payment status, updated by payment-provider callbacks."""

    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"


class PaymentMethod(str, Enum):
    """Supported payment methods."""

    MPESA = "mpesa"
    PAYPAL = "paypal"
    CARD = "card"
    PENDING = "pending"


class ActorRole(str, Enum):
    """Role of the account performing an operation."""

    BUYER = "buyer"
    SELLER = "seller"
    ADMIN = "admin"
