"""Domain enums."""
from .order_status import ActorRole, OrderStatus, PaymentMethod, PaymentStatus

__all__ = ["ActorRole", "OrderStatus", "PaymentMethod", "PaymentStatus"]
