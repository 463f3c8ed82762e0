"""Application services."""
from .order_query_service import OrderQueryService
from .order_service import OrderLifecycleService

__all__ = ["OrderLifecycleService", "OrderQueryService"]
