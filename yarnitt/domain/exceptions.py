"""
Domain error taxonomy.

Every error carries a machine-readable ``code``, a human-readable message
and a ``details`` dict with the structured values a caller needs to react
(product ids, current vs requested status, ...).

CRITICAL: This file must contain ZERO imports from:
- sqlalchemy
- pydantic
- fastapi
"""
from typing import Any, Dict, Optional


class OrderError(Exception):
    """Base class for all order lifecycle errors."""

    code: str = "order_error"
    retryable: bool = False

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details: Dict[str, Any] = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Serialize error for transport layers and logs."""
        return {
            "error": self.code,
            "detail": self.message,
            "retryable": self.retryable,
            **self.details,
        }


class ValidationError(OrderError, ValueError):
    """Client-correctable input problem. Operation was not attempted."""

    code = "validation_error"

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        details = dict(details or {})
        if field is not None:
            details.setdefault("field", field)
        super().__init__(message, details)
        self.field = field


class InsufficientStockError(ValidationError):
    """Product does not hold enough stock for the requested quantity."""

    code = "insufficient_stock"

    def __init__(self, product_id: str, available: int, requested: int, product_name: str = ""):
        label = product_name or product_id
        super().__init__(
            f"Insufficient stock for product {label}. "
            f"Available: {available}, Requested: {requested}",
            field="items",
            details={
                "product_id": product_id,
                "available": available,
                "requested": requested,
            },
        )
        self.product_id = product_id
        self.available = available
        self.requested = requested


class NotFoundError(OrderError):
    """Referenced order or product does not exist."""

    code = "not_found"

    def __init__(self, resource: str, resource_id: Any):
        ids = resource_id if isinstance(resource_id, (list, tuple)) else [resource_id]
        super().__init__(
            f"{resource} not found: {', '.join(str(i) for i in ids)}",
            details={"resource": resource, "resource_id": resource_id},
        )
        self.resource = resource
        self.resource_id = resource_id


class InvalidTransitionError(OrderError):
    """Order status guard rejected the requested change."""

    code = "invalid_transition"

    def __init__(self, current_status: str, requested_status: str, message: Optional[str] = None):
        super().__init__(
            message or f"Cannot transition from {current_status} to {requested_status}",
            details={
                "current_status": current_status,
                "requested_status": requested_status,
            },
        )
        self.current_status = current_status
        self.requested_status = requested_status


class AuthorizationError(OrderError):
    """Actor lacks permission for the operation."""

    code = "forbidden"

    def __init__(self, message: str, actor_id: Optional[str] = None, action: Optional[str] = None):
        super().__init__(message, details={"actor_id": actor_id, "action": action})
        self.actor_id = actor_id
        self.action = action


class ConflictError(OrderError):
    """
    Concurrent write lost a race.

    Raised for order-number collisions and lost compare-and-swap updates.
    Callers may retry the whole operation from scratch.
    """

    code = "conflict"
    retryable = True


class PersistenceError(OrderError):
    """Transient storage failure. No partial state is observable."""

    code = "persistence_error"
    retryable = True
