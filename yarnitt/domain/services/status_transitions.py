"""
Order status state machine.

    pending    -> confirmed, cancelled
    confirmed  -> processing, cancelled
    processing -> shipped
    shipped    -> delivered
    delivered  -> refunded
    cancelled, refunded: terminal
"""
from dataclasses import dataclass
from typing import Dict, FrozenSet, Optional, Union

from ..enums import OrderStatus, PaymentStatus
from ..exceptions import InvalidTransitionError

StatusLike = Union[OrderStatus, str]

VALID_TRANSITIONS: Dict[OrderStatus, FrozenSet[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.CONFIRMED, OrderStatus.CANCELLED}),
    OrderStatus.CONFIRMED: frozenset({OrderStatus.PROCESSING, OrderStatus.CANCELLED}),
    OrderStatus.PROCESSING: frozenset({OrderStatus.SHIPPED}),
    OrderStatus.SHIPPED: frozenset({OrderStatus.DELIVERED}),
    OrderStatus.DELIVERED: frozenset({OrderStatus.REFUNDED}),
    OrderStatus.CANCELLED: frozenset(),
    OrderStatus.REFUNDED: frozenset(),
}

CANCELLABLE_STATUSES = frozenset({OrderStatus.PENDING, OrderStatus.CONFIRMED})
SHIPPABLE_STATUSES = frozenset({OrderStatus.CONFIRMED, OrderStatus.PROCESSING})
REFUNDABLE_STATUSES = frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED})

PAYMENT_TRANSITIONS: Dict[PaymentStatus, FrozenSet[PaymentStatus]] = {
    PaymentStatus.PENDING: frozenset({PaymentStatus.PAID, PaymentStatus.FAILED}),
    PaymentStatus.FAILED: frozenset({PaymentStatus.PENDING, PaymentStatus.PAID}),
    PaymentStatus.PAID: frozenset({PaymentStatus.REFUNDED}),
    PaymentStatus.REFUNDED: frozenset(),
}


@dataclass(frozen=True)
class TransitionCheck:
    """Result of a transition check."""
    valid: bool
    error: Optional[str] = None


def _coerce(status: StatusLike) -> Optional[OrderStatus]:
    try:
        return OrderStatus(status)
    except ValueError:
        return None


def _label(status: StatusLike) -> str:
    return status.value if isinstance(status, OrderStatus) else str(status)


def can_update_status(current: StatusLike, new: StatusLike) -> TransitionCheck:
    """
    Validate a status transition against the transition table.

    Identity transitions and anything not listed are rejected.
    No side effects.
    """
    current_status = _coerce(current)
    if current_status is None:
        return TransitionCheck(valid=False, error="Invalid current status")

    new_status = _coerce(new)
    if new_status is None or new_status not in VALID_TRANSITIONS[current_status]:
        return TransitionCheck(
            valid=False,
            error=f"Cannot transition from {_label(current)} to {_label(new)}",
        )

    return TransitionCheck(valid=True)


def assert_transition(current: StatusLike, new: StatusLike) -> None:
    """Raise InvalidTransitionError unless current -> new is allowed."""
    check = can_update_status(current, new)
    if not check.valid:
        raise InvalidTransitionError(_label(current), _label(new), check.error)


def can_cancel_order(status: StatusLike) -> bool:
    """Buyer-initiated cancellation is only allowed before processing starts."""
    return _coerce(status) in CANCELLABLE_STATUSES


def can_update_payment_status(current: PaymentStatus, new: PaymentStatus) -> bool:
    return new in PAYMENT_TRANSITIONS.get(current, frozenset())
