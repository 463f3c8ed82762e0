"""Pure domain services."""
from .commission import CommissionCalculator, CommissionSplit, calculate_commission
from .order_numbers import CreatedTodaySequence, OrderNumberGenerator, day_bounds, utc_now
from .status_transitions import (
    TransitionCheck,
    assert_transition,
    can_cancel_order,
    can_update_payment_status,
    can_update_status,
)

__all__ = [
    "CommissionCalculator",
    "CommissionSplit",
    "CreatedTodaySequence",
    "OrderNumberGenerator",
    "TransitionCheck",
    "assert_transition",
    "calculate_commission",
    "can_cancel_order",
    "can_update_payment_status",
    "can_update_status",
    "day_bounds",
    "utc_now",
]
