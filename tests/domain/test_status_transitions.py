"""Tests for the order status state machine."""

import pytest

from yarnitt.domain.enums import OrderStatus, PaymentStatus
from yarnitt.domain.exceptions import InvalidTransitionError
from yarnitt.domain.services.status_transitions import (
    VALID_TRANSITIONS,
    assert_transition,
    can_cancel_order,
    can_update_payment_status,
    can_update_status,
)

ALLOWED = {
    ("pending", "confirmed"),
    ("pending", "cancelled"),
    ("confirmed", "processing"),
    ("confirmed", "cancelled"),
    ("processing", "shipped"),
    ("shipped", "delivered"),
    ("delivered", "refunded"),
}


@pytest.mark.parametrize("current", list(OrderStatus))
@pytest.mark.parametrize("new", list(OrderStatus))
def test_only_listed_transitions_are_valid(current, new):
    check = can_update_status(current, new)

    assert check.valid == ((current.value, new.value) in ALLOWED)
    if not check.valid:
        assert check.error == f"Cannot transition from {current.value} to {new.value}"


def test_table_matches_allowed_pairs():
    pairs = {(c.value, n.value) for c, targets in VALID_TRANSITIONS.items() for n in targets}

    assert pairs == ALLOWED


@pytest.mark.parametrize("status", [OrderStatus.CANCELLED, OrderStatus.REFUNDED])
def test_terminal_states_have_no_exits(status):
    assert VALID_TRANSITIONS[status] == frozenset()


def test_accepts_plain_strings():
    assert can_update_status("pending", "confirmed").valid
    assert not can_update_status("pending", "shipped").valid


def test_unknown_current_status():
    check = can_update_status("lost", "pending")

    assert not check.valid
    assert check.error == "Invalid current status"


def test_unknown_requested_status():
    check = can_update_status("pending", "teleported")

    assert not check.valid
    assert check.error == "Cannot transition from pending to teleported"


def test_assert_transition_raises_with_context():
    with pytest.raises(InvalidTransitionError) as exc_info:
        assert_transition(OrderStatus.SHIPPED, OrderStatus.CANCELLED)

    assert exc_info.value.current_status == "shipped"
    assert exc_info.value.requested_status == "cancelled"


@pytest.mark.parametrize(
    "status, expected",
    [
        (OrderStatus.PENDING, True),
        (OrderStatus.CONFIRMED, True),
        (OrderStatus.PROCESSING, False),
        (OrderStatus.SHIPPED, False),
        (OrderStatus.DELIVERED, False),
        (OrderStatus.CANCELLED, False),
        (OrderStatus.REFUNDED, False),
    ],
)
def test_buyer_cancellation_gate(status, expected):
    assert can_cancel_order(status) is expected


@pytest.mark.parametrize(
    "current, new, expected",
    [
        (PaymentStatus.PENDING, PaymentStatus.PAID, True),
        (PaymentStatus.PENDING, PaymentStatus.FAILED, True),
        (PaymentStatus.FAILED, PaymentStatus.PAID, True),
        (PaymentStatus.FAILED, PaymentStatus.PENDING, True),
        (PaymentStatus.PAID, PaymentStatus.REFUNDED, True),
        (PaymentStatus.PAID, PaymentStatus.PENDING, False),
        (PaymentStatus.PENDING, PaymentStatus.REFUNDED, False),
        (PaymentStatus.REFUNDED, PaymentStatus.PAID, False),
    ],
)
def test_payment_transitions(current, new, expected):
    assert can_update_payment_status(current, new) is expected
