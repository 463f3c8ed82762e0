"""Shared fixtures: fixed clock, actors, catalog seeding and in-memory services."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Callable, Optional

import pytest

from yarnitt.application.dtos.order_dto import (
    CreateOrderRequest,
    OrderItemInput,
    ShippingAddressDTO,
)
from yarnitt.application.services import OrderLifecycleService, OrderQueryService
from yarnitt.domain.entities import Product
from yarnitt.domain.enums import ActorRole
from yarnitt.domain.value_objects import Actor, Money
from yarnitt.infrastructure.adapters.persistence import InMemoryStore
from yarnitt.infrastructure.event_bus import InMemoryEventBus
from yarnitt.settings import OrderSettings


class FixedClock:
    """Controllable clock for deterministic order numbers and timestamps."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


def make_product(
    product_id: str = "prod-1",
    seller_id: str = "seller-1",
    price: str = "100.00",
    stock: int = 10,
    sold: int = 0,
    name: Optional[str] = None,
) -> Product:
    return Product(
        id=product_id,
        seller_id=seller_id,
        name=name or f"Yarn {product_id}",
        price=Money(Decimal(price)),
        stock=stock,
        sold=sold,
    )


def make_order_request(*items, payment_method: str = "mpesa", **address) -> CreateOrderRequest:
    """Build a CreateOrderRequest from (product_id, quantity) pairs."""
    shipping = {
        "full_name": "Wanjiru Kamau",
        "phone": "+254700000000",
        "address": "12 Moi Avenue",
        "city": "Nairobi",
        "country": "Kenya",
    }
    shipping.update(address)
    return CreateOrderRequest(
        items=[OrderItemInput(product_id=pid, quantity=qty) for pid, qty in items],
        shipping_address=ShippingAddressDTO(**shipping),
        payment_method=payment_method,
    )


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc))


@pytest.fixture
def buyer() -> Actor:
    return Actor(id="buyer-1", role=ActorRole.BUYER)


@pytest.fixture
def other_buyer() -> Actor:
    return Actor(id="buyer-2", role=ActorRole.BUYER)


@pytest.fixture
def seller() -> Actor:
    return Actor(id="seller-1", role=ActorRole.SELLER)


@pytest.fixture
def other_seller() -> Actor:
    return Actor(id="seller-2", role=ActorRole.SELLER)


@pytest.fixture
def admin() -> Actor:
    return Actor(id="admin-1", role=ActorRole.ADMIN)


@pytest.fixture
def store() -> InMemoryStore:
    store = InMemoryStore()
    store.seed_products([
        make_product("prod-1", price="100.00", stock=10),
        make_product("prod-2", price="49.99", stock=3),
        make_product("prod-9", seller_id="seller-2", price="10.00", stock=50),
    ])
    return store


@pytest.fixture
def event_bus() -> InMemoryEventBus:
    return InMemoryEventBus()


@pytest.fixture
def order_settings() -> OrderSettings:
    return OrderSettings(
        commission_rate=Decimal("0.10"),
        default_delivery_days=7,
        timezone="UTC",
        number_strategy="counter",
    )


@pytest.fixture
def service(store, event_bus, order_settings, clock) -> OrderLifecycleService:
    return OrderLifecycleService(
        store.unit_of_work,
        event_bus=event_bus,
        settings=order_settings,
        clock=clock,
    )


@pytest.fixture
def query_service(store) -> OrderQueryService:
    return OrderQueryService(store.unit_of_work)


@pytest.fixture
def order_request() -> Callable[..., CreateOrderRequest]:
    return make_order_request


@pytest.fixture
def product_factory() -> Callable[..., Product]:
    return make_product
