"""Tests for OrderQueryService: visibility, listings, pagination and stats."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest
import pytest_asyncio

from yarnitt.application.dtos.order_dto import OrderFiltersRequest
from yarnitt.domain.exceptions import AuthorizationError, NotFoundError, ValidationError


@pytest_asyncio.fixture
async def placed(service, clock, buyer, other_buyer, order_request):
    """Four orders for seller-1 and one for seller-2, a minute apart."""
    orders = []
    orders.append(await service.create_order(buyer, order_request(("prod-1", 2))))
    clock.advance(minutes=1)
    orders.append(await service.create_order(buyer, order_request(("prod-2", 1))))
    clock.advance(minutes=1)
    orders.append(await service.create_order(other_buyer, order_request(("prod-1", 1))))
    clock.advance(minutes=1)
    orders.append(await service.create_order(buyer, order_request(("prod-9", 5))))
    clock.advance(minutes=1)
    cancelled = await service.create_order(other_buyer, order_request(("prod-1", 1)))
    orders.append(await service.cancel_order(cancelled.id, other_buyer))
    return orders


@pytest.mark.asyncio
async def test_get_order_visible_to_participants(query_service, placed, buyer, seller, admin):
    order = placed[0]

    for actor in (buyer, seller, admin):
        found = await query_service.get_order(order.id, actor)
        assert found.order_number == order.order_number


@pytest.mark.asyncio
async def test_get_order_hidden_from_strangers(query_service, placed, other_buyer, other_seller):
    with pytest.raises(AuthorizationError):
        await query_service.get_order(placed[0].id, other_buyer)
    with pytest.raises(AuthorizationError):
        await query_service.get_order(placed[0].id, other_seller)


@pytest.mark.asyncio
async def test_get_unknown_order(query_service, buyer):
    with pytest.raises(NotFoundError):
        await query_service.get_order("nope", buyer)


@pytest.mark.asyncio
async def test_buyer_listing_newest_first(query_service, placed, buyer):
    result = await query_service.list_buyer_orders(buyer)

    assert [o.order_number for o in result.orders] == [
        "ORD-20240115-004",
        "ORD-20240115-002",
        "ORD-20240115-001",
    ]
    assert result.pagination.total == 3
    assert result.pagination.pages == 1
    assert result.stats is None


@pytest.mark.asyncio
async def test_buyer_listing_filtered_by_status(query_service, placed, other_buyer):
    result = await query_service.list_buyer_orders(
        other_buyer, OrderFiltersRequest(status="cancelled")
    )

    assert [o.status for o in result.orders] == ["cancelled"]


@pytest.mark.asyncio
async def test_invalid_status_filter(query_service, buyer):
    with pytest.raises(ValidationError):
        await query_service.list_buyer_orders(buyer, OrderFiltersRequest(status="lost"))


@pytest.mark.asyncio
async def test_seller_listing_includes_summary(query_service, placed, seller):
    result = await query_service.list_seller_orders(seller)

    assert result.pagination.total == 4
    assert result.stats.total_orders == 4
    assert result.stats.pending_orders == 3
    # 180.00 + 44.99 + 90.00 + 90.00
    assert result.stats.total_revenue == Decimal("404.99")


@pytest.mark.asyncio
async def test_seller_listing_paginates(query_service, placed, seller):
    first = await query_service.list_seller_orders(seller, OrderFiltersRequest(page=1, limit=3))
    second = await query_service.list_seller_orders(seller, OrderFiltersRequest(page=2, limit=3))

    assert len(first.orders) == 3
    assert len(second.orders) == 1
    assert first.pagination.pages == 2
    assert second.orders[0].order_number == "ORD-20240115-001"


@pytest.mark.asyncio
async def test_search_by_order_number(query_service, placed, admin):
    result = await query_service.list_all_orders(admin, OrderFiltersRequest(search=" ord-20240115-003 "))

    assert [o.order_number for o in result.orders] == ["ORD-20240115-003"]


@pytest.mark.asyncio
async def test_date_window_filter(query_service, placed, admin):
    result = await query_service.list_all_orders(
        admin,
        OrderFiltersRequest(
            start_date=datetime(2024, 1, 15, 10, 31),
            end_date=datetime(2024, 1, 15, 10, 33, tzinfo=timezone.utc),
        ),
    )

    assert sorted(o.order_number for o in result.orders) == [
        "ORD-20240115-002",
        "ORD-20240115-003",
        "ORD-20240115-004",
    ]


@pytest.mark.asyncio
async def test_all_orders_admin_only(query_service, seller):
    with pytest.raises(AuthorizationError):
        await query_service.list_all_orders(seller)


@pytest.mark.asyncio
async def test_stats(query_service, placed, admin):
    stats = await query_service.get_order_stats(admin)

    assert stats.total_orders == 5
    # 200.00 + 49.99 + 100.00 + 50.00 + 100.00
    assert stats.total_revenue == Decimal("499.99")
    assert stats.total_commission == Decimal("50.00")
    assert stats.average_order_value == Decimal("100.00")
    assert stats.orders_by_status == {"pending": 4, "cancelled": 1}
    assert [(p.product_id, p.total_quantity) for p in stats.top_products] == [
        ("prod-9", 5),
        ("prod-1", 4),
        ("prod-2", 1),
    ]
    assert stats.top_products[1].name == "Yarn prod-1"
    assert stats.top_products[1].total_revenue == Decimal("400.00")


@pytest.mark.asyncio
async def test_stats_empty_marketplace(query_service, admin):
    stats = await query_service.get_order_stats(admin)

    assert stats.total_orders == 0
    assert stats.average_order_value == Decimal("0.00")
    assert stats.top_products == []


@pytest.mark.asyncio
async def test_stats_rejects_inverted_window(query_service, admin):
    with pytest.raises(ValidationError):
        await query_service.get_order_stats(
            admin,
            start_date=datetime(2024, 2, 1, tzinfo=timezone.utc),
            end_date=datetime(2024, 1, 1, tzinfo=timezone.utc),
        )


@pytest.mark.asyncio
async def test_stats_admin_only(query_service, buyer):
    with pytest.raises(AuthorizationError):
        await query_service.get_order_stats(buyer)
