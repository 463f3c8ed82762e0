"""
Integration tests for the SQLAlchemy repositories and unit of work.

Runs the lifecycle service against a real (file-backed SQLite) database
to exercise the conditional updates, the version check and the counter.
"""
from datetime import date, datetime, timezone
from decimal import Decimal

import pytest
from sqlalchemy import func, select

from yarnitt.application.dtos.order_dto import OrderFiltersRequest
from yarnitt.data.models import OrderCounterModel, OrderModel
from yarnitt.domain.enums import OrderStatus
from yarnitt.domain.exceptions import ConflictError, InsufficientStockError, NotFoundError


async def _stock(uow_factory, product_id):
    async with uow_factory() as uow:
        product = await uow.products.find_by_id(product_id)
    return product.stock, product.sold


async def _order_count(session_factory):
    async with session_factory() as session:
        return (await session.execute(select(func.count(OrderModel.id)))).scalar_one()


@pytest.mark.asyncio
async def test_create_order_persists_order_and_reserves_stock(sql_service, sql_catalog, buyer, order_request):
    created = await sql_service.create_order(buyer, order_request(("prod-1", 2), ("prod-2", 1)))

    async with sql_catalog() as uow:
        stored = await uow.orders.find_by_id(created.id)

    assert str(stored.order_number) == "ORD-20240115-001"
    assert stored.total_amount.amount == Decimal("249.99")
    assert stored.commission.amount == Decimal("25.00")
    assert stored.seller_earnings.amount == Decimal("224.99")
    assert [(i.product_id, i.quantity) for i in stored.items] == [("prod-1", 2), ("prod-2", 1)]
    assert stored.items[1].price_at_purchase.amount == Decimal("49.99")
    assert stored.created_at == datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)
    assert stored.version == 0
    assert await _stock(sql_catalog, "prod-1") == (8, 2)
    assert await _stock(sql_catalog, "prod-2") == (2, 1)


@pytest.mark.asyncio
async def test_daily_counter_increments_and_resets(sql_service, session_factory, clock, buyer, order_request):
    first = await sql_service.create_order(buyer, order_request(("prod-1", 1)))
    second = await sql_service.create_order(buyer, order_request(("prod-1", 1)))
    clock.advance(days=1)
    third = await sql_service.create_order(buyer, order_request(("prod-1", 1)))

    assert [first.order_number, second.order_number, third.order_number] == [
        "ORD-20240115-001",
        "ORD-20240115-002",
        "ORD-20240116-001",
    ]
    async with session_factory() as session:
        rows = (await session.execute(select(OrderCounterModel).order_by(OrderCounterModel.day))).scalars().all()
    assert [(row.day, row.value) for row in rows] == [(date(2024, 1, 15), 2), (date(2024, 1, 16), 1)]


@pytest.mark.asyncio
async def test_failed_reservation_rolls_back_everything(
    sql_service, sql_catalog, session_factory, buyer, order_request
):
    with pytest.raises(InsufficientStockError):
        await sql_service.create_order(buyer, order_request(("prod-1", 1), ("prod-2", 4)))

    assert await _order_count(session_factory) == 0
    assert await _stock(sql_catalog, "prod-1") == (10, 0)
    assert await _stock(sql_catalog, "prod-2") == (3, 0)


@pytest.mark.asyncio
async def test_conditional_decrement_never_goes_negative(sql_catalog):
    async with sql_catalog() as uow:
        assert await uow.products.conditional_decrement_stock("prod-2", 4) is None
        product = await uow.products.conditional_decrement_stock("prod-2", 3)
        assert product.stock == 0
        assert await uow.products.conditional_decrement_stock("prod-2", 1) is None
        await uow.commit()

    assert await _stock(sql_catalog, "prod-2") == (0, 3)


@pytest.mark.asyncio
async def test_increment_clamps_sold_at_zero(sql_catalog):
    async with sql_catalog() as uow:
        product = await uow.products.increment_stock("prod-1", 5)
        await uow.commit()

    assert (product.stock, product.sold) == (15, 0)


@pytest.mark.asyncio
async def test_increment_unknown_product(sql_catalog):
    async with sql_catalog() as uow:
        with pytest.raises(NotFoundError):
            await uow.products.increment_stock("ghost", 1)


@pytest.mark.asyncio
async def test_cancel_restores_stock(sql_service, sql_catalog, buyer, order_request):
    order = await sql_service.create_order(buyer, order_request(("prod-1", 4)))

    cancelled = await sql_service.cancel_order(order.id, buyer, "Ordered the wrong colour")

    assert cancelled.status == "cancelled"
    assert await _stock(sql_catalog, "prod-1") == (10, 0)
    async with sql_catalog() as uow:
        stored = await uow.orders.find_by_id(order.id)
    assert stored.status == OrderStatus.CANCELLED
    assert stored.cancellation_reason == "Ordered the wrong colour"
    assert stored.version == 1


@pytest.mark.asyncio
async def test_stale_version_is_rejected(sql_service, sql_catalog, buyer, seller, order_request, clock):
    order = await sql_service.create_order(buyer, order_request(("prod-1", 1)))

    async with sql_catalog() as stale_uow:
        stale = await stale_uow.orders.find_by_id(order.id)

        # Another writer confirms in the meantime
        await sql_service.confirm_order(order.id, seller)

        stale.cancel(clock(), "too late")
        with pytest.raises(ConflictError):
            await stale_uow.orders.save(stale, expected_version=0)

    async with sql_catalog() as uow:
        current = await uow.orders.find_by_id(order.id)
    assert current.status == OrderStatus.CONFIRMED
    assert current.version == 1


@pytest.mark.asyncio
async def test_duplicate_order_number_is_a_conflict(sql_service, sql_catalog, buyer, order_request):
    order = await sql_service.create_order(buyer, order_request(("prod-1", 1)))

    async with sql_catalog() as uow:
        duplicate = await uow.orders.find_by_id(order.id)
        duplicate.id = "another-id"
        with pytest.raises(ConflictError):
            await uow.orders.create(duplicate)


@pytest.mark.asyncio
async def test_refund_after_cancel_does_not_restore_twice(sql_service, sql_catalog, buyer, admin, order_request):
    order = await sql_service.create_order(buyer, order_request(("prod-2", 2)))
    await sql_service.cancel_order(order.id, buyer)

    refunded = await sql_service.refund_order(order.id, admin)

    assert refunded.status == "refunded"
    assert await _stock(sql_catalog, "prod-2") == (3, 0)


@pytest.mark.asyncio
async def test_fulfilment_timestamps_round_trip(sql_service, sql_catalog, clock, buyer, seller, order_request):
    order = await sql_service.create_order(buyer, order_request(("prod-1", 1)))
    await sql_service.confirm_order(order.id, seller)
    await sql_service.ship_order(order.id, seller, "TRK-9")
    clock.advance(days=2)
    await sql_service.confirm_delivery(order.id, buyer)

    async with sql_catalog() as uow:
        stored = await uow.orders.find_by_id(order.id)

    assert stored.status == OrderStatus.DELIVERED
    assert stored.tracking_number == "TRK-9"
    assert stored.estimated_delivery == datetime(2024, 1, 22, 10, 30, tzinfo=timezone.utc)
    assert stored.delivered_at == datetime(2024, 1, 17, 10, 30, tzinfo=timezone.utc)
    assert stored.version == 3


@pytest.mark.asyncio
async def test_listing_and_stats_queries(
    sql_service, sql_query_service, clock, buyer, other_buyer, seller, admin, order_request
):
    await sql_service.create_order(buyer, order_request(("prod-1", 2)))
    clock.advance(minutes=5)
    await sql_service.create_order(other_buyer, order_request(("prod-2", 1)))
    clock.advance(minutes=5)
    latest = await sql_service.create_order(buyer, order_request(("prod-9", 3)))
    await sql_service.cancel_order(latest.id, buyer)

    listing = await sql_query_service.list_buyer_orders(buyer)
    assert [o.order_number for o in listing.orders] == ["ORD-20240115-003", "ORD-20240115-001"]

    seller_view = await sql_query_service.list_seller_orders(seller)
    assert seller_view.pagination.total == 2
    assert seller_view.stats.total_revenue == Decimal("224.99")
    assert seller_view.stats.pending_orders == 2

    searched = await sql_query_service.list_all_orders(admin, OrderFiltersRequest(search="-002"))
    assert [o.order_number for o in searched.orders] == ["ORD-20240115-002"]

    windowed = await sql_query_service.list_all_orders(
        admin, OrderFiltersRequest(start_date=datetime(2024, 1, 15, 10, 31), status="pending")
    )
    assert [o.order_number for o in windowed.orders] == ["ORD-20240115-002"]

    stats = await sql_query_service.get_order_stats(admin)
    assert stats.total_orders == 3
    assert stats.total_revenue == Decimal("279.99")
    assert stats.total_commission == Decimal("28.00")
    assert stats.average_order_value == Decimal("93.33")
    assert stats.orders_by_status == {"pending": 2, "cancelled": 1}
    assert [(p.product_id, p.total_quantity) for p in stats.top_products] == [
        ("prod-9", 3),
        ("prod-1", 2),
        ("prod-2", 1),
    ]
    assert stats.top_products[1].name == "Yarn prod-1"
    assert stats.top_products[1].total_revenue == Decimal("200.00")


@pytest.mark.asyncio
async def test_largest_totals_round_trip_exactly(sql_service, sql_catalog, buyer, order_request, product_factory):
    async with sql_catalog() as uow:
        await uow.products.add(product_factory("prod-loom", price="1999999.99", stock=5))
        await uow.products.add(product_factory("prod-shawl", price="10000000.00", stock=1))
        await uow.commit()

    created = await sql_service.create_order(buyer, order_request(("prod-loom", 5)))

    async with sql_catalog() as uow:
        stored = await uow.orders.find_by_id(created.id)
        product = await uow.products.find_by_id("prod-loom")

    assert stored.total_amount.amount == Decimal("9999999.95")
    assert stored.commission.amount == Decimal("1000000.00")
    assert stored.seller_earnings.amount == Decimal("8999999.95")
    assert stored.commission.amount + stored.seller_earnings.amount == stored.total_amount.amount
    assert product.price.amount == Decimal("1999999.99")
    assert (product.stock, product.sold) == (0, 5)

    ceiling = await sql_service.create_order(buyer, order_request(("prod-shawl", 1)))
    async with sql_catalog() as uow:
        stored = await uow.orders.find_by_id(ceiling.id)

    assert stored.total_amount.amount == Decimal("10000000.00")
    assert stored.commission.amount == Decimal("1000000.00")
    assert stored.seller_earnings.amount == Decimal("9000000.00")
