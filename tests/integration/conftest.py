"""Pytest configuration and fixtures for integration tests."""

from functools import partial

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import create_async_engine

from apps.api.deps import get_order_service, get_query_service
from apps.api.main import app
from yarnitt.application.services import OrderLifecycleService, OrderQueryService
from yarnitt.data.models import Base
from yarnitt.data.uow import create_uow
from yarnitt.infrastructure.database import get_session_factory


@pytest_asyncio.fixture
async def test_engine(tmp_path):
    """File-backed SQLite so every session gets its own connection."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'orders.db'}", echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return get_session_factory(test_engine)


@pytest.fixture
def uow_factory(session_factory):
    return partial(create_uow, session_factory)


@pytest_asyncio.fixture
async def sql_catalog(uow_factory, product_factory):
    """Seed the SQL catalog with the same products as the in-memory store."""
    async with uow_factory() as uow:
        await uow.products.add(product_factory("prod-1", price="100.00", stock=10))
        await uow.products.add(product_factory("prod-2", price="49.99", stock=3))
        await uow.products.add(product_factory("prod-9", seller_id="seller-2", price="10.00", stock=50))
        await uow.commit()
    return uow_factory


@pytest.fixture
def sql_service(sql_catalog, event_bus, order_settings, clock):
    return OrderLifecycleService(sql_catalog, event_bus=event_bus, settings=order_settings, clock=clock)


@pytest.fixture
def sql_query_service(sql_catalog):
    return OrderQueryService(sql_catalog)


@pytest.fixture
def client(service, query_service):
    """
    API client over the in-memory store.

    The lifespan (table creation on the configured database) is not
    triggered because the client is not used as a context manager.
    """
    app.dependency_overrides[get_order_service] = lambda: service
    app.dependency_overrides[get_query_service] = lambda: query_service
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def as_user():
    """Identity headers the gateway sets for an authenticated account."""

    def _headers(user_id: str, role: str = "buyer") -> dict:
        return {"X-User-Id": user_id, "X-User-Role": role}

    return _headers
