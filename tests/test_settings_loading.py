"""
Test settings loading from environment variables and the .env file.

Each test runs from an empty temporary directory so a developer's own
.env does not leak in.
"""
from __future__ import annotations

import os
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from pydantic import ValidationError as SettingsValidationError

from yarnitt.settings import (
    DatabaseSettings,
    EventBusSettings,
    OrderSettings,
    get_app_settings,
)

_PREFIXES = ("ORDER_", "DB_", "EVENTS_")


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    for key in list(os.environ):
        if key.startswith(_PREFIXES):
            monkeypatch.delenv(key, raising=False)
    get_app_settings.cache_clear()
    yield tmp_path
    get_app_settings.cache_clear()


def test_defaults():
    settings = get_app_settings()

    assert settings.orders.commission_rate == Decimal("0.10")
    assert settings.orders.default_delivery_days == 7
    assert settings.orders.number_strategy == "counter"
    assert settings.orders.tzinfo is timezone.utc
    assert settings.database.database_url == "sqlite+aiosqlite:///./yarnitt.db"
    assert settings.database.is_sqlite
    assert settings.events.backend == "memory"


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("ORDER_COMMISSION_RATE", "0.15")
    monkeypatch.setenv("ORDER_DEFAULT_DELIVERY_DAYS", "3")
    monkeypatch.setenv("ORDER_NUMBER_STRATEGY", "count")
    monkeypatch.setenv("DB_DATABASE_URL", "postgresql+asyncpg://app:secret@db/yarnitt")
    monkeypatch.setenv("EVENTS_BACKEND", "redis")

    settings = get_app_settings()

    assert settings.orders.commission_rate == Decimal("0.15")
    assert settings.orders.default_delivery_days == 3
    assert settings.orders.number_strategy == "count"
    assert not settings.database.is_sqlite
    assert settings.events.backend == "redis"


def test_dotenv_file_is_read(isolated_env):
    (isolated_env / ".env").write_text(
        "ORDER_TIMEZONE=Africa/Nairobi\nEVENTS_STREAM_NAME=orders:staging\n",
        encoding="utf-8",
    )

    orders = OrderSettings()
    events = EventBusSettings()

    assert orders.timezone == "Africa/Nairobi"
    assert events.stream_name == "orders:staging"


def test_named_timezone_resolves():
    settings = OrderSettings(timezone="Africa/Nairobi")

    offset = settings.tzinfo.utcoffset(datetime(2024, 1, 15, 12, 0))
    assert offset == timedelta(hours=3)


def test_unknown_timezone_rejected():
    with pytest.raises(SettingsValidationError):
        OrderSettings(timezone="Mars/Olympus_Mons")


@pytest.mark.parametrize("rate", ["-0.1", "1.5"])
def test_commission_rate_bounds(rate):
    with pytest.raises(SettingsValidationError):
        OrderSettings(commission_rate=Decimal(rate))


def test_unknown_event_backend_rejected():
    with pytest.raises(SettingsValidationError):
        EventBusSettings(backend="kafka")


def test_pool_settings_exposed():
    settings = DatabaseSettings(database_url="postgresql+asyncpg://db/yarnitt", pool_size=5)

    assert settings.pool_size == 5
    assert settings.max_overflow == 20
