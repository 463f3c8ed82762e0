from __future__ import annotations

from functools import lru_cache

from pydantic import BaseModel, ConfigDict

from yarnitt.settings.modules.database_settings import DatabaseSettings
from yarnitt.settings.modules.event_bus_settings import EventBusSettings
from yarnitt.settings.modules.order_settings import OrderSettings


class AppSettings(BaseModel):
    """Application settings aggregator."""

    model_config = ConfigDict(arbitrary_types_allowed=True, extra="ignore")

    orders: OrderSettings
    database: DatabaseSettings
    events: EventBusSettings


@lru_cache()
def get_app_settings() -> AppSettings:
    return AppSettings(
        orders=OrderSettings(),
        database=DatabaseSettings(),
        events=EventBusSettings(),
    )
