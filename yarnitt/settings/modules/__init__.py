# Settings modules
from .app_settings import AppSettings, get_app_settings
from .database_settings import DatabaseSettings
from .event_bus_settings import EventBusSettings
from .order_settings import OrderSettings

__all__ = [
    "AppSettings",
    "get_app_settings",
    "DatabaseSettings",
    "EventBusSettings",
    "OrderSettings",
]
