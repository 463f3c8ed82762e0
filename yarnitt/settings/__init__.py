# Settings package
from yarnitt.settings.modules import (
    AppSettings,
    DatabaseSettings,
    EventBusSettings,
    OrderSettings,
    get_app_settings,
)

__all__ = [
    "get_app_settings",
    "AppSettings",
    "DatabaseSettings",
    "EventBusSettings",
    "OrderSettings",
]
