from __future__ import annotations

from typing import Literal

from pydantic_settings import SettingsConfigDict

from yarnitt.settings.base import YarnittBaseSettings


class EventBusSettings(YarnittBaseSettings):
    """
    Domain event publishing.
    Loaded automatically from .env with prefix EVENTS_*
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="EVENTS_",
        extra="ignore",
    )

    backend: Literal["memory", "redis"] = "memory"
    redis_url: str = "redis://localhost:6379/0"
    stream_name: str = "yarnitt:orders:stream"
    stream_maxlen: int = 10000
