from __future__ import annotations

from datetime import timezone as dt_timezone, tzinfo as TzInfo
from decimal import Decimal
from typing import Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import SettingsConfigDict

from yarnitt.domain.constants import (
    DEFAULT_CURRENCY,
    DEFAULT_DELIVERY_DAYS,
    PLATFORM_COMMISSION_RATE,
)
from yarnitt.settings.base import YarnittBaseSettings


class OrderSettings(YarnittBaseSettings):
    """
    Order engine settings.
    Loaded automatically from .env with prefix ORDER_*
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="ORDER_",
        extra="ignore",
    )

    commission_rate: Decimal = Field(default=PLATFORM_COMMISSION_RATE, ge=0, le=1)
    default_delivery_days: int = Field(default=DEFAULT_DELIVERY_DAYS, ge=0)
    currency: str = Field(default=DEFAULT_CURRENCY, min_length=3, max_length=3)

    # Calendar day used for ORD-YYYYMMDD-NNN
    timezone: str = "UTC"

    # counter: atomic per-day counter row; count: count of today's orders + 1
    number_strategy: Literal["counter", "count"] = "counter"

    @field_validator("timezone")
    @classmethod
    def _known_timezone(cls, value: str) -> str:
        if value.upper() != "UTC":
            try:
                ZoneInfo(value)
            except (ZoneInfoNotFoundError, ValueError) as exc:
                raise ValueError(f"Unknown timezone: {value}") from exc
        return value

    @property
    def tzinfo(self) -> TzInfo:
        if self.timezone.upper() == "UTC":
            return dt_timezone.utc
        return ZoneInfo(self.timezone)
