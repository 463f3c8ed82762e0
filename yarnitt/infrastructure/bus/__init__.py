"""Message bus infrastructure - event bus selection and Redis Streams."""
from yarnitt.domain.event_bus import EventBus
from yarnitt.infrastructure.event_bus import InMemoryEventBus
from yarnitt.settings import EventBusSettings

from .redis_stream_publisher import RedisStreamEventBus, event_to_stream_fields


def create_event_bus(settings: EventBusSettings) -> EventBus:
    """Build the configured event bus backend."""
    if settings.backend == "redis":
        return RedisStreamEventBus.from_settings(settings)
    return InMemoryEventBus()


__all__ = [
    "RedisStreamEventBus",
    "create_event_bus",
    "event_to_stream_fields",
]
