"""
Redis Streams event bus.

Publishes committed order events to a Redis Stream so downstream
consumers (notifications, analytics, payouts) can read them with
consumer groups.
"""
import json
import logging
from typing import Any, Dict, List, Optional

import redis.asyncio as aioredis

from yarnitt.domain.event_bus import EventBus
from yarnitt.domain.events.base import DomainEvent
from yarnitt.settings import EventBusSettings

logger = logging.getLogger(__name__)


def event_to_stream_fields(event: DomainEvent) -> Dict[str, str]:
    """
    Flatten an event into Redis Stream fields.

    Stream entry format: {
        "event_id": str,
        "event_type": str,
        "aggregate_id": str,
        "occurred_at": str,  # ISO format
        "payload": str,      # JSON of event.to_dict()
    }
    """
    body = event.to_dict()
    return {
        "event_id": body["event_id"],
        "event_type": body["event_type"],
        "aggregate_id": body["aggregate_id"],
        "occurred_at": body["occurred_at"],
        "payload": json.dumps(body, default=str),
    }


class RedisStreamEventBus(EventBus):
    """
    Publishes domain events to Redis Streams.

    Uses XADD with an approximate MAXLEN cap. The client is created lazily
    from ``redis_url`` unless one is injected.
    """

    def __init__(
        self,
        redis_url: str = "redis://localhost:6379/0",
        stream_name: str = "yarnitt:orders:stream",
        maxlen: int = 10000,
        client: Optional[Any] = None,
    ):
        """
        Initialize Redis Stream event bus.

        Args:
            redis_url: Redis connection URL
            stream_name: Redis Stream name
            maxlen: Approximate number of entries kept in the stream
            client: Pre-built redis.asyncio client
        """
        self.redis_url = redis_url
        self.stream_name = stream_name
        self.maxlen = maxlen
        self._redis_client = client

    @classmethod
    def from_settings(cls, settings: EventBusSettings) -> "RedisStreamEventBus":
        return cls(
            redis_url=settings.redis_url,
            stream_name=settings.stream_name,
            maxlen=settings.stream_maxlen,
        )

    async def connect(self) -> None:
        """Establish Redis connection."""
        if self._redis_client is None:
            self._redis_client = aioredis.from_url(
                self.redis_url,
                encoding="utf-8",
                decode_responses=True,
            )
            await self._redis_client.ping()
            logger.info(f"Connected to Redis: {self.redis_url}")

    async def disconnect(self) -> None:
        """Close Redis connection."""
        if self._redis_client is not None:
            await self._redis_client.aclose()
            self._redis_client = None
            logger.info("Disconnected from Redis")

    async def publish(self, event: DomainEvent) -> str:
        """
        Publish one event to the stream.

        Returns:
            Message ID from Redis Stream
        """
        if self._redis_client is None:
            await self.connect()

        try:
            msg_id = await self._redis_client.xadd(
                self.stream_name,
                event_to_stream_fields(event),
                maxlen=self.maxlen,
                approximate=True,
            )
        except Exception as e:
            logger.error(f"Failed to publish {event.event_type} to Redis Stream: {e}", exc_info=True)
            raise

        logger.info(
            f"Published {event.event_type}: aggregate={event.aggregate_id}, msg_id={msg_id}"
        )
        return msg_id

    async def publish_all(self, events: List[DomainEvent]) -> None:
        for event in events:
            await self.publish(event)

    async def __aenter__(self):
        """Async context manager entry."""
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.disconnect()
