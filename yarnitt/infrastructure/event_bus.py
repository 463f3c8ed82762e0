"""
Event Bus Implementation (Infrastructure Layer).

Dispatches committed order events to in-process subscribers.
"""
import asyncio
import logging
from typing import Callable, List

from yarnitt.domain.event_bus import EventBus
from yarnitt.domain.events.base import DomainEvent

logger = logging.getLogger(__name__)

EventHandler = Callable[[DomainEvent], object]


class InMemoryEventBus(EventBus):
    """
    In-Memory Event Bus Implementation.

    Features:
    - Notifies registered subscribers in registration order
    - Supports sync and async handlers
    - Keeps the published history (handy in tests and demos)

    A failing subscriber is logged and does not affect the others or the
    already committed operation.
    """

    def __init__(self) -> None:
        """Initialize event bus with subscribers."""
        self._subscribers: List[EventHandler] = []
        self.published: List[DomainEvent] = []

    async def publish(self, event: DomainEvent) -> None:
        """
        Publish a single domain event.

        Args:
            event: Domain event to publish
        """
        logger.info(f"Publishing event: {event.event_type} (aggregate: {event.aggregate_id})")
        self.published.append(event)
        await self._notify_subscribers(event)

    async def publish_all(self, events: List[DomainEvent]) -> None:
        """
        Publish multiple domain events in order.

        Args:
            events: List of domain events to publish
        """
        for event in events:
            await self.publish(event)

    def subscribe(self, handler: EventHandler) -> None:
        """
        Subscribe to all domain events.

        Args:
            handler: Callback function that receives events
        """
        if handler not in self._subscribers:
            self._subscribers.append(handler)
            logger.info(f"Registered event subscriber: {getattr(handler, '__name__', handler)}")

    def unsubscribe(self, handler: EventHandler) -> None:
        """
        Unsubscribe from domain events.

        Args:
            handler: Callback function to remove
        """
        if handler in self._subscribers:
            self._subscribers.remove(handler)

    def events_of_type(self, event_type: str) -> List[DomainEvent]:
        return [event for event in self.published if event.event_type == event_type]

    async def _notify_subscribers(self, event: DomainEvent) -> None:
        """Notify all subscribers about an event."""
        for subscriber in list(self._subscribers):
            try:
                result = subscriber(event)
                if asyncio.iscoroutine(result):
                    await result
            except Exception as e:
                logger.error(
                    f"Subscriber {getattr(subscriber, '__name__', subscriber)} failed: {e}",
                    exc_info=True,
                )
