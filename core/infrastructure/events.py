"""
In-memory event bus implementation.

Delivery is in-process and immediate: no queue, no replay. A handler
subscribed after an event was published never sees that event.
"""

import asyncio
import logging
from typing import Dict, List, Type

from core.domain.events import DomainEvent, EventBus, EventHandler
from core.metrics import events_published_total

logger = logging.getLogger(__name__)


class InMemoryEventBus(EventBus):
    """
    In-memory event bus implementation.

    Handlers are kept per event type. Each handler subscribed to the
    published type is invoked exactly once per publish; a failing handler
    is logged and does not affect the publisher or the other handlers.
    """

    def __init__(self):
        """Initialize the event bus."""
        self._handlers: Dict[Type[DomainEvent], List[EventHandler]] = {}

    def subscribe(self, event_type: Type[DomainEvent], handler: EventHandler) -> None:
        """
        Subscribe to a domain event type.

        Args:
            event_type: The type of event to subscribe to
            handler: The handler to call when event is published
        """
        handlers = self._handlers.setdefault(event_type, [])
        if handler in handlers:
            return
        handlers.append(handler)
        logger.debug(f"Subscribed {handler.__class__.__name__} to {event_type.__name__}")

    def unsubscribe(self, event_type: Type[DomainEvent], handler: EventHandler) -> None:
        """
        Remove a subscription if present.

        Args:
            event_type: The type of event the handler was subscribed to
            handler: The handler to remove
        """
        handlers = self._handlers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)
            logger.debug(f"Unsubscribed {handler.__class__.__name__} from {event_type.__name__}")

    def handler_count(self, event_type: Type[DomainEvent]) -> int:
        """Return the number of handlers subscribed to an event type."""
        return len(self._handlers.get(event_type, []))

    async def publish(self, event: DomainEvent) -> None:
        """
        Publish a domain event.

        Args:
            event: The domain event to publish
        """
        events_published_total.labels(event_type=event.event_type).inc()

        # Snapshot so handlers may (un)subscribe while being notified
        handlers = list(self._handlers.get(type(event), []))
        if not handlers:
            logger.debug(f"No handlers registered for {event.event_type}")
            return

        logger.info(f"Publishing {event.event_type} to {len(handlers)} handler(s)")

        tasks = [self._handle_event(handler, event) for handler in handlers]
        await asyncio.gather(*tasks, return_exceptions=True)

    async def _handle_event(self, handler: EventHandler, event: DomainEvent) -> None:
        """
        Handle an event with a specific handler.

        Args:
            handler: The handler to use
            event: The event to handle
        """
        try:
            await handler.handle(event)
            logger.debug(
                f"Successfully handled {event.event_type} with {handler.__class__.__name__}"
            )
        except Exception as e:
            logger.error(
                f"Error handling {event.event_type} with {handler.__class__.__name__}: {e}",
                exc_info=True,
            )
            raise
