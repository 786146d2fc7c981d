"""
Event handlers for domain events.

These handlers process domain events for side effects such as audit
logging.
"""

import logging

from core.domain.events import DomainEvent, EventBus, EventHandler

logger = logging.getLogger(__name__)


class AuditLogEventHandler(EventHandler):
    """
    Event handler for audit logging.

    Logs every catalog change with the event's identifiers as structured
    fields.
    """

    async def handle(self, event: DomainEvent) -> None:
        """
        Handle domain event for audit logging.

        Args:
            event: Domain event to log
        """
        logger.info(
            "Audit log: %s - %s",
            event.event_type,
            event.aggregate_id,
            extra={
                "event_id": str(event.event_id),
                "event_type": event.event_type,
                "aggregate_id": event.aggregate_id,
                "changed_fields": sorted(event.changes),
                "occurred_at": event.occurred_at.isoformat(),
            },
        )


def register_event_handlers(event_bus: EventBus) -> None:
    """
    Register the audit handler for every catalog event.

    Args:
        event_bus: Bus to subscribe on
    """
    from catalog.domain.events import CATALOG_EVENTS

    audit_handler = AuditLogEventHandler()
    for event_type in CATALOG_EVENTS:
        event_bus.subscribe(event_type, audit_handler)

    logger.info("Event handlers registered")
