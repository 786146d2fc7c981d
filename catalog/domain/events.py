"""
Catalog domain events.

Each event carries the id of the changed entity as ``aggregate_id`` and
the changed fields in ``changes``. ``event_type`` is the name subscribers
know the event by.
"""
from core.domain.events import DomainEvent


class ProductUpdated(DomainEvent):
    """Event raised when fields of a product change or it is removed."""

    event_type = "productUpdated"


class ProductAdded(DomainEvent):
    """Event raised when a product is created."""

    event_type = "productAdded"


class ProductRemoved(DomainEvent):
    """Event raised when a product is deleted."""

    event_type = "productRemoved"


class CategoryUpdated(DomainEvent):
    """Event raised when a category changes or is soft-deleted."""

    event_type = "categoryUpdated"


class RefreshCategories(DomainEvent):
    """Event asking category listings to reload."""

    event_type = "refreshCategories"


CATALOG_EVENTS = (
    ProductUpdated,
    ProductAdded,
    ProductRemoved,
    CategoryUpdated,
    RefreshCategories,
)
