"""
Catalog composition root.

Builds the process-wide catalog services from Django settings. The
state manager loads the catalog lazily on first use.
"""
import logging
from typing import Optional

from catalog.application.category_manager import CategoryManager
from catalog.application.state_manager import CatalogStateManager
from catalog.config import CatalogSettings
from catalog.infrastructure.identity import ContextIdentityProvider
from catalog.infrastructure.image_hosting import CloudinaryImageHost
from catalog.infrastructure.local_cache import LocalCatalogCache
from catalog.infrastructure.stores.django_document_store import DjangoDocumentStore
from core.infrastructure.cache_adapters import DjangoCacheAdapter
from core.infrastructure.event_handlers import register_event_handlers
from core.infrastructure.events import InMemoryEventBus

logger = logging.getLogger(__name__)

_event_bus: Optional[InMemoryEventBus] = None
_catalog_manager: Optional[CatalogStateManager] = None
_category_manager: Optional[CategoryManager] = None


def get_event_bus() -> InMemoryEventBus:
    """Return the process event bus, registering the default handlers once."""
    global _event_bus
    if _event_bus is None:
        _event_bus = InMemoryEventBus()
        register_event_handlers(_event_bus)
    return _event_bus


def _dependencies(settings: CatalogSettings) -> dict:
    image_host = None
    if settings.image_host.configured:
        image_host = CloudinaryImageHost(settings.image_host)
    else:
        logger.info("Image hosting credentials missing, uploads disabled")
    return {
        "store": DjangoDocumentStore(),
        "local_cache": LocalCatalogCache(DjangoCacheAdapter(settings.local_cache_alias)),
        "event_bus": get_event_bus(),
        "identity": ContextIdentityProvider(),
        "image_host": image_host,
        "settings": settings,
    }


def build_catalog_manager() -> CatalogStateManager:
    """Build an unloaded state manager wired to the Django adapters."""
    return CatalogStateManager(**_dependencies(CatalogSettings.from_django_settings()))


def build_category_manager() -> CategoryManager:
    """Build a category manager wired to the Django adapters."""
    return CategoryManager(**_dependencies(CatalogSettings.from_django_settings()))


async def get_catalog_manager() -> CatalogStateManager:
    """
    Return the process-wide state manager, loading the catalog on first use.

    Two requests racing on the very first call may both load; the later
    load wins.
    """
    global _catalog_manager
    if _catalog_manager is None:
        _catalog_manager = build_catalog_manager()
    if not _catalog_manager.loaded:
        source = await _catalog_manager.load_initial()
        logger.info(f"Catalog loaded from {source}")
    return _catalog_manager


def get_category_manager() -> CategoryManager:
    """Return the process-wide category manager."""
    global _category_manager
    if _category_manager is None:
        _category_manager = build_category_manager()
    return _category_manager


def reset_container() -> None:
    """Drop every service instance. Used by tests."""
    global _event_bus, _catalog_manager, _category_manager
    _event_bus = None
    _catalog_manager = None
    _category_manager = None
