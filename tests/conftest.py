"""
Pytest configuration and shared fixtures.
"""

from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, List, Optional

import pytest

from catalog.application.category_manager import CategoryManager
from catalog.application.state_manager import CatalogStateManager
from catalog.config import CatalogSettings
from catalog.domain.events import CATALOG_EVENTS
from catalog.infrastructure.local_cache import LocalCatalogCache
from catalog.ports.catalog_store import PRODUCTS, SERVER_TIMESTAMP, CatalogStore
from catalog.ports.identity import IdentityProvider
from catalog.ports.image_host import ImageHost, ImageUpload
from core.domain.events import DomainEvent, EventHandler
from core.domain.exceptions import CacheError, ImageHostingError, RemoteStoreError
from core.infrastructure.cache import CachePort
from core.infrastructure.events import InMemoryEventBus

SYSTEM_IDENTITY = "system@b2b-showcase.com"


class InMemoryCatalogStore(CatalogStore):
    """
    Catalog store keeping documents in dictionaries.

    ``fail_reads``/``fail_writes`` make the matching operations raise
    RemoteStoreError. ``before_write`` is awaited before every merge.
    """

    def __init__(self):
        self.collections: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self.fail_reads = False
        self.fail_writes = False
        self.before_write: Optional[Callable[[], Awaitable[None]]] = None
        self.calls: List[tuple] = []
        self._next_id = 0

    def put(self, collection: str, document_id: str, data: Dict[str, Any]) -> None:
        self.collections.setdefault(collection, {})[document_id] = dict(data)

    def document(self, collection: str, document_id: str) -> Optional[Dict[str, Any]]:
        return self.collections.get(collection, {}).get(document_id)

    @staticmethod
    def _resolve(fields: Dict[str, Any]) -> Dict[str, Any]:
        now = datetime.now(timezone.utc).isoformat()
        return {key: now if value is SERVER_TIMESTAMP else value for key, value in fields.items()}

    def _check(self, operation: str, failing: bool) -> None:
        self.calls.append((operation,))
        if failing:
            raise RemoteStoreError(f"{operation} failed")

    async def get_all(self, collection):
        self._check("get_all", self.fail_reads)
        return [(key, dict(value)) for key, value in self.collections.get(collection, {}).items()]

    async def get_by_id(self, collection, document_id):
        self._check("get_by_id", self.fail_reads)
        document = self.document(collection, document_id)
        return dict(document) if document is not None else None

    async def set_merge(self, collection, document_id, fields):
        if self.before_write is not None:
            await self.before_write()
        self._check("set_merge", self.fail_writes)
        documents = self.collections.setdefault(collection, {})
        documents.setdefault(document_id, {}).update(self._resolve(fields))

    async def set_full(self, collection, document_id, record):
        self._check("set_full", self.fail_writes)
        self.collections.setdefault(collection, {})[document_id] = self._resolve(record)

    async def delete(self, collection, document_id):
        self._check("delete", self.fail_writes)
        self.collections.get(collection, {}).pop(document_id, None)

    async def allocate_id(self, collection):
        self._next_id += 1
        return f"generated-{self._next_id}"

    def writes(self) -> List[str]:
        return [call[0] for call in self.calls if call[0] in ("set_merge", "set_full", "delete")]


class InMemoryCache(CachePort):
    """Cache port backed by a dictionary; ``fail`` makes every call raise."""

    def __init__(self):
        self.data: Dict[str, Any] = {}
        self.fail = False

    def _check(self):
        if self.fail:
            raise CacheError("cache unavailable")

    async def get(self, key):
        self._check()
        return self.data.get(key)

    async def set(self, key, value, timeout=None):
        self._check()
        self.data[key] = value

    async def delete(self, key):
        self._check()
        self.data.pop(key, None)

    async def clear(self):
        self._check()
        self.data.clear()


class RecordingHandler(EventHandler):
    """Event handler remembering every event it receives."""

    def __init__(self):
        self.events: List[DomainEvent] = []

    async def handle(self, event):
        self.events.append(event)

    @property
    def types(self) -> List[str]:
        return [event.event_type for event in self.events]


class StaticIdentity(IdentityProvider):
    """Identity provider returning a fixed email."""

    def __init__(self, email: Optional[str] = None):
        self.email = email

    def current_email(self):
        return self.email


class StubImageHost(ImageHost):
    """Image host returning predictable URLs."""

    def __init__(self):
        self.fail = False
        self.uploads: List[tuple] = []

    async def upload(self, image, folder):
        return self._store("upload", image, folder)

    async def replace(self, image, folder):
        return self._store("replace", image, folder)

    def _store(self, operation, image, folder):
        if self.fail:
            raise ImageHostingError("upload rejected")
        self.uploads.append((operation, folder, image.filename))
        return f"https://images.example.com/{folder}/{image.filename}"


def product_record(product_id: str, **overrides) -> Dict[str, Any]:
    """Build a stored product document."""
    record = {
        "name": f"Product {product_id}",
        "description": "Bulk commodity",
        "imageUrl": f"https://images.example.com/{product_id}.jpg",
        "category": "rice",
        "featured": False,
        "inStock": True,
        "updatedAt": "2024-01-01T00:00:00+00:00",
        "updatedBy": "editor@example.com",
    }
    record.update(overrides)
    return record


@pytest.fixture
def store():
    """Fixture for the in-memory catalog store."""
    return InMemoryCatalogStore()


@pytest.fixture
def cache_backend():
    """Fixture for the in-memory cache backend."""
    return InMemoryCache()


@pytest.fixture
def local_cache(cache_backend):
    """Fixture for the local catalog cache."""
    return LocalCatalogCache(cache_backend)


@pytest.fixture
def event_bus():
    """Fixture for an event bus."""
    return InMemoryEventBus()


@pytest.fixture
def recorder(event_bus):
    """Fixture for a handler subscribed to every catalog event."""
    handler = RecordingHandler()
    for event_type in CATALOG_EVENTS:
        event_bus.subscribe(event_type, handler)
    return handler


@pytest.fixture
def identity():
    """Fixture for an anonymous identity (falls back to the system identity)."""
    return StaticIdentity()


@pytest.fixture
def image_host():
    """Fixture for the stub image host."""
    return StubImageHost()


@pytest.fixture
def catalog_settings():
    """Fixture for catalog settings."""
    return CatalogSettings(system_identity=SYSTEM_IDENTITY)


@pytest.fixture
def manager(store, local_cache, event_bus, recorder, identity, image_host, catalog_settings):
    """Fixture for a catalog state manager (not loaded)."""
    return CatalogStateManager(
        store=store,
        local_cache=local_cache,
        event_bus=event_bus,
        identity=identity,
        image_host=image_host,
        settings=catalog_settings,
    )


@pytest.fixture
def category_manager(store, local_cache, event_bus, recorder, identity, image_host, catalog_settings):
    """Fixture for a category manager."""
    return CategoryManager(
        store=store,
        local_cache=local_cache,
        event_bus=event_bus,
        identity=identity,
        image_host=image_host,
        settings=catalog_settings,
    )


@pytest.fixture
def stocked_store(store):
    """Fixture for a store holding five products, none featured."""
    for index in range(1, 6):
        store.put(PRODUCTS, str(index), product_record(str(index)))
    return store


@pytest.fixture
def api_client():
    """Fixture for DRF API client."""
    from rest_framework.test import APIClient

    return APIClient()


@pytest.fixture
def make_record():
    """Fixture returning the stored product document builder."""
    return product_record


@pytest.fixture(autouse=True)
def reset_catalog_container():
    """Fixture dropping the process-wide catalog services and cached data."""
    from django.core.cache import caches

    from catalog.container import reset_container

    reset_container()
    caches["catalog"].clear()
    yield
    reset_container()
    caches["catalog"].clear()


@pytest.fixture
def staff_user(django_user_model):
    """Fixture for a staff user allowed to use the admin API."""
    return django_user_model.objects.create_user(
        username="catalog-admin",
        email="admin@b2b-showcase.com",
        password="catalog-admin-password",
        is_staff=True,
    )


@pytest.fixture
def customer_user(django_user_model):
    """Fixture for a signed-in user without staff rights."""
    return django_user_model.objects.create_user(
        username="buyer",
        email="buyer@example.com",
        password="buyer-password",
    )


@pytest.fixture
def staff_client(api_client, staff_user):
    """Fixture for an API client signed in as staff."""
    api_client.force_login(staff_user)
    return api_client
