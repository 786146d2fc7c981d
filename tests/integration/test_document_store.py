"""
Integration tests for the Django document store.
"""
import pytest
from asgiref.sync import async_to_sync
from django.db import DatabaseError, InterfaceError

from catalog.application.state_manager import SOURCE_REMOTE
from catalog.container import build_catalog_manager
from catalog.infrastructure.models import CatalogDocument
from catalog.infrastructure.stores.django_document_store import DjangoDocumentStore
from catalog.ports.catalog_store import CATEGORIES, PRODUCTS, SERVER_TIMESTAMP
from core.domain.exceptions import RemoteStoreError


@pytest.fixture
def document_store():
    """Fixture for the Django document store."""
    return DjangoDocumentStore()


@pytest.mark.integration
@pytest.mark.django_db
class TestDjangoDocumentStore:
    """Tests for DjangoDocumentStore."""

    def test_set_full_and_get_by_id(self, document_store):
        """Test writing and reading a document."""
        async_to_sync(document_store.set_full)(
            PRODUCTS, "p1", {"name": "Rice", "updatedAt": SERVER_TIMESTAMP}
        )

        document = async_to_sync(document_store.get_by_id)(PRODUCTS, "p1")

        assert document["name"] == "Rice"
        assert isinstance(document["updatedAt"], str)
        assert document["updatedAt"].startswith("20")

    def test_set_full_replaces_document(self, document_store):
        """Test that a full write drops fields not in the new record."""
        async_to_sync(document_store.set_full)(PRODUCTS, "p1", {"name": "Rice", "featured": True})
        async_to_sync(document_store.set_full)(PRODUCTS, "p1", {"name": "Rice"})

        document = async_to_sync(document_store.get_by_id)(PRODUCTS, "p1")

        assert document == {"name": "Rice"}
        assert CatalogDocument.objects.filter(collection=PRODUCTS).count() == 1

    def test_set_merge_keeps_other_fields(self, document_store):
        """Test that a merge only touches the given fields."""
        async_to_sync(document_store.set_full)(PRODUCTS, "p1", {"name": "Rice", "featured": False})

        async_to_sync(document_store.set_merge)(PRODUCTS, "p1", {"featured": True})

        assert async_to_sync(document_store.get_by_id)(PRODUCTS, "p1") == {
            "name": "Rice",
            "featured": True,
        }

    def test_set_merge_creates_missing_document(self, document_store):
        """Test that merging into a missing document creates it."""
        async_to_sync(document_store.set_merge)(CATEGORIES, "rice", {"deleted": True})

        assert async_to_sync(document_store.get_by_id)(CATEGORIES, "rice") == {"deleted": True}

    def test_get_all_is_scoped_and_ordered(self, document_store):
        """Test that documents come back in insertion order per collection."""
        for document_id in ("b", "a", "c"):
            async_to_sync(document_store.set_full)(PRODUCTS, document_id, {"name": document_id})
        async_to_sync(document_store.set_full)(CATEGORIES, "rice", {"title": "Rice"})

        documents = async_to_sync(document_store.get_all)(PRODUCTS)

        assert [document_id for document_id, _ in documents] == ["b", "a", "c"]

    def test_get_missing_document(self, document_store):
        """Test reading an unknown document."""
        assert async_to_sync(document_store.get_by_id)(PRODUCTS, "missing") is None

    def test_delete(self, document_store):
        """Test deleting documents, including missing ones."""
        async_to_sync(document_store.set_full)(PRODUCTS, "p1", {"name": "Rice"})

        async_to_sync(document_store.delete)(PRODUCTS, "p1")
        async_to_sync(document_store.delete)(PRODUCTS, "p1")

        assert async_to_sync(document_store.get_by_id)(PRODUCTS, "p1") is None

    def test_allocate_id(self, document_store):
        """Test that allocated ids are unique."""
        first = async_to_sync(document_store.allocate_id)(PRODUCTS)
        second = async_to_sync(document_store.allocate_id)(PRODUCTS)

        assert first != second
        assert len(first) == 32

    def test_database_error_becomes_remote_store_error(self, document_store, monkeypatch):
        """Test that database failures are wrapped."""

        def broken_filter(*args, **kwargs):
            raise DatabaseError("connection lost")

        monkeypatch.setattr(CatalogDocument.objects, "filter", broken_filter)

        with pytest.raises(RemoteStoreError) as exc_info:
            async_to_sync(document_store.get_all)(PRODUCTS)

        assert exc_info.value.code == "REMOTE_STORE_ERROR"

    def test_lost_connection_becomes_remote_store_error(self, document_store, monkeypatch):
        """Test that interface errors on reads and merges are wrapped too."""

        def lost_connection(*args, **kwargs):
            raise InterfaceError("connection already closed")

        monkeypatch.setattr(CatalogDocument.objects, "filter", lost_connection)
        monkeypatch.setattr(CatalogDocument.objects, "select_for_update", lost_connection)

        with pytest.raises(RemoteStoreError):
            async_to_sync(document_store.get_by_id)(PRODUCTS, "p1")
        with pytest.raises(RemoteStoreError):
            async_to_sync(document_store.set_merge)(PRODUCTS, "p1", {"featured": True})

    def test_lost_connection_on_image_update_is_swallowed(self, make_record, monkeypatch):
        """Test that an image update still applies locally when the connection drops."""
        CatalogDocument.objects.create(collection=PRODUCTS, document_id="1", data=make_record("1"))
        manager = build_catalog_manager()
        async_to_sync(manager.load_initial)()

        def lost_connection(*args, **kwargs):
            raise InterfaceError("connection already closed")

        monkeypatch.setattr(CatalogDocument.objects, "select_for_update", lost_connection)

        product = async_to_sync(manager.update_image)("1", "https://images.example.com/new.jpg")

        assert product is not None
        assert manager.get_product("1").image_url.startswith("https://images.example.com/new.jpg")


@pytest.mark.integration
@pytest.mark.django_db
class TestCatalogStateManagerWithDatabase:
    """Tests for the state manager wired to the Django adapters."""

    def test_load_and_feature(self, make_record):
        """Test loading from the database and persisting a featured flag."""
        for product_id in ("1", "2"):
            CatalogDocument.objects.create(
                collection=PRODUCTS, document_id=product_id, data=make_record(product_id)
            )
        manager = build_catalog_manager()

        assert async_to_sync(manager.load_initial)() == SOURCE_REMOTE
        async_to_sync(manager.set_featured)("2", True)

        stored = CatalogDocument.objects.get(collection=PRODUCTS, document_id="2").data
        assert stored["featured"] is True
        assert stored["name"] == "Product 2"
        assert stored["updatedBy"] == manager.settings.system_identity

    def test_cache_survives_database_outage(self, make_record, monkeypatch):
        """Test that a new manager falls back to the cached snapshot."""
        CatalogDocument.objects.create(collection=PRODUCTS, document_id="1", data=make_record("1"))
        async_to_sync(build_catalog_manager().load_initial)()

        def broken_filter(*args, **kwargs):
            raise DatabaseError("connection lost")

        monkeypatch.setattr(CatalogDocument.objects, "filter", broken_filter)
        manager = build_catalog_manager()

        assert async_to_sync(manager.load_initial)() == "cache"
        assert [p.id for p in manager.list_products()] == ["1"]
