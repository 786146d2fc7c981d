"""
Django implementation of the CatalogStore port.

Documents live in the ``catalog_documents`` table as JSON bodies. The
``SERVER_TIMESTAMP`` sentinel is resolved at write time and stored as an
ISO-8601 string.
"""
import logging
import uuid
from typing import Any, Dict, List, Optional

from asgiref.sync import sync_to_async
from django.db import Error as DBError, transaction
from django.utils import timezone

from catalog.infrastructure.models import CatalogDocument
from catalog.ports.catalog_store import SERVER_TIMESTAMP, CatalogStore, Document
from core.domain.exceptions import RemoteStoreError
from core.metrics import remote_store_errors_total

logger = logging.getLogger(__name__)


def _resolve_server_values(fields: Dict[str, Any]) -> Dict[str, Any]:
    """Replace SERVER_TIMESTAMP sentinels with the current time."""
    now = timezone.now().isoformat()
    return {key: (now if value is SERVER_TIMESTAMP else value) for key, value in fields.items()}


class DjangoDocumentStore(CatalogStore):
    """
    Django ORM implementation of CatalogStore.

    This adapter:
    1. Maps collections and document ids onto CatalogDocument rows
    2. Resolves server timestamps at write time
    3. Wraps database failures in RemoteStoreError
    """

    def _fail(self, operation: str, collection: str, error: Exception) -> RemoteStoreError:
        remote_store_errors_total.labels(operation=operation).inc()
        logger.error("Catalog store %s on %s failed: %s", operation, collection, error)
        return RemoteStoreError(f"Failed to {operation.replace('_', ' ')} in {collection}: {error}")

    @sync_to_async
    def get_all(self, collection: str) -> List[Document]:
        """
        Fetch every document of a collection.

        Args:
            collection: Collection name

        Returns:
            List of (document_id, data) pairs
        """
        try:
            rows = CatalogDocument.objects.filter(collection=collection).order_by("created_at", "id")
            documents = [(row.document_id, dict(row.data or {})) for row in rows]
        except DBError as e:
            raise self._fail("get_all", collection, e) from e
        logger.debug("Fetched %d documents from %s", len(documents), collection)
        return documents

    @sync_to_async
    def get_by_id(self, collection: str, document_id: str) -> Optional[Dict[str, Any]]:
        """
        Fetch one document.

        Args:
            collection: Collection name
            document_id: Document identifier

        Returns:
            Document data or None if not found
        """
        try:
            row = CatalogDocument.objects.filter(
                collection=collection, document_id=document_id
            ).first()
        except DBError as e:
            raise self._fail("get_by_id", collection, e) from e
        return dict(row.data or {}) if row else None

    @sync_to_async
    def set_merge(self, collection: str, document_id: str, fields: Dict[str, Any]) -> None:
        """
        Merge fields into a document, creating it if needed.

        Args:
            collection: Collection name
            document_id: Document identifier
            fields: Partial document
        """
        try:
            with transaction.atomic():
                row, _ = CatalogDocument.objects.select_for_update().get_or_create(
                    collection=collection,
                    document_id=document_id,
                    defaults={"data": {}},
                )
                data = dict(row.data or {})
                data.update(_resolve_server_values(fields))
                row.data = data
                row.save(update_fields=["data", "updated_at"])
        except DBError as e:
            raise self._fail("set_merge", collection, e) from e
        logger.debug("Merged %s into %s/%s", sorted(fields), collection, document_id)

    @sync_to_async
    def set_full(self, collection: str, document_id: str, record: Dict[str, Any]) -> None:
        """
        Replace a document entirely.

        Args:
            collection: Collection name
            document_id: Document identifier
            record: Full document
        """
        try:
            CatalogDocument.objects.update_or_create(
                collection=collection,
                document_id=document_id,
                defaults={"data": _resolve_server_values(record)},
            )
        except DBError as e:
            raise self._fail("set_full", collection, e) from e
        logger.debug("Wrote %s/%s", collection, document_id)

    @sync_to_async
    def delete(self, collection: str, document_id: str) -> None:
        """
        Delete a document. Deleting a missing document is not an error.

        Args:
            collection: Collection name
            document_id: Document identifier
        """
        try:
            deleted, _ = CatalogDocument.objects.filter(
                collection=collection, document_id=document_id
            ).delete()
        except DBError as e:
            raise self._fail("delete", collection, e) from e
        logger.debug("Deleted %s/%s (%d row(s))", collection, document_id, deleted)

    async def allocate_id(self, collection: str) -> str:
        """
        Allocate a new document identifier.

        Args:
            collection: Collection name

        Returns:
            Fresh identifier
        """
        return uuid.uuid4().hex
