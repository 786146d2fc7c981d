"""
Catalog store port (interface).

This defines the contract of the remote document store holding the
``products`` and ``categories`` collections. Implementations are in the
infrastructure layer and raise ``RemoteStoreError`` on any failure.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple

PRODUCTS = "products"
CATEGORIES = "categories"


class _ServerTimestamp:
    """Sentinel replaced by the store's own clock when a document is written."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "SERVER_TIMESTAMP"


SERVER_TIMESTAMP = _ServerTimestamp()

Document = Tuple[str, Dict[str, Any]]


class CatalogStore(ABC):
    """
    Abstract document store for catalog records.

    This is a port in hexagonal architecture - it defines
    what operations are available, not how they're implemented.
    Writes to different documents are not transactional.
    """

    @abstractmethod
    async def get_all(self, collection: str) -> List[Document]:
        """
        Fetch every document of a collection.

        Args:
            collection: Collection name

        Returns:
            List of (document_id, data) pairs
        """
        pass

    @abstractmethod
    async def get_by_id(self, collection: str, document_id: str) -> Optional[Dict[str, Any]]:
        """
        Fetch one document.

        Args:
            collection: Collection name
            document_id: Document identifier

        Returns:
            Document data or None if not found
        """
        pass

    @abstractmethod
    async def set_merge(
        self, collection: str, document_id: str, fields: Dict[str, Any]
    ) -> None:
        """
        Merge fields into a document, creating it if needed.

        Fields not mentioned are left untouched.

        Args:
            collection: Collection name
            document_id: Document identifier
            fields: Partial document
        """
        pass

    @abstractmethod
    async def set_full(
        self, collection: str, document_id: str, record: Dict[str, Any]
    ) -> None:
        """
        Replace a document entirely.

        Args:
            collection: Collection name
            document_id: Document identifier
            record: Full document
        """
        pass

    @abstractmethod
    async def delete(self, collection: str, document_id: str) -> None:
        """
        Delete a document. Deleting a missing document is not an error.

        Args:
            collection: Collection name
            document_id: Document identifier
        """
        pass

    @abstractmethod
    async def allocate_id(self, collection: str) -> str:
        """
        Allocate a new document identifier.

        Args:
            collection: Collection name

        Returns:
            Fresh identifier
        """
        pass
