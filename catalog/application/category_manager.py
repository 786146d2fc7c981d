"""
Category manager.

Administers the ``categories`` collection. Unlike products, categories
are read from the remote store on demand and are soft-deleted.
"""
import logging
from dataclasses import replace
from typing import List, Optional

from catalog.application.commands.add_category import AddCategoryCommand
from catalog.config import CatalogSettings
from catalog.domain.category import Category
from catalog.domain.events import CategoryUpdated, RefreshCategories
from catalog.domain.records import epoch_millis
from catalog.infrastructure.local_cache import LocalCatalogCache
from catalog.ports.catalog_store import CATEGORIES, SERVER_TIMESTAMP, CatalogStore
from catalog.ports.identity import IdentityProvider
from catalog.ports.image_host import ImageHost, ImageUpload
from core.domain.events import EventBus
from core.domain.exceptions import (
    CategoryNotFoundError,
    ImageHostingError,
    MalformedRecordError,
    ValidationError,
)
from core.domain.value_objects import ImageUrl
from core.metrics import catalog_mutations_total

logger = logging.getLogger(__name__)


class CategoryManager:
    """Service for listing and administering categories."""

    def __init__(
        self,
        store: CatalogStore,
        local_cache: LocalCatalogCache,
        event_bus: EventBus,
        identity: IdentityProvider,
        image_host: Optional[ImageHost] = None,
        settings: Optional[CatalogSettings] = None,
    ):
        """Initialize the manager with its collaborators."""
        self.store = store
        self.local_cache = local_cache
        self.event_bus = event_bus
        self.identity = identity
        self.image_host = image_host
        self.settings = settings or CatalogSettings()

    @property
    def actor(self) -> str:
        return self.identity.current_email() or self.settings.system_identity

    async def _announce(self, category_id: str, changes: dict) -> None:
        await self.event_bus.publish(CategoryUpdated(aggregate_id=category_id, changes=changes))
        await self.event_bus.publish(RefreshCategories(aggregate_id=category_id))

    async def _require(self, category_id: str) -> None:
        if await self.store.get_by_id(CATEGORIES, category_id) is None:
            raise CategoryNotFoundError(f"Category {category_id} not found")

    async def list_categories(self) -> List[Category]:
        """
        List categories that are not deleted.

        Images recorded in the local category cache replace the stored
        ones when the cache entry is newer than the record.

        Returns:
            Categories in store order

        Raises:
            RemoteStoreError: If the store cannot be read
        """
        documents = await self.store.get_all(CATEGORIES)
        cached_images = await self.local_cache.category_images()

        categories = []
        for document_id, data in documents:
            try:
                category = Category.from_record(document_id, data)
            except MalformedRecordError as e:
                logger.warning(f"Skipping category record {document_id}: {e.message}")
                continue
            if category.deleted:
                continue

            entry = cached_images.get(category.id)
            if entry:
                cached_url = entry.get("imageUrl") or entry.get("image")
                timestamp = entry.get("timestamp")
                if (
                    cached_url
                    and isinstance(timestamp, (int, float))
                    and timestamp > epoch_millis(category.updated_at)
                ):
                    category = replace(category, image_url=cached_url)
            categories.append(category)
        return categories

    async def add_category(self, command: AddCategoryCommand) -> str:
        """
        Create a category.

        Args:
            command: Category title and optional image URL

        Returns:
            Identifier of the new category

        Raises:
            ValidationError: If the title is blank
            RemoteStoreError: If the remote write fails
        """
        draft = Category.create(
            category_id="pending",
            title=command.title,
            updated_by=self.actor,
            image_url=command.image_url,
        )
        category_id = await self.store.allocate_id(CATEGORIES)
        category = replace(draft, id=category_id)
        record = category.to_record()
        record["updatedAt"] = SERVER_TIMESTAMP
        await self.store.set_full(CATEGORIES, category_id, record)

        catalog_mutations_total.labels(operation="add_category", outcome="success").inc()
        logger.info(f"Added category {category_id} ({category.slug})")
        await self.event_bus.publish(
            RefreshCategories(aggregate_id=category_id, changes=category.to_record())
        )
        return category_id

    async def remove_category(self, category_id: str) -> None:
        """
        Soft-delete a category.

        Raises:
            CategoryNotFoundError: If the category does not exist
            RemoteStoreError: If the remote store fails
        """
        await self._require(category_id)
        await self.store.set_merge(
            CATEGORIES,
            category_id,
            {"deleted": True, "updatedAt": SERVER_TIMESTAMP, "updatedBy": self.actor},
        )
        catalog_mutations_total.labels(operation="remove_category", outcome="success").inc()
        logger.info(f"Category {category_id} marked as deleted")
        await self._announce(category_id, {"deleted": True})

    async def update_category_image(self, category_id: str, image_url: str) -> str:
        """
        Set a category's image.

        Args:
            category_id: Category identifier
            image_url: Hosted image URL

        Returns:
            The stored, cache-busted URL

        Raises:
            ValidationError: If the URL is empty
            CategoryNotFoundError: If the category does not exist
            RemoteStoreError: If the remote store fails
        """
        if not image_url or not image_url.strip():
            raise ValidationError("Image URL is required")
        await self._require(category_id)

        token = epoch_millis()
        busted = str(ImageUrl(image_url.strip()).with_cache_buster(token))
        await self.store.set_merge(
            CATEGORIES,
            category_id,
            {
                "image": busted,
                "imageUrl": busted,
                "updatedAt": SERVER_TIMESTAMP,
                "updatedBy": self.actor,
            },
        )
        await self.local_cache.remember_category_image(category_id, busted, timestamp=token)

        catalog_mutations_total.labels(operation="update_category_image", outcome="success").inc()
        await self._announce(category_id, {"image": busted, "imageUrl": busted})
        return busted

    async def upload_category_image(self, category_id: str, upload: ImageUpload) -> str:
        """
        Upload and apply a new category image.

        Raises:
            ImageHostingError: If the upload fails or hosting is disabled
        """
        if self.image_host is None:
            raise ImageHostingError("Image hosting is not configured")
        image_url = await self.image_host.replace(upload, f"categories/{category_id}")
        return await self.update_category_image(category_id, image_url)
