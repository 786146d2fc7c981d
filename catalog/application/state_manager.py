"""
Catalog state manager.

In-memory authoritative view of the product catalog for the running
process. Every read and write goes through this service: mutations are
validated, written to the remote store, applied in memory and announced
on the event bus, in that order.
"""
import logging
from dataclasses import replace
from typing import Callable, List, Optional

from catalog.application.commands.add_product import AddProductCommand
from catalog.config import CatalogSettings
from catalog.domain.events import ProductAdded, ProductRemoved, ProductUpdated
from catalog.domain.product import Product
from catalog.domain.records import epoch_millis
from catalog.domain.seed import seed_products
from catalog.domain.services import FeaturedProductPolicy, ProductDraftValidator
from catalog.infrastructure.local_cache import LocalCatalogCache
from catalog.ports.catalog_store import PRODUCTS, SERVER_TIMESTAMP, CatalogStore, Document
from catalog.ports.identity import IdentityProvider
from catalog.ports.image_host import ImageHost, ImageUpload
from core.domain.events import EventBus
from core.domain.exceptions import (
    DomainException,
    ImageHostingError,
    MalformedRecordError,
    ProductNotFoundError,
    RemoteStoreError,
    ValidationError,
)
from core.domain.value_objects import ImageUrl
from core.metrics import catalog_loads_total, catalog_mutations_total, catalog_products
from core.metrics import featured_products as featured_products_gauge

logger = logging.getLogger(__name__)

SOURCE_REMOTE = "remote"
SOURCE_CACHE = "cache"
SOURCE_SEED = "seed"


class CatalogStateManager:
    """
    Service owning the in-memory product catalog.

    Validation, capacity and not-found checks happen before any I/O.
    Remote store failures propagate for every mutation except
    ``update_image``, where the in-memory state is updated regardless.
    """

    def __init__(
        self,
        store: CatalogStore,
        local_cache: LocalCatalogCache,
        event_bus: EventBus,
        identity: IdentityProvider,
        image_host: Optional[ImageHost] = None,
        settings: Optional[CatalogSettings] = None,
    ):
        """
        Initialize the manager.

        Args:
            store: Remote catalog store
            local_cache: Local persisted cache
            event_bus: Bus receiving change events
            identity: Source of the acting user's email
            image_host: Image hosting service (uploads disabled if None)
            settings: Catalog options
        """
        self.store = store
        self.local_cache = local_cache
        self.event_bus = event_bus
        self.identity = identity
        self.image_host = image_host
        self.settings = settings or CatalogSettings()
        self._products: List[Product] = []
        self.source: Optional[str] = None

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @property
    def actor(self) -> str:
        """Email stamped into ``updatedBy``: the current user or the system."""
        return self.identity.current_email() or self.settings.system_identity

    @property
    def loaded(self) -> bool:
        return self.source is not None

    def _find(self, product_id: str) -> Optional[Product]:
        for product in self._products:
            if product.id == product_id:
                return product
        return None

    def _require(self, product_id: str) -> Product:
        product = self._find(product_id)
        if product is None:
            raise ProductNotFoundError(f"Product {product_id} not found")
        return product

    def _apply(self, product_id: str, mutate: Callable[[Product], Product]) -> Optional[Product]:
        """
        Apply ``mutate`` to the current in-memory record.

        The record is looked up again so that changes resolved while a
        remote write was pending are kept. A record removed in the
        meantime is left removed.
        """
        for index, product in enumerate(self._products):
            if product.id == product_id:
                updated = mutate(product)
                self._products[index] = updated
                self._refresh_gauges()
                return updated
        logger.info(f"Product {product_id} was removed before its update was applied")
        return None

    def _install(self, products: List[Product], source: str) -> None:
        self._products = list(products)
        self.source = source
        catalog_loads_total.labels(source=source).inc()
        self._refresh_gauges()

    def _refresh_gauges(self) -> None:
        catalog_products.set(len(self._products))
        featured_products_gauge.set(FeaturedProductPolicy.count_featured(self._products))

    @staticmethod
    def _record(operation: str, outcome: str) -> None:
        catalog_mutations_total.labels(operation=operation, outcome=outcome).inc()

    @staticmethod
    def _normalize(documents: List[Document], token: int) -> List[Product]:
        """Decode store documents, skipping malformed ones, and cache-bust images."""
        products = []
        for document_id, data in documents:
            try:
                product = Product.from_record(document_id, data)
            except MalformedRecordError as e:
                logger.warning(f"Skipping product record {document_id}: {e.message}")
                continue
            products.append(product.with_cache_busted_image(token))
        return products

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def load_initial(self) -> str:
        """
        Load the catalog: remote store, then local cache, then seed data.

        A successful remote read replaces the local cache snapshot. This
        method never raises.

        Returns:
            Source of the installed catalog: ``remote``, ``cache`` or ``seed``
        """
        try:
            documents = await self.store.get_all(PRODUCTS)
        except Exception as e:
            logger.warning(f"Remote catalog unavailable, trying local cache: {e}")
        else:
            products = self._normalize(documents, epoch_millis())
            if products:
                self._install(products, SOURCE_REMOTE)
                await self.local_cache.save_products(products)
                logger.info(f"Loaded {len(products)} products from the remote store")
                return SOURCE_REMOTE
            logger.info("Remote catalog is empty, installing seed data")
            self._install(seed_products(), SOURCE_SEED)
            return SOURCE_SEED

        cached = await self.local_cache.load_products()
        if cached:
            token = epoch_millis()
            self._install([p.with_cache_busted_image(token) for p in cached], SOURCE_CACHE)
            logger.info(f"Loaded {len(cached)} products from the local cache")
            return SOURCE_CACHE

        logger.warning("No cached catalog available, installing seed data")
        self._install(seed_products(), SOURCE_SEED)
        return SOURCE_SEED

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list_products(self, category: Optional[str] = None) -> List[Product]:
        """
        List products, optionally restricted to one category.

        Args:
            category: Category key to filter on

        Returns:
            Products in catalog order
        """
        if category is None:
            return list(self._products)
        return [product for product in self._products if product.category == category]

    def get_product(self, product_id: str) -> Optional[Product]:
        """Return the product with ``product_id`` or None."""
        return self._find(product_id)

    def list_categories(self) -> List[str]:
        """Return the distinct category keys in first-seen order."""
        seen: List[str] = []
        for product in self._products:
            if product.category and product.category not in seen:
                seen.append(product.category)
        return seen

    def featured_products(self) -> List[Product]:
        """Return the featured products in catalog order."""
        return [product for product in self._products if product.featured]

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def update_image(self, product_id: str, new_image_url: str) -> Optional[Product]:
        """
        Set a product's image.

        The URL receives a fresh cache-busting token. A remote store
        failure is logged and the in-memory record is updated anyway.

        Args:
            product_id: Product identifier
            new_image_url: Hosted image URL

        Returns:
            Updated product, or None if it was removed meanwhile

        Raises:
            ProductNotFoundError: If the product is unknown
            ValidationError: If the URL is empty
        """
        try:
            self._require(product_id)
            if not new_image_url or not new_image_url.strip():
                raise ValidationError("Image URL is required")
        except DomainException:
            self._record("update_image", "rejected")
            raise

        image_url = str(ImageUrl(new_image_url.strip()).with_cache_buster(epoch_millis()))
        actor = self.actor
        outcome = "success"
        try:
            await self.store.set_merge(
                PRODUCTS,
                product_id,
                {"imageUrl": image_url, "updatedAt": SERVER_TIMESTAMP, "updatedBy": actor},
            )
        except RemoteStoreError as e:
            outcome = "degraded"
            logger.error(f"Error updating image of product {product_id}: {e.message}")

        updated = self._apply(product_id, lambda p: p.with_image(image_url, actor))
        self._record("update_image", outcome)
        if updated is not None:
            await self.event_bus.publish(
                ProductUpdated(aggregate_id=product_id, changes={"imageUrl": image_url})
            )
        return updated

    async def set_featured(self, product_id: str, featured: bool) -> Optional[Product]:
        """
        Set or clear a product's featured flag.

        Args:
            product_id: Product identifier
            featured: New flag value

        Returns:
            Updated product, or None if it was removed meanwhile

        Raises:
            ProductNotFoundError: If the product is unknown
            CapacityExceededError: If the featured limit is already reached
            RemoteStoreError: If the remote write fails
        """
        try:
            self._require(product_id)
            if featured:
                FeaturedProductPolicy.ensure_can_feature(
                    self._products, product_id, self.settings.featured_limit
                )
        except DomainException:
            self._record("set_featured", "rejected")
            raise

        actor = self.actor
        try:
            await self.store.set_merge(
                PRODUCTS,
                product_id,
                {"featured": featured, "updatedAt": SERVER_TIMESTAMP, "updatedBy": actor},
            )
        except RemoteStoreError:
            self._record("set_featured", "failure")
            raise

        updated = self._apply(product_id, lambda p: p.with_featured(featured, actor))
        self._record("set_featured", "success")
        if updated is not None:
            await self.event_bus.publish(
                ProductUpdated(aggregate_id=product_id, changes={"featured": featured})
            )
        return updated

    async def set_in_stock(self, product_id: str, in_stock: bool) -> Optional[Product]:
        """
        Set a product's stock flag.

        Raises:
            ProductNotFoundError: If the product is unknown
            RemoteStoreError: If the remote write fails
        """
        try:
            self._require(product_id)
        except DomainException:
            self._record("set_in_stock", "rejected")
            raise

        actor = self.actor
        try:
            await self.store.set_merge(
                PRODUCTS,
                product_id,
                {"inStock": in_stock, "updatedAt": SERVER_TIMESTAMP, "updatedBy": actor},
            )
        except RemoteStoreError:
            self._record("set_in_stock", "failure")
            raise

        updated = self._apply(product_id, lambda p: p.with_stock(in_stock, actor))
        self._record("set_in_stock", "success")
        if updated is not None:
            await self.event_bus.publish(
                ProductUpdated(aggregate_id=product_id, changes={"inStock": in_stock})
            )
        return updated

    async def add_product(
        self, command: AddProductCommand, image: Optional[ImageUpload] = None
    ) -> str:
        """
        Create a product.

        When ``image`` is given it is uploaded to the ``products`` folder;
        an upload failure falls back to the placeholder image. Without an
        upload or an image URL the placeholder is used.

        Args:
            command: Product fields
            image: Optional image file to host

        Returns:
            Identifier of the new product

        Raises:
            ValidationError: If required fields are missing or invalid
            RemoteStoreError: If the remote write fails
        """
        actor = self.actor
        try:
            ProductDraftValidator.validate(
                command.name, command.description, command.price, command.category
            )
            draft = Product.create(
                product_id="pending",
                name=command.name,
                description=command.description,
                category=command.category,
                image_url="",
                updated_by=actor,
                price=float(command.price),
                slug=command.slug,
                specifications=command.specifications,
            )
        except DomainException:
            self._record("add_product", "rejected")
            raise

        image_url = await self._resolve_new_image(command, image)

        try:
            product_id = await self.store.allocate_id(PRODUCTS)
            product = replace(draft, id=product_id, image_url=image_url)
            record = product.to_record()
            record["updatedAt"] = SERVER_TIMESTAMP
            await self.store.set_full(PRODUCTS, product_id, record)
        except RemoteStoreError:
            self._record("add_product", "failure")
            raise

        self._products.append(product)
        self._refresh_gauges()
        self._record("add_product", "success")
        logger.info(f"Added product {product_id} ({product.slug}) by {actor}")
        await self.event_bus.publish(
            ProductAdded(aggregate_id=product_id, changes=product.to_record())
        )
        return product_id

    async def _resolve_new_image(
        self, command: AddProductCommand, image: Optional[ImageUpload]
    ) -> str:
        placeholder = self.settings.placeholder_image_url
        if image is None:
            return command.image_url or placeholder
        if self.image_host is None:
            logger.warning("Image hosting is disabled, using placeholder image")
            return placeholder
        try:
            return await self.image_host.upload(image, "products")
        except ImageHostingError as e:
            logger.error(f"Error uploading image for product {command.name}: {e.message}")
            return placeholder

    async def remove_product(self, product_id: str) -> bool:
        """
        Delete a product.

        The remote delete is always issued and references in the local
        cache are purged. Removing an unknown product is a silent no-op.

        Args:
            product_id: Product identifier

        Returns:
            True if a product was removed from the in-memory catalog

        Raises:
            RemoteStoreError: If the remote delete fails
        """
        try:
            await self.store.delete(PRODUCTS, product_id)
        except RemoteStoreError:
            self._record("remove_product", "failure")
            raise

        before = len(self._products)
        self._products = [product for product in self._products if product.id != product_id]
        removed = len(self._products) != before
        self._refresh_gauges()

        await self.local_cache.purge_product(product_id)
        self._record("remove_product", "success")

        if removed:
            logger.info(f"Removed product {product_id}")
            await self.event_bus.publish(ProductRemoved(aggregate_id=product_id))
            await self.event_bus.publish(
                ProductUpdated(aggregate_id=product_id, changes={"deleted": True})
            )
        return removed

    async def replace_product_image(self, product_id: str, upload: ImageUpload) -> Optional[Product]:
        """
        Upload a new image for a product and apply it.

        Raises:
            ProductNotFoundError: If the product is unknown
            ImageHostingError: If the upload fails or hosting is disabled
        """
        self._require(product_id)
        if self.image_host is None:
            raise ImageHostingError("Image hosting is not configured")
        image_url = await self.image_host.replace(upload, f"products/{product_id}")
        return await self.update_image(product_id, image_url)
