"""
Local catalog cache.

Best-effort mirror of the catalog kept in the local persisted cache.
Every failure is logged and swallowed: callers only ever see a missing
value.
"""
import json
import logging
from typing import Any, Dict, Iterable, List, Optional

from catalog.domain.product import Product
from catalog.domain.records import epoch_millis
from core.domain.exceptions import CacheError, MalformedRecordError
from core.infrastructure.cache import CachePort
from core.metrics import cache_errors_total

logger = logging.getLogger(__name__)

PRODUCTS_KEY = "products"
CATEGORY_CACHE_KEY = "categoryCache"
AUXILIARY_PRODUCT_KEYS = ("recentProducts", "viewedProducts", "featuredProducts")


class LocalCatalogCache:
    """
    Catalog view over a CachePort.

    Values are stored as JSON strings:
    - ``products``: array of product records
    - ``categoryCache``: object mapping category id to
      ``{"image", "imageUrl", "timestamp"}``
    - auxiliary lists (recently viewed, ...): arrays of objects carrying
      an ``id`` or ``productId``
    """

    def __init__(self, cache: CachePort):
        """
        Initialize the cache.

        Args:
            cache: Persistent cache backend
        """
        self.cache = cache

    async def _read_json(self, key: str) -> Optional[Any]:
        raw = await self.cache.get(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except (TypeError, ValueError) as e:
            raise CacheError(f"Cache key {key} does not hold JSON: {e}") from e

    async def _write_json(self, key: str, value: Any) -> None:
        await self.cache.set(key, json.dumps(value), timeout=None)

    async def save_products(self, products: Iterable[Product]) -> bool:
        """
        Persist the product list.

        Returns:
            True if the list was written
        """
        try:
            await self._write_json(PRODUCTS_KEY, [product.to_record() for product in products])
            return True
        except CacheError as e:
            cache_errors_total.labels(operation="save_products").inc()
            logger.warning("Could not cache product list: %s", e.message)
            return False

    async def load_products(self) -> Optional[List[Product]]:
        """
        Read the cached product list.

        Records that no longer decode are skipped.

        Returns:
            Cached products, or None when nothing usable is cached
        """
        try:
            records = await self._read_json(PRODUCTS_KEY)
        except CacheError as e:
            cache_errors_total.labels(operation="load_products").inc()
            logger.warning("Could not read cached product list: %s", e.message)
            return None
        if not isinstance(records, list):
            if records is not None:
                logger.warning("Cached product list is not an array, ignoring it")
            return None

        products = []
        for record in records:
            try:
                products.append(Product.from_record("", record))
            except MalformedRecordError as e:
                logger.warning("Skipping cached product: %s", e.message)
        return products or None

    async def remember_category_image(
        self, category_id: str, image_url: str, timestamp: Optional[int] = None
    ) -> bool:
        """
        Record the latest image of a category.

        Args:
            category_id: Category identifier
            image_url: Image URL (already cache-busted)
            timestamp: Epoch milliseconds of the update (default: now)

        Returns:
            True if the entry was written
        """
        try:
            entries = await self._read_json(CATEGORY_CACHE_KEY)
            if not isinstance(entries, dict):
                entries = {}
            entries[category_id] = {
                "image": image_url,
                "imageUrl": image_url,
                "timestamp": timestamp if timestamp is not None else epoch_millis(),
            }
            await self._write_json(CATEGORY_CACHE_KEY, entries)
            return True
        except CacheError as e:
            cache_errors_total.labels(operation="remember_category_image").inc()
            logger.warning("Could not cache image of category %s: %s", category_id, e.message)
            return False

    async def category_images(self) -> Dict[str, Dict[str, Any]]:
        """
        Read cached category images.

        Returns:
            Mapping of category id to cached image fields (empty on failure)
        """
        try:
            entries = await self._read_json(CATEGORY_CACHE_KEY)
        except CacheError as e:
            cache_errors_total.labels(operation="category_images").inc()
            logger.warning("Could not read category image cache: %s", e.message)
            return {}
        if not isinstance(entries, dict):
            return {}
        return {key: value for key, value in entries.items() if isinstance(value, dict)}

    async def purge_product(self, product_id: str) -> None:
        """
        Drop every cached reference to a product.

        Covers the product snapshot and the auxiliary lists. Each key is
        handled independently; a failing key does not stop the others.
        """
        for key in (PRODUCTS_KEY,) + AUXILIARY_PRODUCT_KEYS:
            try:
                items = await self._read_json(key)
                if not isinstance(items, list):
                    continue
                kept = [
                    item
                    for item in items
                    if not (
                        isinstance(item, dict)
                        and product_id in (item.get("id"), item.get("productId"))
                    )
                ]
                if len(kept) != len(items):
                    await self._write_json(key, kept)
                    logger.debug("Purged product %s from cache key %s", product_id, key)
            except CacheError as e:
                cache_errors_total.labels(operation="purge_product").inc()
                logger.warning("Error clearing %s cache: %s", key, e.message)
