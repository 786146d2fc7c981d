"""
Cache adapter implementations.

Provides the Django cache implementation of CachePort.
"""

import logging
from typing import Any, Optional

from asgiref.sync import sync_to_async
from django.core.cache import caches

from core.domain.exceptions import CacheError
from core.infrastructure.cache import CachePort

logger = logging.getLogger(__name__)


class DjangoCacheAdapter(CachePort):
    """
    Django cache adapter implementing CachePort.

    Uses Django's cache framework (file-based, Redis, local memory, ...)
    through a named alias from ``settings.CACHES``.
    """

    def __init__(self, alias: str = "default"):
        """
        Initialize the adapter.

        Args:
            alias: Cache alias from settings.CACHES
        """
        self.alias = alias

    @property
    def _cache(self):
        return caches[self.alias]

    async def get(self, key: str) -> Optional[Any]:
        """
        Get a value from cache.

        Args:
            key: Cache key

        Returns:
            Cached value or None if not found
        """
        try:
            value = await sync_to_async(self._cache.get)(key)
        except Exception as e:  # pylint: disable=broad-exception-caught
            raise CacheError(f"Error reading cache key {key}: {e}") from e
        if value is not None:
            logger.debug("Cache hit: %s", key)
        else:
            logger.debug("Cache miss: %s", key)
        return value

    async def set(self, key: str, value: Any, timeout: Optional[int] = None) -> None:
        """
        Set a value in cache.

        Args:
            key: Cache key
            value: Value to cache
            timeout: Timeout in seconds (None for no expiration)
        """
        try:
            await sync_to_async(self._cache.set)(key, value, timeout=timeout)
        except Exception as e:  # pylint: disable=broad-exception-caught
            raise CacheError(f"Error writing cache key {key}: {e}") from e
        logger.debug("Cache set: %s (timeout=%s)", key, timeout)

    async def delete(self, key: str) -> None:
        """
        Delete a value from cache.

        Args:
            key: Cache key
        """
        try:
            await sync_to_async(self._cache.delete)(key)
        except Exception as e:  # pylint: disable=broad-exception-caught
            raise CacheError(f"Error deleting cache key {key}: {e}") from e
        logger.debug("Cache delete: %s", key)

    async def clear(self) -> None:
        """Clear every entry of the cache."""
        try:
            await sync_to_async(self._cache.clear)()
        except Exception as e:  # pylint: disable=broad-exception-caught
            raise CacheError(f"Error clearing cache {self.alias}: {e}") from e
        logger.debug("Cache cleared: %s", self.alias)
