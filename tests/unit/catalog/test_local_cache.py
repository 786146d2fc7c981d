"""
Unit tests for the local catalog cache.
"""
import json

import pytest

from catalog.domain.product import Product
from catalog.infrastructure.local_cache import CATEGORY_CACHE_KEY, PRODUCTS_KEY


def products():
    return [
        Product.from_record("1", {"name": "Rice", "category": "rice"}),
        Product.from_record("2", {"name": "Oil", "category": "oil", "price": 4}),
    ]


class TestProductSnapshot:
    """Tests for the cached product list."""

    @pytest.mark.asyncio
    async def test_save_and_load(self, local_cache, cache_backend):
        """Test that saved products load back."""
        assert await local_cache.save_products(products()) is True

        loaded = await local_cache.load_products()

        assert [p.id for p in loaded] == ["1", "2"]
        assert loaded[1].price == 4.0
        assert isinstance(cache_backend.data[PRODUCTS_KEY], str)

    @pytest.mark.asyncio
    async def test_load_nothing_cached(self, local_cache):
        """Test that an empty cache yields None."""
        assert await local_cache.load_products() is None

    @pytest.mark.asyncio
    async def test_load_skips_bad_entries(self, local_cache, cache_backend):
        """Test that undecodable cached records are dropped."""
        cache_backend.data[PRODUCTS_KEY] = json.dumps([{"id": "1", "name": "Rice"}, {"id": "2"}, "junk"])

        loaded = await local_cache.load_products()

        assert [p.id for p in loaded] == ["1"]

    @pytest.mark.asyncio
    async def test_load_invalid_json(self, local_cache, cache_backend):
        """Test that a corrupt value yields None."""
        cache_backend.data[PRODUCTS_KEY] = "{not json"

        assert await local_cache.load_products() is None

    @pytest.mark.asyncio
    async def test_load_non_array(self, local_cache, cache_backend):
        """Test that a value that is not an array yields None."""
        cache_backend.data[PRODUCTS_KEY] = json.dumps({"id": "1"})

        assert await local_cache.load_products() is None

    @pytest.mark.asyncio
    async def test_backend_failures_are_swallowed(self, local_cache, cache_backend):
        """Test that backend errors surface as missing values."""
        cache_backend.fail = True

        assert await local_cache.save_products(products()) is False
        assert await local_cache.load_products() is None
        assert await local_cache.category_images() == {}
        assert await local_cache.remember_category_image("rice", "https://img.example.com/r.jpg") is False
        await local_cache.purge_product("1")


class TestCategoryImages:
    """Tests for cached category images."""

    @pytest.mark.asyncio
    async def test_remember_merges_entries(self, local_cache, cache_backend):
        """Test that entries for several categories are kept side by side."""
        await local_cache.remember_category_image("rice", "https://img.example.com/r.jpg?t=1", timestamp=1)
        await local_cache.remember_category_image("oil", "https://img.example.com/o.jpg?t=2", timestamp=2)

        entries = await local_cache.category_images()

        assert entries == {
            "rice": {"image": "https://img.example.com/r.jpg?t=1", "imageUrl": "https://img.example.com/r.jpg?t=1", "timestamp": 1},
            "oil": {"image": "https://img.example.com/o.jpg?t=2", "imageUrl": "https://img.example.com/o.jpg?t=2", "timestamp": 2},
        }

    @pytest.mark.asyncio
    async def test_remember_replaces_corrupt_value(self, local_cache, cache_backend):
        """Test that a non-object value is overwritten."""
        cache_backend.data[CATEGORY_CACHE_KEY] = json.dumps(["junk"])

        await local_cache.remember_category_image("rice", "https://img.example.com/r.jpg")

        entries = await local_cache.category_images()
        assert list(entries) == ["rice"]
        assert isinstance(entries["rice"]["timestamp"], int)


class TestPurgeProduct:
    """Tests for purging product references."""

    @pytest.mark.asyncio
    async def test_purge_every_list(self, local_cache, cache_backend):
        """Test that the product disappears from the snapshot and auxiliary lists."""
        await local_cache.save_products(products())
        cache_backend.data["recentProducts"] = json.dumps([{"id": "1"}, {"id": "2"}])
        cache_backend.data["featuredProducts"] = json.dumps([{"productId": "1"}])
        cache_backend.data["viewedProducts"] = "{corrupt"

        await local_cache.purge_product("1")

        assert [p.id for p in await local_cache.load_products()] == ["2"]
        assert json.loads(cache_backend.data["recentProducts"]) == [{"id": "2"}]
        assert json.loads(cache_backend.data["featuredProducts"]) == []
        assert cache_backend.data["viewedProducts"] == "{corrupt"

    @pytest.mark.asyncio
    async def test_purge_unknown_product_leaves_lists(self, local_cache, cache_backend):
        """Test that nothing is rewritten when the product is absent."""
        cache_backend.data["recentProducts"] = json.dumps([{"id": "2"}])

        await local_cache.purge_product("9")

        assert cache_backend.data["recentProducts"] == json.dumps([{"id": "2"}])
