"""
Integration tests for the public catalog API and health endpoints.
"""
import pytest
from django.urls import reverse
from rest_framework import status

from catalog.infrastructure.models import CatalogDocument
from catalog.ports.catalog_store import PRODUCTS


@pytest.fixture
def stored_products(db, make_record):
    """Fixture for three stored products, one featured."""
    CatalogDocument.objects.create(
        collection=PRODUCTS, document_id="1", data=make_record("1", category="rice", featured=True)
    )
    CatalogDocument.objects.create(
        collection=PRODUCTS, document_id="2", data=make_record("2", category="oil", price=12.5)
    )
    CatalogDocument.objects.create(
        collection=PRODUCTS, document_id="3", data=make_record("3", category="rice")
    )


@pytest.mark.integration
@pytest.mark.django_db
class TestProductEndpoints:
    """Tests for the public product endpoints."""

    def test_empty_store_serves_seed_catalog(self, api_client):
        """Test that the seed catalog is served when nothing is stored."""
        response = api_client.get(reverse("list-products"))

        assert response.status_code == status.HTTP_200_OK
        assert len(response.data) == 6
        assert response.data[0]["slug"] == "premium-basmati-rice"

    def test_list_products(self, api_client, stored_products):
        """Test listing stored products."""
        response = api_client.get(reverse("list-products"))

        assert response.status_code == status.HTTP_200_OK
        assert [p["id"] for p in response.data] == ["1", "2", "3"]
        product = response.data[1]
        assert product["price"] == 12.5
        assert product["in_stock"] is True
        assert "t=" in product["image_url"]
        assert product["slug"] == "product-2"

    def test_filter_by_category(self, api_client, stored_products):
        """Test the category filter."""
        response = api_client.get(reverse("list-products"), {"category": "rice"})

        assert [p["id"] for p in response.data] == ["1", "3"]

    def test_featured_products(self, api_client, stored_products):
        """Test listing featured products."""
        response = api_client.get(reverse("list-featured-products"))

        assert response.status_code == status.HTTP_200_OK
        assert [p["id"] for p in response.data] == ["1"]

    def test_get_product(self, api_client, stored_products):
        """Test fetching one product."""
        response = api_client.get(reverse("get-product", kwargs={"product_id": "2"}))

        assert response.status_code == status.HTTP_200_OK
        assert response.data["name"] == "Product 2"
        assert response.data["category"] == "oil"

    def test_get_unknown_product(self, api_client, stored_products):
        """Test that unknown products return 404 in the error format."""
        response = api_client.get(reverse("get-product", kwargs={"product_id": "missing"}))

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data["error"]["code"] == "PRODUCT_NOT_FOUND"

    def test_category_keys(self, api_client, stored_products):
        """Test listing the category keys used by products."""
        response = api_client.get(reverse("list-category-keys"))

        assert response.status_code == status.HTTP_200_OK
        assert response.data == [
            {"slug": "rice", "product_count": 2},
            {"slug": "oil", "product_count": 1},
        ]

    def test_correlation_id_is_echoed(self, api_client, stored_products):
        """Test that the correlation id header is propagated."""
        response = api_client.get(reverse("list-products"), HTTP_X_CORRELATION_ID="abc-123")

        assert response["X-Correlation-ID"] == "abc-123"


@pytest.mark.integration
@pytest.mark.django_db
class TestHealthEndpoints:
    """Tests for health endpoints."""

    def test_health(self, client):
        """Test the liveness endpoint."""
        response = client.get(reverse("health"))

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_health_db(self, client):
        """Test the database check."""
        response = client.get(reverse("health-db"))

        assert response.status_code == 200
        assert response.json()["database"] == "connected"

    def test_health_cache(self, client):
        """Test the cache check."""
        response = client.get(reverse("health-cache"))

        assert response.status_code == 200
        assert response.json()["caches"] == {"default": "connected", "catalog": "connected"}

    def test_ready(self, client):
        """Test the readiness endpoint."""
        response = client.get(reverse("ready"))

        assert response.status_code == 200
