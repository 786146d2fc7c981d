"""
Integration tests for the catalog administration API.
"""
import pytest
from django.db import DatabaseError
from django.urls import reverse
from rest_framework import status

from catalog.infrastructure.models import CatalogDocument
from catalog.ports.catalog_store import CATEGORIES, PRODUCTS


def stored(collection, document_id):
    return CatalogDocument.objects.get(collection=collection, document_id=document_id).data


@pytest.fixture
def stored_products(db, make_record):
    """Fixture for five stored products, the first three featured."""
    for index in range(1, 6):
        CatalogDocument.objects.create(
            collection=PRODUCTS,
            document_id=str(index),
            data=make_record(str(index), featured=index <= 3),
        )


@pytest.fixture
def stored_categories(db):
    """Fixture for two stored categories."""
    for slug, title in (("rice", "Rice"), ("oil", "Oil")):
        CatalogDocument.objects.create(
            collection=CATEGORIES,
            document_id=slug,
            data={
                "title": title,
                "slug": slug,
                "imageUrl": f"https://img.example.com/{slug}.jpg",
                "productCount": 1,
                "updatedAt": "2024-01-01T00:00:00+00:00",
                "deleted": False,
            },
        )


@pytest.mark.integration
@pytest.mark.django_db
class TestAdminAccess:
    """Tests for the admin gate."""

    def test_anonymous_request_is_rejected(self, api_client, stored_products):
        """Test that anonymous users get 401."""
        response = api_client.patch(
            reverse("admin-set-product-stock", kwargs={"product_id": "1"}),
            {"in_stock": False},
            format="json",
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["error"]["code"] == "AUTHENTICATION_REQUIRED"
        assert stored(PRODUCTS, "1")["inStock"] is True

    def test_non_staff_request_is_rejected(self, api_client, customer_user, stored_products):
        """Test that signed-in non-staff users get 403."""
        api_client.force_login(customer_user)

        response = api_client.post(reverse("admin-reload-catalog"))

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json()["error"]["code"] == "ADMIN_REQUIRED"

    def test_responses_are_not_cacheable(self, staff_client, stored_categories):
        """Test the cache headers of admin responses."""
        response = staff_client.get(reverse("admin-categories"))

        assert response.status_code == status.HTTP_200_OK
        assert response["Cache-Control"] == "no-store, max-age=0"
        assert response["Pragma"] == "no-cache"
        assert response["Expires"] == "0"

    def test_rejections_are_not_cacheable(self, api_client):
        """Test that 401 responses are marked non-cacheable too."""
        response = api_client.get(reverse("admin-categories"))

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response["Cache-Control"] == "no-store, max-age=0"

    def test_public_catalog_is_cacheable(self, api_client, stored_products):
        """Test that public endpoints are not affected by the gate."""
        response = api_client.get(reverse("list-products"))

        assert response.status_code == status.HTTP_200_OK
        assert "no-store" not in response.get("Cache-Control", "")


@pytest.mark.integration
@pytest.mark.django_db
class TestProductAdministration:
    """Tests for product administration endpoints."""

    def test_add_product(self, staff_client, stored_products):
        """Test creating a product stamped with the staff email."""
        response = staff_client.post(
            reverse("admin-add-product"),
            {
                "name": "Test Rice",
                "description": "Parboiled",
                "price": 10,
                "category": "rice",
                "specifications": {"Origin": "Punjab"},
            },
            format="json",
        )

        assert response.status_code == status.HTTP_201_CREATED
        product_id = response.data["id"]
        document = stored(PRODUCTS, product_id)
        assert document["slug"] == "test-rice"
        assert document["updatedBy"] == "admin@b2b-showcase.com"
        assert document["specifications"] == {"Origin": "Punjab"}

        detail = staff_client.get(reverse("get-product", kwargs={"product_id": product_id}))
        assert detail.data["featured"] is False
        assert detail.data["in_stock"] is True

    def test_add_product_with_missing_fields(self, staff_client, stored_products):
        """Test that incomplete drafts are rejected."""
        response = staff_client.post(
            reverse("admin-add-product"), {"name": "Test Rice"}, format="json"
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["error"]["code"] == "VALIDATION_ERROR"
        assert CatalogDocument.objects.filter(collection=PRODUCTS).count() == 5

    def test_feature_product_over_limit(self, staff_client, stored_products):
        """Test that the fourth featured product is rejected with 409."""
        response = staff_client.patch(
            reverse("admin-set-product-featured", kwargs={"product_id": "4"}),
            {"featured": True},
            format="json",
        )

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data["error"]["code"] == "FEATURED_CAPACITY_EXCEEDED"
        assert stored(PRODUCTS, "4")["featured"] is False

    def test_unfeature_then_feature(self, staff_client, stored_products):
        """Test swapping a featured product."""
        url = "admin-set-product-featured"
        first = staff_client.patch(reverse(url, kwargs={"product_id": "1"}), {"featured": False}, format="json")
        second = staff_client.patch(reverse(url, kwargs={"product_id": "4"}), {"featured": True}, format="json")

        assert first.status_code == status.HTTP_200_OK
        assert second.status_code == status.HTTP_200_OK
        assert second.data["featured"] is True
        featured = staff_client.get(reverse("list-featured-products"))
        assert [p["id"] for p in featured.data] == ["2", "3", "4"]

    def test_feature_unknown_product(self, staff_client, stored_products):
        """Test that unknown products return 404."""
        response = staff_client.patch(
            reverse("admin-set-product-featured", kwargs={"product_id": "missing"}),
            {"featured": True},
            format="json",
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_invalid_body(self, staff_client, stored_products):
        """Test that a body without the flag is rejected."""
        response = staff_client.patch(
            reverse("admin-set-product-stock", kwargs={"product_id": "1"}), {}, format="json"
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "in_stock" in response.data["error"]["details"]

    def test_set_stock(self, staff_client, stored_products):
        """Test updating the stock flag."""
        response = staff_client.patch(
            reverse("admin-set-product-stock", kwargs={"product_id": "2"}),
            {"in_stock": False},
            format="json",
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data["in_stock"] is False
        assert response.data["updated_by"] == "admin@b2b-showcase.com"
        assert stored(PRODUCTS, "2")["inStock"] is False

    def test_store_failure_returns_bad_gateway(self, staff_client, stored_products, monkeypatch):
        """Test that remote store failures map to 502."""
        staff_client.get(reverse("list-products"))

        def broken_select_for_update(*args, **kwargs):
            raise DatabaseError("connection lost")

        monkeypatch.setattr(CatalogDocument.objects, "select_for_update", broken_select_for_update)

        response = staff_client.patch(
            reverse("admin-set-product-stock", kwargs={"product_id": "2"}),
            {"in_stock": False},
            format="json",
        )

        assert response.status_code == status.HTTP_502_BAD_GATEWAY
        assert response.data["error"]["code"] == "REMOTE_STORE_ERROR"

    def test_update_image_url(self, staff_client, stored_products):
        """Test setting an image from a URL."""
        response = staff_client.patch(
            reverse("admin-update-product-image", kwargs={"product_id": "3"}),
            {"image_url": "https://img.example.com/new.jpg"},
            format="json",
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data["image_url"].startswith("https://img.example.com/new.jpg?t=")
        assert stored(PRODUCTS, "3")["imageUrl"] == response.data["image_url"]

    def test_update_image_requires_one_source(self, staff_client, stored_products):
        """Test that an empty image request is rejected."""
        response = staff_client.patch(
            reverse("admin-update-product-image", kwargs={"product_id": "3"}), {}, format="json"
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_remove_product(self, staff_client, stored_products):
        """Test deleting a product."""
        response = staff_client.delete(reverse("admin-remove-product", kwargs={"product_id": "5"}))

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert not CatalogDocument.objects.filter(collection=PRODUCTS, document_id="5").exists()
        listing = staff_client.get(reverse("list-products"))
        assert [p["id"] for p in listing.data] == ["1", "2", "3", "4"]

    def test_remove_unknown_product(self, staff_client, stored_products):
        """Test that deleting an unknown product succeeds without effect."""
        response = staff_client.delete(reverse("admin-remove-product", kwargs={"product_id": "missing"}))

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert CatalogDocument.objects.filter(collection=PRODUCTS).count() == 5

    def test_reload_catalog(self, staff_client, stored_products):
        """Test reloading picks up documents written behind the service's back."""
        staff_client.get(reverse("list-products"))
        CatalogDocument.objects.filter(collection=PRODUCTS, document_id="5").delete()

        response = staff_client.post(reverse("admin-reload-catalog"))

        assert response.status_code == status.HTTP_200_OK
        assert response.data == {"source": "remote", "products": 4}


@pytest.mark.integration
@pytest.mark.django_db
class TestCategoryAdministration:
    """Tests for category administration endpoints."""

    def test_list_categories(self, staff_client, stored_categories):
        """Test listing categories."""
        response = staff_client.get(reverse("admin-categories"))

        assert response.status_code == status.HTTP_200_OK
        assert [c["id"] for c in response.data] == ["rice", "oil"]
        assert response.data[0]["product_count"] == 1

    def test_add_category(self, staff_client, stored_categories):
        """Test creating a category."""
        response = staff_client.post(
            reverse("admin-categories"), {"title": "Raw Polymers"}, format="json"
        )

        assert response.status_code == status.HTTP_201_CREATED
        document = stored(CATEGORIES, response.data["id"])
        assert document["slug"] == "raw-polymers"
        assert document["updatedBy"] == "admin@b2b-showcase.com"

    def test_add_category_with_blank_title(self, staff_client, stored_categories):
        """Test that a blank title is rejected."""
        response = staff_client.post(reverse("admin-categories"), {"title": " "}, format="json")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["error"]["code"] == "VALIDATION_ERROR"

    def test_remove_category(self, staff_client, stored_categories):
        """Test soft-deleting a category."""
        response = staff_client.delete(reverse("admin-remove-category", kwargs={"category_id": "oil"}))

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert stored(CATEGORIES, "oil")["deleted"] is True
        listing = staff_client.get(reverse("admin-categories"))
        assert [c["id"] for c in listing.data] == ["rice"]

    def test_remove_unknown_category(self, staff_client, stored_categories):
        """Test that unknown categories return 404."""
        response = staff_client.delete(reverse("admin-remove-category", kwargs={"category_id": "salt"}))

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data["error"]["code"] == "CATEGORY_NOT_FOUND"

    def test_update_category_image(self, staff_client, stored_categories):
        """Test setting a category image from a URL."""
        response = staff_client.patch(
            reverse("admin-update-category-image", kwargs={"category_id": "rice"}),
            {"image_url": "https://img.example.com/rice-new.jpg"},
            format="json",
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data["id"] == "rice"
        assert response.data["image_url"].startswith("https://img.example.com/rice-new.jpg?t=")
        document = stored(CATEGORIES, "rice")
        assert document["image"] == document["imageUrl"] == response.data["image_url"]

        listing = staff_client.get(reverse("admin-categories"))
        assert listing.data[0]["image_url"] == response.data["image_url"]

    def test_upload_without_image_host(self, staff_client, stored_categories):
        """Test that file uploads fail with 502 when image hosting is disabled."""
        from django.core.files.uploadedfile import SimpleUploadedFile

        upload = SimpleUploadedFile("rice.jpg", b"\xff\xd8\xff", content_type="image/jpeg")

        response = staff_client.patch(
            reverse("admin-update-category-image", kwargs={"category_id": "rice"}),
            {"image": upload},
            format="multipart",
        )

        assert response.status_code == status.HTTP_502_BAD_GATEWAY
        assert response.data["error"]["code"] == "IMAGE_HOSTING_ERROR"
