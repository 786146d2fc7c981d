"""
Unit tests for catalog domain services.
"""
import pytest

from catalog.domain.product import Product
from catalog.domain.services import FeaturedProductPolicy, ProductDraftValidator
from core.domain.exceptions import CapacityExceededError, ValidationError


def make_products(*featured_flags):
    return [
        Product.from_record(str(index), {"name": f"Product {index}", "featured": flag})
        for index, flag in enumerate(featured_flags, start=1)
    ]


class TestFeaturedProductPolicy:
    """Tests for FeaturedProductPolicy."""

    def test_count_featured(self):
        """Test counting featured products."""
        products = make_products(True, False, True)

        assert FeaturedProductPolicy.count_featured(products) == 2
        assert FeaturedProductPolicy.count_featured(products, excluding="1") == 1

    def test_capacity_below_limit(self):
        """Test that a product may be featured below the limit."""
        products = make_products(True, True, False)

        assert FeaturedProductPolicy.has_capacity(products, "3") is True

    def test_capacity_at_limit(self):
        """Test that no other product may be featured at the limit."""
        products = make_products(True, True, True, False)

        assert FeaturedProductPolicy.has_capacity(products, "4") is False
        with pytest.raises(CapacityExceededError):
            FeaturedProductPolicy.ensure_can_feature(products, "4")

    def test_featured_product_does_not_count_against_itself(self):
        """Test re-featuring at the limit."""
        products = make_products(True, True, True, False)

        FeaturedProductPolicy.ensure_can_feature(products, "2")

    def test_custom_limit(self):
        """Test a configured limit."""
        products = make_products(True, False)

        with pytest.raises(CapacityExceededError) as exc_info:
            FeaturedProductPolicy.ensure_can_feature(products, "2", limit=1)

        assert "Maximum of 1 featured products" in exc_info.value.message


class TestProductDraftValidator:
    """Tests for ProductDraftValidator."""

    def test_valid_draft(self):
        """Test that a complete draft passes."""
        ProductDraftValidator.validate("Rice", "Long grain", "10", "rice")

    def test_missing_fields_are_listed(self):
        """Test that every missing field is reported."""
        missing = ProductDraftValidator.missing_fields(name=" ", description=None, price=0, category="rice")

        assert missing == ["name", "description"]

    @pytest.mark.parametrize("price", ["abc", True, -0.5])
    def test_invalid_price(self, price):
        """Test invalid prices."""
        with pytest.raises(ValidationError):
            ProductDraftValidator.validate("Rice", "Long grain", price, "rice")

    def test_missing_field_message(self):
        """Test the validation message."""
        with pytest.raises(ValidationError) as exc_info:
            ProductDraftValidator.validate("", "", None, "rice")

        assert exc_info.value.code == "VALIDATION_ERROR"
        assert "name, description, price" in exc_info.value.message
