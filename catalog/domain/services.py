"""
Catalog domain services.

Domain services contain business logic that doesn't naturally
fit within a single entity.
"""
from typing import Iterable, Optional

from catalog.domain.product import Product
from core.domain.exceptions import CapacityExceededError, ValidationError

FEATURED_PRODUCT_LIMIT = 3


class FeaturedProductPolicy:
    """Domain service guarding the number of featured products."""

    @staticmethod
    def count_featured(
        products: Iterable[Product],
        excluding: Optional[str] = None,
    ) -> int:
        """
        Count featured products.

        Args:
            products: Products to inspect
            excluding: Product id left out of the count

        Returns:
            Number of featured products
        """
        return sum(1 for product in products if product.featured and product.id != excluding)

    @staticmethod
    def has_capacity(
        products: Iterable[Product],
        product_id: str,
        limit: int = FEATURED_PRODUCT_LIMIT,
    ) -> bool:
        """
        Check whether ``product_id`` may become featured.

        The product itself is not counted, so re-featuring an already
        featured product is allowed at the limit.
        """
        return FeaturedProductPolicy.count_featured(products, excluding=product_id) < limit

    @staticmethod
    def ensure_can_feature(
        products: Iterable[Product],
        product_id: str,
        limit: int = FEATURED_PRODUCT_LIMIT,
    ) -> None:
        """
        Reject featuring ``product_id`` when the limit is reached.

        Raises:
            CapacityExceededError: If ``limit`` other products are featured
        """
        if not FeaturedProductPolicy.has_capacity(products, product_id, limit):
            raise CapacityExceededError(
                f"Maximum of {limit} featured products allowed. "
                "Please unfeature one first."
            )


class ProductDraftValidator:
    """Domain service for validating new products."""

    REQUIRED_FIELDS = ("name", "description", "price", "category")

    @staticmethod
    def missing_fields(**fields) -> list:
        """
        List required fields that are absent or blank.

        Args:
            **fields: Field values keyed by name

        Returns:
            Names of missing fields in declaration order
        """
        missing = []
        for name in ProductDraftValidator.REQUIRED_FIELDS:
            value = fields.get(name)
            if value is None or (isinstance(value, str) and not value.strip()):
                missing.append(name)
        return missing

    @staticmethod
    def validate(name, description, price, category) -> None:
        """
        Validate the fields required to create a product.

        Raises:
            ValidationError: If a field is missing or the price is invalid
        """
        missing = ProductDraftValidator.missing_fields(
            name=name, description=description, price=price, category=category
        )
        if missing:
            raise ValidationError(f"Missing required product fields: {', '.join(missing)}")
        if isinstance(price, bool):
            raise ValidationError("Product price must be a number")
        try:
            amount = float(price)
        except (TypeError, ValueError) as e:
            raise ValidationError("Product price must be a number") from e
        if amount < 0:
            raise ValidationError("Product price cannot be negative")
