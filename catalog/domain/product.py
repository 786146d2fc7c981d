"""
Product domain entity.

This is the core domain entity representing a catalog product.
It contains business logic and is independent of infrastructure.
"""
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Dict, Mapping, Optional

from catalog.domain.records import (
    clean_specifications,
    decode_price,
    decode_timestamp,
    utcnow,
)
from core.domain.exceptions import MalformedRecordError, ValidationError
from core.domain.value_objects import ImageUrl, ProductSlug

SYSTEM_UPDATER = "system"


@dataclass(frozen=True)
class Product:
    """
    Product domain entity.

    Immutable: every mutation returns a new instance with ``updated_at``
    and ``updated_by`` re-stamped.
    """

    id: str
    name: str
    slug: str
    description: str
    image_url: str
    category: str
    updated_at: datetime
    updated_by: str
    featured: bool = False
    in_stock: bool = True
    price: Optional[float] = None
    specifications: Optional[Dict[str, str]] = field(default=None, hash=False)

    def __post_init__(self):
        """Validate product entity."""
        if not self.id:
            raise ValueError("Product ID is required")
        if not self.name or len(self.name.strip()) == 0:
            raise ValueError("Product name cannot be empty")
        if self.price is not None and self.price < 0:
            raise ValueError("Product price cannot be negative")

    @classmethod
    def create(
        cls,
        product_id: str,
        name: str,
        description: str,
        category: str,
        image_url: str,
        updated_by: str,
        price: Optional[float] = None,
        slug: Optional[str] = None,
        specifications: Optional[Mapping[str, Any]] = None,
    ) -> "Product":
        """
        Create a new Product entity.

        New products are never featured and start in stock.

        Args:
            product_id: Store-assigned identifier
            name: Product display name
            description: Free text description
            category: Category key used for filtering
            image_url: Hosted image URL
            updated_by: Identity performing the creation
            price: Optional non-negative price
            slug: Explicit slug, normalized like a name (derived from name if omitted)
            specifications: Optional key/value specifications

        Returns:
            Product entity instance

        Raises:
            ValidationError: If the slug or name yields no usable slug
        """
        source, origin = (slug, "slug") if slug else (name, "name")
        try:
            product_slug = ProductSlug.from_name(source)
        except ValueError as e:
            raise ValidationError(f"Cannot derive a slug from {origin} {source!r}") from e

        return cls(
            id=product_id,
            name=name.strip(),
            slug=str(product_slug),
            description=description,
            image_url=image_url,
            category=category,
            updated_at=utcnow(),
            updated_by=updated_by,
            featured=False,
            in_stock=True,
            price=price,
            specifications=clean_specifications(specifications),
        )

    def _touch(self, updated_by: str, **changes) -> "Product":
        return replace(self, updated_at=utcnow(), updated_by=updated_by, **changes)

    def with_image(self, image_url: str, updated_by: str) -> "Product":
        """Return a copy with a new image URL."""
        return self._touch(updated_by, image_url=image_url)

    def with_featured(self, featured: bool, updated_by: str) -> "Product":
        """Return a copy with the featured flag set."""
        return self._touch(updated_by, featured=featured)

    def with_stock(self, in_stock: bool, updated_by: str) -> "Product":
        """Return a copy with the stock flag set."""
        return self._touch(updated_by, in_stock=in_stock)

    def with_cache_busted_image(self, token: int) -> "Product":
        """
        Return a copy whose image URL carries a cache-busting token.

        Products without an image, or whose image already carries a token,
        are returned unchanged. Metadata is not re-stamped.
        """
        if not self.image_url:
            return self
        url = ImageUrl(self.image_url)
        if url.has_cache_buster():
            return self
        return replace(self, image_url=str(url.with_cache_buster(token)))

    @classmethod
    def from_record(cls, document_id: str, data: Any) -> "Product":
        """
        Decode a stored document into a Product.

        Fills defaults for optional fields and derives the slug from the
        name (or the document id) when it is missing.

        Args:
            document_id: Store document identifier
            data: Raw document body

        Returns:
            Product entity

        Raises:
            MalformedRecordError: If the document cannot be decoded
        """
        if not isinstance(data, Mapping):
            raise MalformedRecordError(f"Product {document_id} is not a document")

        product_id = str(data.get("id") or document_id or "")
        name = data.get("name")
        if not product_id:
            raise MalformedRecordError("Product record has no id")
        if not isinstance(name, str) or not name.strip():
            raise MalformedRecordError(f"Product {product_id} has no name")

        slug = data.get("slug")
        if not isinstance(slug, str) or not slug:
            try:
                slug = str(ProductSlug.from_name(name, fallback=product_id))
            except ValueError:
                slug = product_id

        in_stock = data.get("inStock")
        return cls(
            id=product_id,
            name=name,
            slug=slug,
            description=str(data.get("description") or ""),
            image_url=str(data.get("imageUrl") or ""),
            category=str(data.get("category") or ""),
            updated_at=decode_timestamp(data.get("updatedAt"), product_id),
            updated_by=str(data.get("updatedBy") or SYSTEM_UPDATER),
            featured=bool(data.get("featured", False)),
            in_stock=True if in_stock is None else bool(in_stock),
            price=decode_price(data.get("price"), product_id),
            specifications=clean_specifications(data.get("specifications")),
        )

    def to_record(self) -> Dict[str, Any]:
        """
        Encode the product as a store/cache document.

        ``specifications`` is left out entirely when there are none.
        """
        record: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "description": self.description,
            "imageUrl": self.image_url,
            "category": self.category,
            "featured": self.featured,
            "inStock": self.in_stock,
            "updatedAt": self.updated_at.isoformat(),
            "updatedBy": self.updated_by,
        }
        if self.price is not None:
            record["price"] = self.price
        if self.specifications:
            record["specifications"] = dict(self.specifications)
        return record
