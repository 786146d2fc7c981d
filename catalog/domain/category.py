"""
Category domain entity.

Categories are soft-deleted: removal sets the ``deleted`` flag and the
record stays in the store.
"""
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Dict, Mapping

from catalog.domain.records import decode_timestamp, utcnow
from core.domain.exceptions import MalformedRecordError, ValidationError
from core.domain.value_objects import CategorySlug

SYSTEM_UPDATER = "system"


@dataclass(frozen=True)
class Category:
    """Category domain entity."""

    id: str
    title: str
    slug: str
    updated_at: datetime
    updated_by: str
    image_url: str = ""
    product_count: int = 0
    deleted: bool = False

    def __post_init__(self):
        """Validate category entity."""
        if not self.id:
            raise ValueError("Category ID is required")
        if not self.title or len(self.title.strip()) == 0:
            raise ValueError("Category title cannot be empty")

    @classmethod
    def create(
        cls,
        category_id: str,
        title: str,
        updated_by: str,
        image_url: str = "",
    ) -> "Category":
        """
        Create a new Category entity.

        Args:
            category_id: Store-assigned identifier
            title: Display title
            updated_by: Identity performing the creation
            image_url: Optional hosted image URL

        Returns:
            Category entity instance
        """
        if not title or not title.strip():
            raise ValidationError("Category title is required")
        return cls(
            id=category_id,
            title=title.strip(),
            slug=str(CategorySlug.from_title(title)),
            updated_at=utcnow(),
            updated_by=updated_by,
            image_url=image_url or "",
            product_count=0,
        )

    def with_image(self, image_url: str, updated_by: str) -> "Category":
        """Return a copy with a new image URL."""
        return replace(self, image_url=image_url, updated_at=utcnow(), updated_by=updated_by)

    @classmethod
    def from_record(cls, document_id: str, data: Any) -> "Category":
        """
        Decode a stored document into a Category.

        ``imageUrl`` wins over the legacy ``image`` field when both exist.

        Raises:
            MalformedRecordError: If the document cannot be decoded
        """
        if not isinstance(data, Mapping):
            raise MalformedRecordError(f"Category {document_id} is not a document")

        category_id = str(data.get("id") or document_id or "")
        title = data.get("title")
        if not category_id:
            raise MalformedRecordError("Category record has no id")
        if not isinstance(title, str) or not title.strip():
            raise MalformedRecordError(f"Category {category_id} has no title")

        slug = data.get("slug")
        if not isinstance(slug, str) or not slug:
            slug = str(CategorySlug.from_title(title))

        try:
            product_count = int(data.get("productCount") or 0)
        except (TypeError, ValueError) as e:
            raise MalformedRecordError(
                f"Category {category_id} has an invalid product count"
            ) from e

        return cls(
            id=category_id,
            title=title,
            slug=slug,
            updated_at=decode_timestamp(data.get("updatedAt"), category_id),
            updated_by=str(data.get("updatedBy") or SYSTEM_UPDATER),
            image_url=str(data.get("imageUrl") or data.get("image") or ""),
            product_count=product_count,
            deleted=bool(data.get("deleted", False)),
        )

    def to_record(self) -> Dict[str, Any]:
        """Encode the category as a store document."""
        return {
            "id": self.id,
            "title": self.title,
            "slug": self.slug,
            "image": self.image_url,
            "imageUrl": self.image_url,
            "featured": False,
            "productCount": self.product_count,
            "updatedAt": self.updated_at.isoformat(),
            "updatedBy": self.updated_by,
            "deleted": self.deleted,
        }
