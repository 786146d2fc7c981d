"""
Value objects for the domain.

Value objects are immutable objects that are defined by their attributes
rather than their identity. They have no identity and are compared by value.
"""
import re
from abc import ABC
from dataclasses import dataclass
from typing import Optional
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

CACHE_BUSTER_PARAM = "t"

_NON_ALPHANUMERIC = re.compile(r"[^a-z0-9]+")
_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class ValueObject(ABC):
    """
    Base class for value objects.

    Value objects are immutable and compared by value.
    """

    def __eq__(self, other):
        """Compare value objects by their attributes."""
        if not isinstance(other, self.__class__):
            return False
        return self.__dict__ == other.__dict__

    def __hash__(self):
        """Make value objects hashable."""
        return hash(tuple(sorted(self.__dict__.items())))


@dataclass(frozen=True)
class ProductSlug(ValueObject):
    """Product slug value object."""

    value: str

    def __post_init__(self):
        """Validate slug format."""
        if not self.value:
            raise ValueError("Product slug cannot be empty")
        if not self.value.replace("-", "").replace("_", "").isalnum():
            raise ValueError(f"Invalid product slug format: {self.value}")

    @classmethod
    def from_name(cls, name: str, fallback: Optional[str] = None) -> "ProductSlug":
        """
        Derive a slug from a product name.

        Lower-cases the name, collapses every run of non-alphanumeric
        characters into one hyphen and strips leading/trailing hyphens.

        Args:
            name: Product display name
            fallback: Value used when the name yields an empty slug

        Returns:
            ProductSlug instance
        """
        slug = _NON_ALPHANUMERIC.sub("-", (name or "").lower()).strip("-")
        if not slug and fallback:
            slug = _NON_ALPHANUMERIC.sub("-", fallback.lower()).strip("-")
        return cls(slug)

    def __str__(self) -> str:
        """Return slug as string."""
        return self.value


@dataclass(frozen=True)
class CategorySlug(ValueObject):
    """Category slug value object."""

    value: str

    def __post_init__(self):
        """Validate slug format."""
        if not self.value:
            raise ValueError("Category slug cannot be empty")

    @classmethod
    def from_title(cls, title: str) -> "CategorySlug":
        """
        Derive a slug from a category title.

        Lower-cases the title and replaces whitespace runs with hyphens.
        Other characters are kept as they are.
        """
        return cls(_WHITESPACE.sub("-", (title or "").strip().lower()))

    def __str__(self) -> str:
        """Return slug as string."""
        return self.value


@dataclass(frozen=True)
class ImageUrl(ValueObject):
    """Hosted image URL, optionally carrying a cache-busting token."""

    value: str

    def __post_init__(self):
        """Validate URL presence."""
        if not self.value or not self.value.strip():
            raise ValueError("Image URL cannot be empty")

    @property
    def cache_buster(self) -> Optional[str]:
        """Return the cache-busting token, if any."""
        query = parse_qsl(urlsplit(self.value).query, keep_blank_values=True)
        for key, value in query:
            if key == CACHE_BUSTER_PARAM:
                return value
        return None

    def has_cache_buster(self) -> bool:
        """Check whether the URL already carries a cache-busting token."""
        return self.cache_buster is not None

    def with_cache_buster(self, token: int) -> "ImageUrl":
        """
        Return a copy whose cache-busting token is set to ``token``.

        Any previous token is replaced; other query parameters keep their
        order.

        Args:
            token: New token value (epoch milliseconds)

        Returns:
            New ImageUrl instance
        """
        parts = urlsplit(self.value)
        query = [
            (key, value)
            for key, value in parse_qsl(parts.query, keep_blank_values=True)
            if key != CACHE_BUSTER_PARAM
        ]
        query.append((CACHE_BUSTER_PARAM, str(token)))
        return ImageUrl(urlunsplit(parts._replace(query=urlencode(query))))

    def __str__(self) -> str:
        """Return URL as string."""
        return self.value
