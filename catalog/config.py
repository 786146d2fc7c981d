"""
Catalog configuration.

Reads the ``CATALOG`` dictionary from Django settings.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

DEFAULT_SYSTEM_IDENTITY = "system@b2b-showcase.com"
DEFAULT_PLACEHOLDER_IMAGE_URL = "https://via.placeholder.com/300x300?text=Product+Image"


@dataclass(frozen=True)
class ImageHostSettings:
    """Credentials and transport options of the image hosting service."""

    cloud_name: str = ""
    api_key: str = ""
    api_secret: str = ""
    base_url: str = "https://api.cloudinary.com/v1_1"
    timeout_seconds: float = 30.0

    @property
    def configured(self) -> bool:
        """Check whether credentials are present."""
        return bool(self.cloud_name and self.api_key and self.api_secret)


@dataclass(frozen=True)
class CatalogSettings:
    """Catalog options."""

    system_identity: str = DEFAULT_SYSTEM_IDENTITY
    featured_limit: int = 3
    placeholder_image_url: str = DEFAULT_PLACEHOLDER_IMAGE_URL
    local_cache_alias: str = "catalog"
    image_host: ImageHostSettings = field(default_factory=ImageHostSettings)

    @classmethod
    def from_mapping(cls, options: Optional[Mapping[str, Any]]) -> "CatalogSettings":
        """
        Build settings from a ``CATALOG``-style mapping.

        Unknown keys are ignored; missing keys keep their defaults.
        """
        options = dict(options or {})
        image_host: Dict[str, Any] = dict(options.get("IMAGE_HOST") or {})
        return cls(
            system_identity=options.get("SYSTEM_IDENTITY") or DEFAULT_SYSTEM_IDENTITY,
            featured_limit=int(options.get("FEATURED_LIMIT", 3)),
            placeholder_image_url=(
                options.get("PLACEHOLDER_IMAGE_URL") or DEFAULT_PLACEHOLDER_IMAGE_URL
            ),
            local_cache_alias=options.get("LOCAL_CACHE_ALIAS") or "catalog",
            image_host=ImageHostSettings(
                cloud_name=image_host.get("CLOUD_NAME", ""),
                api_key=image_host.get("API_KEY", ""),
                api_secret=image_host.get("API_SECRET", ""),
                base_url=image_host.get("BASE_URL") or ImageHostSettings.base_url,
                timeout_seconds=float(image_host.get("TIMEOUT_SECONDS", 30.0)),
            ),
        )

    @classmethod
    def from_django_settings(cls) -> "CatalogSettings":
        """Build settings from ``django.conf.settings.CATALOG``."""
        from django.conf import settings

        return cls.from_mapping(getattr(settings, "CATALOG", None))
