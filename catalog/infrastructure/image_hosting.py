"""
Image hosting adapter.

Uploads images to Cloudinary through its REST upload API. Requests are
signed with the API secret so no unsigned upload preset is needed.
"""
import hashlib
import logging
import time
from typing import Any, Dict, Optional

import requests
from asgiref.sync import sync_to_async

from catalog.config import ImageHostSettings
from catalog.ports.image_host import ImageHost, ImageUpload
from core.domain.exceptions import ImageHostingError
from core.metrics import image_uploads_total

logger = logging.getLogger(__name__)

USER_AGENT = "B2B-Showcase-Catalog/1.0"


class CloudinaryImageHost(ImageHost):
    """Image host speaking the Cloudinary upload API."""

    def __init__(self, settings: ImageHostSettings, session: Optional[requests.Session] = None):
        """
        Initialize the image host.

        Args:
            settings: Cloud name, credentials and transport options
            session: HTTP session (a new one is created if omitted)
        """
        self.settings = settings
        self.session = session or requests.Session()

    @property
    def upload_url(self) -> str:
        return f"{self.settings.base_url.rstrip('/')}/{self.settings.cloud_name}/image/upload"

    @staticmethod
    def generate_signature(params: Dict[str, Any], secret: str) -> str:
        """
        Generate the request signature.

        Parameters are sorted by name and joined as ``k=v`` pairs with
        ``&``; the secret is appended and the result hashed with SHA-1.

        Args:
            params: Signed upload parameters
            secret: API secret

        Returns:
            Hex digest
        """
        to_sign = "&".join(f"{key}={params[key]}" for key in sorted(params))
        return hashlib.sha1(f"{to_sign}{secret}".encode()).hexdigest()

    async def upload(self, image: ImageUpload, folder: str) -> str:
        """Upload a new image into ``folder``."""
        return await self._post(image, {"folder": folder}, folder)

    async def replace(self, image: ImageUpload, folder: str) -> str:
        """Overwrite the image stored under ``folder``."""
        params = {"public_id": folder, "overwrite": "true", "invalidate": "true"}
        return await self._post(image, params, folder)

    async def _post(self, image: ImageUpload, params: Dict[str, Any], folder: str) -> str:
        label = folder.split("/", 1)[0] or "root"
        try:
            url = await sync_to_async(self._post_sync)(image, params)
        except ImageHostingError:
            image_uploads_total.labels(folder=label, outcome="failure").inc()
            raise
        image_uploads_total.labels(folder=label, outcome="success").inc()
        return url

    def _post_sync(self, image: ImageUpload, params: Dict[str, Any]) -> str:
        if not self.settings.configured:
            raise ImageHostingError("Image hosting is not configured")

        signed = dict(params, timestamp=int(time.time()))
        data = dict(
            signed,
            api_key=self.settings.api_key,
            signature=self.generate_signature(signed, self.settings.api_secret),
        )
        files = {"file": (image.filename, image.content, image.content_type)}

        try:
            response = self.session.post(
                self.upload_url,
                data=data,
                files=files,
                headers={"User-Agent": USER_AGENT},
                timeout=self.settings.timeout_seconds,
            )
            response.raise_for_status()
            body = response.json()
        except requests.exceptions.RequestException as e:
            logger.warning(f"Image upload of {image.filename} failed: {e}")
            raise ImageHostingError(f"Image upload failed: {e}") from e
        except ValueError as e:
            raise ImageHostingError("Image host returned an invalid response") from e

        secure_url = body.get("secure_url") if isinstance(body, dict) else None
        if not secure_url:
            raise ImageHostingError("Image upload succeeded but returned an empty URL")

        logger.info(f"Image {image.filename} uploaded to {secure_url}")
        return secure_url
