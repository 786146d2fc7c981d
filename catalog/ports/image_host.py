"""
Image hosting port (interface).
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class ImageUpload:
    """An image file to be hosted."""

    filename: str
    content: bytes
    content_type: str = "application/octet-stream"

    def __post_init__(self):
        """Validate upload."""
        if not self.content:
            raise ValueError("Image upload is empty")


class ImageHost(ABC):
    """
    Abstract image hosting service.

    Implementations raise ``ImageHostingError`` when an upload fails.
    """

    @abstractmethod
    async def upload(self, image: ImageUpload, folder: str) -> str:
        """
        Upload a new image.

        Args:
            image: Image file
            folder: Destination folder

        Returns:
            Public URL of the hosted image
        """
        pass

    @abstractmethod
    async def replace(self, image: ImageUpload, folder: str) -> str:
        """
        Upload an image replacing the one previously stored under ``folder``.

        Args:
            image: Image file
            folder: Folder identifying the image to overwrite

        Returns:
            Public URL of the hosted image
        """
        pass
