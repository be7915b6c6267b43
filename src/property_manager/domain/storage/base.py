from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional


@dataclass(frozen=True)
class ObjectMetadata:
    content_type: Optional[str]
    size: int


class StorageService(ABC):
    """Abstract base class for blob storage backends."""

    @abstractmethod
    async def generate_upload_url(self, path: str, content_type: str, expires_in: timedelta) -> str:
        """
        Create a URL the client can PUT the object bytes to directly.

        Args:
            path: Destination key in the storage.
            content_type: MIME type the upload must be sent with.
            expires_in: Lifetime of the URL.

        Returns:
            The upload URL.
        """

    @abstractmethod
    async def generate_download_url(self, path: str, expires_in: timedelta) -> str:
        """Create a time-limited URL for reading the object at ``path``."""

    @abstractmethod
    async def get_metadata(self, path: str) -> Optional[ObjectMetadata]:
        """Return content type and size of a stored object, or None if it does not exist."""

    @abstractmethod
    async def read_file(self, path: str) -> bytes:
        """Read the full object at ``path``."""

    @abstractmethod
    async def save_bytes(self, path: str, data: bytes, content_type: Optional[str] = None) -> str:
        """Store ``data`` at ``path`` and return the path."""

    @abstractmethod
    async def delete_file(self, path: str) -> bool:
        """
        Delete a file from the storage.

        Returns:
            True if the object existed and was deleted, False if it was already absent.
        """
