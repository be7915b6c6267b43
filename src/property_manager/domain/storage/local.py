import hashlib
import hmac
import logging
import mimetypes
import os
import time
from datetime import timedelta
from pathlib import Path
from typing import Optional
from urllib.parse import quote

import aiofiles
import aiofiles.os

from property_manager.core.config import settings
from property_manager.core.exceptions import InvalidArgumentError
from property_manager.core.logger import mask_storage_key

from .base import ObjectMetadata, StorageService

logger = logging.getLogger(__name__)


class LocalStorageService(StorageService):
    """
    Filesystem backend for development and tests.

    Upload and download URLs point at the media proxy routes served by the API
    itself and carry an expiry (``exp``) and an HMAC signature (``sig``) bound
    to the HTTP method and path, so the two-phase upload flow works without a
    cloud bucket.
    """

    def __init__(
        self,
        media_root: Optional[str] = None,
        media_url: Optional[str] = None,
        signing_secret: Optional[str] = None,
    ):
        self.media_root = Path(media_root or settings.MEDIA_ROOT).resolve()
        self.media_root.mkdir(parents=True, exist_ok=True)
        self.media_url = (media_url or settings.MEDIA_URL).rstrip("/")
        self.signing_secret = signing_secret or settings.SECRET_KEY
        if not self.signing_secret:
            raise ValueError("SECRET_KEY is required to sign local storage URLs")
        logger.debug(f"LocalStorageService initialized with base path {self.media_root}")

    def _full_path(self, path: str) -> Path:
        segments = path.split("/")
        if any(segment in ("", ".", "..") for segment in segments):
            raise InvalidArgumentError("Invalid storage path", field="storage_key")
        full_path = (self.media_root / path).resolve()
        if self.media_root not in full_path.parents:
            raise InvalidArgumentError("Invalid storage path", field="storage_key")
        return full_path

    def _signature(self, method: str, path: str, expires_at: int) -> str:
        payload = f"{method.upper()}:{path}:{expires_at}".encode()
        return hmac.new(self.signing_secret.encode(), payload, hashlib.sha256).hexdigest()

    def signed_url(self, method: str, path: str, expires_in: timedelta) -> str:
        expires_at = int(time.time() + expires_in.total_seconds())
        signature = self._signature(method, path, expires_at)
        return f"{self.media_url}/{quote(path.lstrip('/'))}?exp={expires_at}&sig={signature}"

    def validate_signature(self, method: str, path: str, expires_at: Optional[int], signature: Optional[str]) -> bool:
        if expires_at is None or not signature:
            return False
        if expires_at < int(time.time()):
            return False
        expected = self._signature(method, path, expires_at)
        return hmac.compare_digest(expected, signature)

    async def generate_upload_url(self, path: str, content_type: str, expires_in: timedelta) -> str:
        return self.signed_url("PUT", path, expires_in)

    async def generate_download_url(self, path: str, expires_in: timedelta) -> str:
        return self.signed_url("GET", path, expires_in)

    async def get_metadata(self, path: str) -> Optional[ObjectMetadata]:
        full_path = self._full_path(path)
        if not full_path.is_file():
            return None
        stat = await aiofiles.os.stat(full_path)
        content_type, _ = mimetypes.guess_type(full_path.name)
        return ObjectMetadata(content_type=content_type, size=stat.st_size)

    async def read_file(self, path: str) -> bytes:
        async with aiofiles.open(self._full_path(path), "rb") as in_file:
            return await in_file.read()

    async def save_bytes(self, path: str, data: bytes, content_type: Optional[str] = None) -> str:
        full_path = self._full_path(path)
        full_path.parent.mkdir(parents=True, exist_ok=True)

        async with aiofiles.open(full_path, "wb") as out_file:
            await out_file.write(data)

        logger.info(f"Successfully saved file: {mask_storage_key(path)}")
        return path

    async def delete_file(self, path: str) -> bool:
        full_path = self._full_path(path)
        if full_path.exists():
            os.remove(full_path)
            logger.info(f"Successfully deleted file: {mask_storage_key(path)}")
            return True
        logger.warning(f"File not found for deletion: {mask_storage_key(path)}")
        return False
