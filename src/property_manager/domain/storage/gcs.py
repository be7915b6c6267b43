import asyncio
import logging
from datetime import timedelta
from typing import Optional

from google.cloud import storage

from property_manager.core.config import settings
from property_manager.core.logger import mask_storage_key

from .base import ObjectMetadata, StorageService

logger = logging.getLogger(__name__)


class GCSStorageService(StorageService):
    def __init__(self):
        self.client = storage.Client()
        self.bucket_name = settings.GCS_BUCKET_NAME
        self.bucket = self.client.bucket(self.bucket_name)

        logger.info(f"GCSStorageService initialized for bucket '{self.bucket_name}'")

    async def generate_upload_url(self, path: str, content_type: str, expires_in: timedelta) -> str:
        blob = self.bucket.blob(path)

        def sign_sync():
            return blob.generate_signed_url(
                version="v4",
                expiration=expires_in,
                method="PUT",
                content_type=content_type,
            )

        url = await asyncio.to_thread(sign_sync)
        logger.info(f"[GCS] Generated upload URL for {mask_storage_key(path)}")
        return url

    async def generate_download_url(self, path: str, expires_in: timedelta) -> str:
        blob = self.bucket.blob(path)

        def sign_sync():
            return blob.generate_signed_url(version="v4", expiration=expires_in, method="GET")

        return await asyncio.to_thread(sign_sync)

    async def get_metadata(self, path: str) -> Optional[ObjectMetadata]:
        def metadata_sync():
            blob = self.bucket.get_blob(path)
            if blob is None:
                return None
            return ObjectMetadata(content_type=blob.content_type, size=blob.size or 0)

        return await asyncio.to_thread(metadata_sync)

    async def read_file(self, path: str) -> bytes:
        blob = self.bucket.blob(path)
        return await asyncio.to_thread(blob.download_as_bytes)

    async def save_bytes(self, path: str, data: bytes, content_type: Optional[str] = None) -> str:
        blob = self.bucket.blob(path)

        def upload_sync():
            blob.upload_from_string(data, content_type=content_type)
            logger.info(f"[GCS] Uploaded to {mask_storage_key(path)}")
            return path

        return await asyncio.to_thread(upload_sync)

    async def delete_file(self, path: str) -> bool:
        blob = self.bucket.blob(path)

        def delete_sync():
            if blob.exists():
                blob.delete()
                logger.info(f"[GCS] Deleted {mask_storage_key(path)}")
                return True
            return False

        return await asyncio.to_thread(delete_sync)
