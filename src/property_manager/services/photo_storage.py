import asyncio
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from property_manager.core.config import settings
from property_manager.core.exceptions import InvalidArgumentError, NotFoundError
from property_manager.core.logger import mask_storage_key
from property_manager.domain.owner_kind import OwnerKind
from property_manager.domain.photo_validation import (
    extension_for_content_type,
    thumbnail_key_for,
    validate_content_type,
    validate_file_size,
    validate_upload_request,
)
from property_manager.domain.storage.base import StorageService
from property_manager.domain.thumbnail import generate_thumbnail

logger = logging.getLogger(__name__)

THUMBNAIL_CONTENT_TYPE = "image/jpeg"


@dataclass(frozen=True)
class PhotoUploadTicket:
    upload_url: str
    storage_key: str
    thumbnail_storage_key: str
    expires_at: datetime


@dataclass(frozen=True)
class PhotoRecord:
    storage_key: str
    thumbnail_storage_key: Optional[str]
    content_type: str
    file_size_bytes: int


class PhotoStorageGateway:
    """
    Photo-specific operations on top of a blob storage backend: storage key
    minting, presigned URLs, upload confirmation with thumbnailing, deletion.
    """

    def __init__(self, storage: StorageService):
        self.storage = storage

    @property
    def url_ttl(self) -> timedelta:
        return timedelta(minutes=settings.PRESIGNED_URL_EXPIRE_MINUTES)

    async def generate_upload_url(
        self,
        account_id: uuid.UUID,
        kind: OwnerKind,
        content_type: str,
        file_size_bytes: int,
        original_file_name: str,
    ) -> PhotoUploadTicket:
        content_type = validate_upload_request(content_type, file_size_bytes, original_file_name)

        extension = extension_for_content_type(content_type)
        year = datetime.now(timezone.utc).year
        file_id = uuid.uuid4()

        storage_key = f"{account_id}/{kind.storage_segment}/{year}/{file_id}{extension}"
        thumbnail_storage_key = thumbnail_key_for(storage_key)

        logger.info(f"Generating upload URL for {kind.label} photo: {mask_storage_key(storage_key)}")

        expires_at = datetime.now(timezone.utc) + self.url_ttl
        upload_url = await self.storage.generate_upload_url(storage_key, content_type, self.url_ttl)

        return PhotoUploadTicket(
            upload_url=upload_url,
            storage_key=storage_key,
            thumbnail_storage_key=thumbnail_storage_key,
            expires_at=expires_at,
        )

    async def confirm_upload(
        self,
        storage_key: str,
        thumbnail_storage_key: Optional[str],
        content_type: str,
        file_size_bytes: int,
    ) -> PhotoRecord:
        """
        Check the uploaded object and build its thumbnail.

        Content type and size reported by the storage backend win over the
        values the client sent, and are re-validated against the upload limits.
        The thumbnail key must be the one minted with ``storage_key``.
        A thumbnail failure is logged and the record is returned without one.
        """
        if thumbnail_storage_key is not None and thumbnail_storage_key != thumbnail_key_for(storage_key):
            raise InvalidArgumentError(
                "Thumbnail storage key does not belong to the uploaded photo.",
                field="thumbnail_storage_key",
            )

        metadata = await self.storage.get_metadata(storage_key)
        if metadata is None:
            raise NotFoundError("UploadedObject", mask_storage_key(storage_key))

        content_type = validate_content_type(metadata.content_type or content_type)
        file_size_bytes = metadata.size or file_size_bytes
        validate_file_size(file_size_bytes)

        logger.info(f"Confirming upload and generating thumbnail for {mask_storage_key(storage_key)}")

        confirmed_thumbnail_key = None
        if thumbnail_storage_key:
            try:
                original = await self.storage.read_file(storage_key)
                thumbnail = await asyncio.to_thread(generate_thumbnail, original, settings.THUMBNAIL_MAX_SIZE)
                await self.storage.save_bytes(thumbnail_storage_key, thumbnail, THUMBNAIL_CONTENT_TYPE)
                confirmed_thumbnail_key = thumbnail_storage_key
                logger.info(f"Thumbnail generated and uploaded: {mask_storage_key(thumbnail_storage_key)}")
            except Exception as e:
                logger.warning(
                    f"Failed to generate thumbnail for {mask_storage_key(storage_key)}, "
                    f"continuing without thumbnail: {e}"
                )

        return PhotoRecord(
            storage_key=storage_key,
            thumbnail_storage_key=confirmed_thumbnail_key,
            content_type=content_type,
            file_size_bytes=file_size_bytes,
        )

    async def get_photo_url(self, storage_key: str) -> str:
        return await self.storage.generate_download_url(storage_key, self.url_ttl)

    async def get_thumbnail_url(self, thumbnail_storage_key: str) -> str:
        return await self.storage.generate_download_url(thumbnail_storage_key, self.url_ttl)

    async def delete_photo(self, storage_key: str, thumbnail_storage_key: Optional[str]):
        logger.info(
            f"Deleting photo {mask_storage_key(storage_key)} and thumbnail "
            f"{mask_storage_key(thumbnail_storage_key) if thumbnail_storage_key else '(none)'}"
        )
        await self.storage.delete_file(storage_key)
        if thumbnail_storage_key:
            await self.storage.delete_file(thumbnail_storage_key)
