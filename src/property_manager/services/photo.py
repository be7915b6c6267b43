import asyncio
import logging
import uuid
from dataclasses import dataclass
from typing import List, Optional, Sequence

from property_manager.common.uow import UnitOfWork
from property_manager.core.exceptions import InvalidArgumentError, NotFoundError, UnauthorizedError
from property_manager.core.logger import mask_id, mask_storage_key
from property_manager.domain.owner_kind import OwnerKind
from property_manager.domain.photo_validation import parse_storage_key, validate_file_name, validate_upload_request
from property_manager.domain.storage.factory import get_storage_client
from property_manager.repository.photo import Photo
from property_manager.services.photo_storage import PhotoStorageGateway, PhotoUploadTicket

logger = logging.getLogger(__name__)


@dataclass
class PhotoAssetView:
    photo: Photo
    view_url: Optional[str]
    thumbnail_url: Optional[str]


class PhotoService:
    """
    Photo lifecycle for one owner kind: upload URL issuance, upload
    confirmation, listing, deletion, primary designation and reordering.

    Keeps two rules for every owner: exactly one primary photo while the owner
    has photos, and display order only changes through confirm (append) and
    reorder (dense rewrite).
    """

    def __init__(self, uow: UnitOfWork, kind: OwnerKind, gateway: Optional[PhotoStorageGateway] = None):
        self.uow = uow
        self.kind = kind
        self.gateway = gateway or PhotoStorageGateway(get_storage_client())
        self.owners = uow.owners(kind)
        self.photos = uow.photos(kind)

    @property
    def photo_entity(self) -> str:
        return f"{self.kind.label}Photo"

    async def _ensure_owner(self, account_id: uuid.UUID, owner_id: uuid.UUID, lock: bool = False):
        if not await self.owners.exists(account_id, owner_id, lock=lock):
            logger.warning(f"{self.kind.label} {owner_id} not found for account {mask_id(account_id)}")
            raise NotFoundError(self.kind.label, owner_id)

    async def _get_photo(self, account_id: uuid.UUID, owner_id: uuid.UUID, photo_id: uuid.UUID) -> Photo:
        photo = await self.photos.get_by_id(account_id, owner_id, photo_id)
        if photo is None:
            logger.warning(f"{self.photo_entity} {photo_id} not found for {self.kind.label} {owner_id}")
            raise NotFoundError(self.photo_entity, photo_id)
        return photo

    async def resolve_urls(self, photo: Photo) -> PhotoAssetView:
        if photo.thumbnail_storage_key:
            view_url, thumbnail_url = await asyncio.gather(
                self.gateway.get_photo_url(photo.storage_key),
                self.gateway.get_thumbnail_url(photo.thumbnail_storage_key),
            )
        else:
            view_url = await self.gateway.get_photo_url(photo.storage_key)
            thumbnail_url = None
        return PhotoAssetView(photo=photo, view_url=view_url, thumbnail_url=thumbnail_url)

    async def request_upload_url(
        self,
        account_id: uuid.UUID,
        owner_id: uuid.UUID,
        content_type: str,
        file_size_bytes: int,
        original_file_name: str,
    ) -> PhotoUploadTicket:
        """Issue a presigned upload URL. Nothing is persisted until the upload is confirmed."""
        validate_upload_request(content_type, file_size_bytes, original_file_name)
        await self._ensure_owner(account_id, owner_id)

        ticket = await self.gateway.generate_upload_url(
            account_id, self.kind, content_type, file_size_bytes, original_file_name
        )
        logger.info(
            f"Generated {self.kind.label} photo upload URL: owner={owner_id}, "
            f"key={mask_storage_key(ticket.storage_key)}"
        )
        return ticket

    async def confirm_upload(
        self,
        account_id: uuid.UUID,
        owner_id: uuid.UUID,
        user_id: uuid.UUID,
        storage_key: str,
        thumbnail_storage_key: Optional[str],
        content_type: str,
        file_size_bytes: int,
        original_file_name: str,
    ) -> PhotoAssetView:
        """
        Turn a finished upload into a photo record.

        The first photo of an owner becomes primary; later photos are appended
        with ``display_order`` equal to the number of photos already stored.
        """
        validate_file_name(original_file_name)
        await self._ensure_owner(account_id, owner_id)

        # Keys minted for another tenant must never be adopted.
        if parse_storage_key(storage_key, self.kind) != account_id:
            logger.warning(f"Rejected confirmation of foreign storage key {mask_storage_key(storage_key)}")
            raise UnauthorizedError("Cannot confirm upload for another account")

        record = await self.gateway.confirm_upload(storage_key, thumbnail_storage_key, content_type, file_size_bytes)

        async with self.uow:
            await self._ensure_owner(account_id, owner_id, lock=True)
            existing_count = await self.photos.count_by_owner(account_id, owner_id)

            photo = self.photos.model(
                account_id=account_id,
                owner_id=owner_id,
                storage_key=record.storage_key,
                thumbnail_storage_key=record.thumbnail_storage_key,
                original_file_name=original_file_name,
                content_type=record.content_type,
                file_size_bytes=record.file_size_bytes,
                display_order=existing_count,
                is_primary=existing_count == 0,
                created_by_user_id=user_id,
            )
            await self.photos.add(photo)

        logger.info(
            f"Confirmed {self.kind.label} photo upload: owner={owner_id}, photo={photo.id}, "
            f"display_order={photo.display_order}, primary={photo.is_primary}"
        )
        return await self.resolve_urls(photo)

    async def list_photos(self, account_id: uuid.UUID, owner_id: uuid.UUID) -> List[PhotoAssetView]:
        """Photos of an owner in display order, with view and thumbnail URLs."""
        await self._ensure_owner(account_id, owner_id)

        photos = await self.photos.list_by_owner(account_id, owner_id)
        views = await asyncio.gather(*(self.resolve_urls(photo) for photo in photos))
        logger.info(f"Retrieved {len(views)} photos for {self.kind.label} {owner_id}")
        return list(views)

    async def delete_photo(self, account_id: uuid.UUID, owner_id: uuid.UUID, photo_id: uuid.UUID):
        """
        Delete a photo and its blobs.

        Blobs go first; if the storage backend fails the record is kept. When
        the primary photo is removed, the remaining photo with the lowest
        display order is promoted in the same transaction. Remaining display
        orders are not renumbered.
        """
        await self._ensure_owner(account_id, owner_id, lock=True)
        photo = await self._get_photo(account_id, owner_id, photo_id)
        was_primary = photo.is_primary

        await self.gateway.delete_photo(photo.storage_key, photo.thumbnail_storage_key)

        async with self.uow:
            await self.photos.delete(photo)

            if was_primary:
                successor = await self.photos.get_first_by_display_order(account_id, owner_id, exclude_id=photo_id)
                if successor is not None:
                    successor.is_primary = True
                    await self.uow.flush()
                    logger.info(f"Promoted {self.photo_entity} {successor.id} to primary")

        logger.info(f"Deleted {self.photo_entity} {photo_id} from {self.kind.label} {owner_id}")

    async def set_primary(self, account_id: uuid.UUID, owner_id: uuid.UUID, photo_id: uuid.UUID):
        """Make one photo the primary photo. Already-primary targets are left untouched."""
        await self._ensure_owner(account_id, owner_id, lock=True)
        photo = await self._get_photo(account_id, owner_id, photo_id)

        if photo.is_primary:
            logger.info(f"{self.photo_entity} {photo_id} is already primary")
            return

        async with self.uow:
            siblings = await self.photos.list_by_owner(account_id, owner_id)
            await self.photos.set_primary_exclusive(siblings, photo)

        logger.info(f"Set primary {self.photo_entity} {photo_id} for {self.kind.label} {owner_id}")

    async def reorder_photos(self, account_id: uuid.UUID, owner_id: uuid.UUID, photo_ids: Sequence[uuid.UUID]):
        """
        Rewrite display order from the position of each id in ``photo_ids``.

        ``photo_ids`` must be a permutation of the owner's photos; otherwise
        nothing is written.
        """
        await self._ensure_owner(account_id, owner_id, lock=True)

        if len(set(photo_ids)) != len(photo_ids):
            raise InvalidArgumentError("Photo IDs must not contain duplicates.", field="photo_ids")

        photos = await self.photos.list_by_owner(account_id, owner_id)
        by_id = {photo.id: photo for photo in photos}

        for photo_id in photo_ids:
            if photo_id not in by_id:
                logger.warning(f"Reorder rejected: {self.photo_entity} {photo_id} not in {self.kind.label} {owner_id}")
                raise NotFoundError(self.photo_entity, photo_id)

        if len(photo_ids) != len(photos):
            raise InvalidArgumentError(
                f"Photo IDs must include all {len(photos)} photos of the {self.kind.label.lower()}, "
                f"got {len(photo_ids)}.",
                field="photo_ids",
            )

        if not photo_ids:
            return

        async with self.uow:
            await self.photos.update_display_orders([by_id[photo_id] for photo_id in photo_ids])

        logger.info(f"Reordered {len(photo_ids)} photos for {self.kind.label} {owner_id}")
