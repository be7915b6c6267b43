import logging
import uuid

from fastapi import APIRouter, Depends, status

from property_manager.api.deps import CurrentUser, get_current_user, get_storage_gateway, get_uow
from property_manager.common.uow import UnitOfWork
from property_manager.domain.owner_kind import OwnerKind
from property_manager.schemas.photo import (
    PhotoConfirmRequest,
    PhotoConfirmResponse,
    PhotoListResponse,
    PhotoReorderRequest,
    PhotoResponse,
    PhotoUploadUrlRequest,
    PhotoUploadUrlResponse,
)
from property_manager.services.photo import PhotoService
from property_manager.services.photo_storage import PhotoStorageGateway

logger = logging.getLogger(__name__)


def create_photo_router(kind: OwnerKind) -> APIRouter:
    """Photo routes for one owner kind, mounted under that kind's resource prefix."""
    router = APIRouter()

    def get_photo_service(
        uow: UnitOfWork = Depends(get_uow),
        gateway: PhotoStorageGateway = Depends(get_storage_gateway),
    ) -> PhotoService:
        return PhotoService(uow, kind, gateway)

    @router.post("/{owner_id}/photos/upload-url", response_model=PhotoUploadUrlResponse)
    async def request_upload_url(
        owner_id: uuid.UUID,
        payload: PhotoUploadUrlRequest,
        current_user: CurrentUser = Depends(get_current_user),
        service: PhotoService = Depends(get_photo_service),
    ):
        ticket = await service.request_upload_url(
            account_id=current_user.account_id,
            owner_id=owner_id,
            content_type=payload.content_type,
            file_size_bytes=payload.file_size_bytes,
            original_file_name=payload.original_file_name,
        )
        return PhotoUploadUrlResponse(
            upload_url=ticket.upload_url,
            storage_key=ticket.storage_key,
            thumbnail_storage_key=ticket.thumbnail_storage_key,
            expires_at=ticket.expires_at,
        )

    @router.post(
        "/{owner_id}/photos",
        response_model=PhotoConfirmResponse,
        status_code=status.HTTP_201_CREATED,
    )
    async def confirm_upload(
        owner_id: uuid.UUID,
        payload: PhotoConfirmRequest,
        current_user: CurrentUser = Depends(get_current_user),
        service: PhotoService = Depends(get_photo_service),
    ):
        view = await service.confirm_upload(
            account_id=current_user.account_id,
            owner_id=owner_id,
            user_id=current_user.user_id,
            storage_key=payload.storage_key,
            thumbnail_storage_key=payload.thumbnail_storage_key,
            content_type=payload.content_type,
            file_size_bytes=payload.file_size_bytes,
            original_file_name=payload.original_file_name,
        )
        return PhotoConfirmResponse(
            id=view.photo.id,
            thumbnail_url=view.thumbnail_url,
            view_url=view.view_url,
            is_primary=view.photo.is_primary,
            display_order=view.photo.display_order,
        )

    @router.get("/{owner_id}/photos", response_model=PhotoListResponse)
    async def list_photos(
        owner_id: uuid.UUID,
        current_user: CurrentUser = Depends(get_current_user),
        service: PhotoService = Depends(get_photo_service),
    ):
        views = await service.list_photos(account_id=current_user.account_id, owner_id=owner_id)
        return PhotoListResponse(
            items=[
                PhotoResponse(
                    id=view.photo.id,
                    thumbnail_url=view.thumbnail_url,
                    view_url=view.view_url,
                    is_primary=view.photo.is_primary,
                    display_order=view.photo.display_order,
                    original_file_name=view.photo.original_file_name,
                    content_type=view.photo.content_type,
                    file_size_bytes=view.photo.file_size_bytes,
                    created_at=view.photo.created_at,
                )
                for view in views
            ]
        )

    @router.put("/{owner_id}/photos/reorder", status_code=status.HTTP_204_NO_CONTENT)
    async def reorder_photos(
        owner_id: uuid.UUID,
        payload: PhotoReorderRequest,
        current_user: CurrentUser = Depends(get_current_user),
        service: PhotoService = Depends(get_photo_service),
    ):
        await service.reorder_photos(
            account_id=current_user.account_id,
            owner_id=owner_id,
            photo_ids=payload.photo_ids,
        )

    @router.put("/{owner_id}/photos/{photo_id}/primary", status_code=status.HTTP_204_NO_CONTENT)
    async def set_primary(
        owner_id: uuid.UUID,
        photo_id: uuid.UUID,
        current_user: CurrentUser = Depends(get_current_user),
        service: PhotoService = Depends(get_photo_service),
    ):
        await service.set_primary(account_id=current_user.account_id, owner_id=owner_id, photo_id=photo_id)

    @router.delete("/{owner_id}/photos/{photo_id}", status_code=status.HTTP_204_NO_CONTENT)
    async def delete_photo(
        owner_id: uuid.UUID,
        photo_id: uuid.UUID,
        current_user: CurrentUser = Depends(get_current_user),
        service: PhotoService = Depends(get_photo_service),
    ):
        await service.delete_photo(account_id=current_user.account_id, owner_id=owner_id, photo_id=photo_id)

    return router


property_photos_router = create_photo_router(OwnerKind.PROPERTY)
work_order_photos_router = create_photo_router(OwnerKind.WORK_ORDER)
