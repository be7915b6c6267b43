import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import Response

from property_manager.core.logger import mask_storage_key
from property_manager.domain.storage.factory import get_storage_client
from property_manager.domain.storage.local import LocalStorageService

router = APIRouter()
logger = logging.getLogger(__name__)


def _require_signature(storage: LocalStorageService, method: str, path: str, exp: Optional[int], sig: Optional[str]):
    if not storage.validate_signature(method, path, exp, sig):
        logger.warning(f"Rejected unsigned or expired media {method} for {mask_storage_key(path)}")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid or expired media URL")


@router.put("/{path:path}", status_code=status.HTTP_204_NO_CONTENT)
async def upload_media(
    path: str,
    request: Request,
    exp: Optional[int] = None,
    sig: Optional[str] = None,
    storage: LocalStorageService = Depends(get_storage_client),
):
    """Upload target for URLs handed out by the local storage backend."""
    _require_signature(storage, "PUT", path, exp, sig)
    data = await request.body()
    await storage.save_bytes(path, data, request.headers.get("content-type"))
    logger.debug(f"Stored {len(data)} bytes at {mask_storage_key(path)}")


@router.get("/{path:path}")
async def download_media(
    path: str,
    exp: Optional[int] = None,
    sig: Optional[str] = None,
    storage: LocalStorageService = Depends(get_storage_client),
):
    _require_signature(storage, "GET", path, exp, sig)
    metadata = await storage.get_metadata(path)
    if metadata is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Media not found")
    data = await storage.read_file(path)
    return Response(content=data, media_type=metadata.content_type or "application/octet-stream")
