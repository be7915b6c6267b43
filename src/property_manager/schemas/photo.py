import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class PhotoUploadUrlRequest(BaseModel):
    content_type: str = Field(..., min_length=1, max_length=100)
    file_size_bytes: int = Field(..., gt=0)
    original_file_name: str = Field(..., min_length=1, max_length=255)


class PhotoUploadUrlResponse(BaseModel):
    upload_url: str
    storage_key: str
    thumbnail_storage_key: str
    expires_at: datetime


class PhotoConfirmRequest(BaseModel):
    storage_key: str = Field(..., min_length=1, max_length=500)
    thumbnail_storage_key: Optional[str] = Field(default=None, max_length=500)
    content_type: str = Field(..., min_length=1, max_length=100)
    file_size_bytes: int = Field(..., gt=0)
    original_file_name: str = Field(..., min_length=1, max_length=255)


class PhotoConfirmResponse(BaseModel):
    id: uuid.UUID
    thumbnail_url: Optional[str] = None
    view_url: Optional[str] = None
    is_primary: bool
    display_order: int


class PhotoResponse(BaseModel):
    id: uuid.UUID
    thumbnail_url: Optional[str] = None
    view_url: Optional[str] = None
    is_primary: bool
    display_order: int
    original_file_name: str
    content_type: str
    file_size_bytes: int
    created_at: datetime


class PhotoListResponse(BaseModel):
    items: List[PhotoResponse]


class PhotoReorderRequest(BaseModel):
    photo_ids: List[uuid.UUID]
