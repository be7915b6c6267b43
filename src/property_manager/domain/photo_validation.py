"""Upload limits shared by upload-URL issuance and upload confirmation."""
import re
import uuid
from typing import Optional

from property_manager.core.config import settings
from property_manager.core.exceptions import InvalidArgumentError
from property_manager.domain.owner_kind import OwnerKind

CONTENT_TYPE_EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
    "image/bmp": ".bmp",
    "image/tiff": ".tiff",
}

THUMBNAIL_SUFFIX = "_thumb.jpg"

_FILE_NAME_PATTERN = re.compile(
    r"(?P<file_id>[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12})(?P<extension>\.[a-z]+)"
)


def validate_content_type(content_type: Optional[str]) -> str:
    if not content_type or not content_type.strip():
        raise InvalidArgumentError("Content type is required.", field="content_type")
    normalized = content_type.strip().lower()
    if normalized not in settings.allowed_content_types:
        allowed = ", ".join(sorted(settings.allowed_content_types))
        raise InvalidArgumentError(
            f"Content type '{content_type}' is not allowed. Allowed types: {allowed}",
            field="content_type",
        )
    return normalized


def validate_file_size(file_size_bytes: int):
    if file_size_bytes <= 0:
        raise InvalidArgumentError("File size must be greater than zero.", field="file_size_bytes")
    if file_size_bytes > settings.PHOTO_MAX_FILE_SIZE_BYTES:
        raise InvalidArgumentError(
            f"File size {file_size_bytes} bytes exceeds maximum allowed size of "
            f"{settings.PHOTO_MAX_FILE_SIZE_BYTES} bytes.",
            field="file_size_bytes",
        )


def validate_file_name(original_file_name: Optional[str]):
    if not original_file_name or not original_file_name.strip():
        raise InvalidArgumentError("Original file name is required.", field="original_file_name")
    if len(original_file_name) > settings.PHOTO_MAX_FILE_NAME_LENGTH:
        raise InvalidArgumentError(
            f"Original file name must be {settings.PHOTO_MAX_FILE_NAME_LENGTH} characters or less.",
            field="original_file_name",
        )


def validate_upload_request(content_type: str, file_size_bytes: int, original_file_name: str) -> str:
    """Validate an upload request and return the normalized content type."""
    normalized = validate_content_type(content_type)
    validate_file_size(file_size_bytes)
    validate_file_name(original_file_name)
    return normalized


def extension_for_content_type(content_type: str) -> str:
    try:
        return CONTENT_TYPE_EXTENSIONS[content_type.lower()]
    except KeyError:
        raise InvalidArgumentError(f"Unsupported content type: {content_type}", field="content_type")


def _invalid_storage_key() -> InvalidArgumentError:
    return InvalidArgumentError("Invalid storage key format", field="storage_key")


def parse_storage_key(storage_key: Optional[str], kind: OwnerKind) -> uuid.UUID:
    """
    Check that ``storage_key`` has the exact shape minted for ``kind``
    ("{tenantId}/{kind}/{year}/{fileId}{ext}") and return its tenant.

    Raises InvalidArgumentError for anything else, including relative segments.
    """
    if not storage_key:
        raise _invalid_storage_key()

    segments = storage_key.split("/")
    if len(segments) != 4:
        raise _invalid_storage_key()
    tenant, kind_segment, year, file_name = segments

    try:
        tenant_id = uuid.UUID(tenant)
    except ValueError:
        raise _invalid_storage_key()
    if str(tenant_id) != tenant:
        raise _invalid_storage_key()

    if kind_segment != kind.storage_segment:
        raise _invalid_storage_key()
    if re.fullmatch(r"[0-9]{4}", year) is None:
        raise _invalid_storage_key()

    match = _FILE_NAME_PATTERN.fullmatch(file_name)
    if match is None or match.group("extension") not in CONTENT_TYPE_EXTENSIONS.values():
        raise _invalid_storage_key()

    return tenant_id


def thumbnail_key_for(storage_key: str) -> str:
    """Thumbnail key belonging to a photo key: the same stem with ``_thumb.jpg``."""
    stem, _, _ = storage_key.rpartition(".")
    return f"{stem or storage_key}{THUMBNAIL_SUFFIX}"
