from .base import ObjectMetadata, StorageService
from .factory import get_storage_client

__all__ = ["ObjectMetadata", "StorageService", "get_storage_client"]
