import logging
from functools import lru_cache

from property_manager.core.config import settings

from .base import StorageService

logger = logging.getLogger(__name__)


class StorageFactory:
    @staticmethod
    def get_storage_service(service_type: str = "gcs") -> StorageService:
        logger.info(f"Creating storage service of type: {service_type}")
        if service_type == "local":
            if settings.ENVIRONMENT == "production":
                logger.error("Local storage requested in production")
                raise ValueError("Local storage is not allowed in production; use STORAGE_TYPE=gcs")
            from .local import LocalStorageService

            return LocalStorageService()
        elif service_type == "gcs":
            from .gcs import GCSStorageService

            return GCSStorageService()
        else:
            logger.error(f"Unknown storage service type requested: {service_type}")
            raise ValueError(f"Unknown storage service type: {service_type}")


@lru_cache()
def get_storage_client() -> StorageService:
    storage_type = settings.STORAGE_TYPE
    logger.debug(f"Getting storage client (cached). Type: {storage_type}")
    return StorageFactory.get_storage_service(storage_type)
