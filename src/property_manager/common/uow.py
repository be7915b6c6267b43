import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from property_manager.core.exceptions import ConflictError
from property_manager.domain.owner_kind import OwnerKind
from property_manager.models.owner import Property, WorkOrder
from property_manager.models.photo import PropertyPhoto, WorkOrderPhoto
from property_manager.repository.owner import OwnerRepository
from property_manager.repository.photo import PhotoRepository

logger = logging.getLogger(__name__)


class UnitOfWork:
    """
    Unit of Work pattern to manage repositories and database transactions.
    """
    def __init__(self, db: AsyncSession):
        self.db = db
        self.properties = OwnerRepository(db, Property)
        self.work_orders = OwnerRepository(db, WorkOrder)
        self.property_photos = PhotoRepository(db, PropertyPhoto)
        self.work_order_photos = PhotoRepository(db, WorkOrderPhoto)

    def owners(self, kind: OwnerKind) -> OwnerRepository:
        return self.properties if kind is OwnerKind.PROPERTY else self.work_orders

    def photos(self, kind: OwnerKind) -> PhotoRepository:
        return self.property_photos if kind is OwnerKind.PROPERTY else self.work_order_photos

    async def commit(self):
        """Commit, reporting constraint violations as a retryable conflict."""
        try:
            await self.db.commit()
        except IntegrityError as e:
            logger.warning(f"Commit rejected by a uniqueness constraint: {e.orig}")
            await self.db.rollback()
            raise ConflictError("The photo set was modified concurrently. Retry the request.") from e

    async def rollback(self):
        await self.db.rollback()

    async def flush(self):
        await self.db.flush()

    async def refresh(self, instance):
        await self.db.refresh(instance)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            await self.commit()
            return False

        await self.rollback()
        if issubclass(exc_type, IntegrityError):
            logger.warning(f"Transaction rejected by a uniqueness constraint: {exc_val.orig}")
            raise ConflictError("The photo set was modified concurrently. Retry the request.") from exc_val
        return False
