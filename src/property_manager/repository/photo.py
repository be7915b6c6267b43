import uuid
from typing import List, Optional, Sequence, Type, Union

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from property_manager.models.photo import PropertyPhoto, WorkOrderPhoto

PhotoModel = Union[Type[PropertyPhoto], Type[WorkOrderPhoto]]
Photo = Union[PropertyPhoto, WorkOrderPhoto]


class PhotoRepository:
    """Photo records of one owner kind. Every query is scoped by account and owner."""

    def __init__(self, db: AsyncSession, model: PhotoModel):
        self.db = db
        self.model = model

    def _scoped(self, account_id: uuid.UUID, owner_id: uuid.UUID):
        return select(self.model).where(
            self.model.account_id == account_id,
            self.model.owner_id == owner_id,
        )

    async def get_by_id(self, account_id: uuid.UUID, owner_id: uuid.UUID, photo_id: uuid.UUID) -> Optional[Photo]:
        result = await self.db.execute(self._scoped(account_id, owner_id).where(self.model.id == photo_id))
        return result.scalars().first()

    async def list_by_owner(self, account_id: uuid.UUID, owner_id: uuid.UUID) -> List[Photo]:
        result = await self.db.execute(
            self._scoped(account_id, owner_id).order_by(
                self.model.display_order.asc(),
                self.model.created_at.asc(),
                self.model.id.asc(),
            )
        )
        return list(result.scalars().all())

    async def count_by_owner(self, account_id: uuid.UUID, owner_id: uuid.UUID) -> int:
        result = await self.db.execute(
            select(func.count(self.model.id)).where(
                self.model.account_id == account_id,
                self.model.owner_id == owner_id,
            )
        )
        return result.scalar_one()

    async def get_primary(self, account_id: uuid.UUID, owner_id: uuid.UUID) -> Optional[Photo]:
        result = await self.db.execute(self._scoped(account_id, owner_id).where(self.model.is_primary.is_(True)))
        return result.scalars().first()

    async def get_first_by_display_order(
        self,
        account_id: uuid.UUID,
        owner_id: uuid.UUID,
        exclude_id: Optional[uuid.UUID] = None,
    ) -> Optional[Photo]:
        query = self._scoped(account_id, owner_id)
        if exclude_id is not None:
            query = query.where(self.model.id != exclude_id)
        result = await self.db.execute(
            query.order_by(self.model.display_order.asc(), self.model.created_at.asc(), self.model.id.asc()).limit(1)
        )
        return result.scalars().first()

    async def add(self, photo: Photo) -> Photo:
        self.db.add(photo)
        await self.db.flush()
        return photo

    async def delete(self, photo: Photo):
        await self.db.delete(photo)
        await self.db.flush()

    async def set_primary_exclusive(self, photos: Sequence[Photo], target: Photo):
        """
        Make ``target`` the only primary photo among ``photos``.

        Flags are cleared and flushed before the target is raised so the partial
        unique index never sees two primaries inside the transaction.
        """
        cleared = False
        for photo in photos:
            if photo.id != target.id and photo.is_primary:
                photo.is_primary = False
                cleared = True
        if cleared:
            await self.db.flush()

        target.is_primary = True
        await self.db.flush()

    async def update_display_orders(self, photos_in_order: Sequence[Photo]):
        for index, photo in enumerate(photos_in_order):
            photo.display_order = index
        await self.db.flush()
