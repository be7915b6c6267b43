import uuid
from typing import Type, Union

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from property_manager.models.owner import Property, WorkOrder

OwnerModel = Union[Type[Property], Type[WorkOrder]]


class OwnerRepository:
    """Tenant-scoped existence checks for the entities photos hang off."""

    def __init__(self, db: AsyncSession, model: OwnerModel):
        self.db = db
        self.model = model

    async def exists(self, account_id: uuid.UUID, owner_id: uuid.UUID, lock: bool = False) -> bool:
        """
        True when the owner exists, is not soft-deleted and belongs to ``account_id``.

        With ``lock`` the owner row is selected FOR UPDATE, which serializes
        concurrent photo mutations for the same owner until the transaction ends.
        """
        query = select(self.model.id).where(
            self.model.id == owner_id,
            self.model.account_id == account_id,
            self.model.deleted_at.is_(None),
        )
        if lock:
            query = query.with_for_update()
        result = await self.db.execute(query)
        return result.scalar_one_or_none() is not None
