import uuid

from sqlalchemy import BigInteger, Boolean, Column, DateTime, ForeignKey, Index, Integer, String, Uuid, text
from sqlalchemy.orm import declared_attr, synonym

from property_manager.db.database import Base
from property_manager.models.utils import utcnow


class PhotoAssetMixin:
    """
    Columns shared by every photo table.

    Subclasses declare their own foreign key column, name it in ``OWNER_COLUMN``
    and expose it as the ``owner_id`` synonym so repositories can treat every
    photo table alike.
    """

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    account_id = Column(Uuid, nullable=False)
    storage_key = Column(String(500), nullable=False)
    thumbnail_storage_key = Column(String(500), nullable=True)
    original_file_name = Column(String(255), nullable=False)
    content_type = Column(String(100), nullable=False)
    file_size_bytes = Column(BigInteger, nullable=False)
    display_order = Column(Integer, nullable=False, default=0)
    is_primary = Column(Boolean, nullable=False, default=False)
    created_by_user_id = Column(Uuid, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    @declared_attr.directive
    def __table_args__(cls):
        table = cls.__tablename__
        owner = cls.OWNER_COLUMN
        return (
            Index(f"ix_{table}_account_id", "account_id"),
            Index(f"ix_{table}_{owner}_display_order", owner, "display_order"),
            # At most one primary photo per owner.
            Index(
                f"ix_{table}_{owner}_is_primary_unique",
                owner,
                "is_primary",
                unique=True,
                postgresql_where=text("is_primary"),
                sqlite_where=text("is_primary"),
            ),
        )

    def __repr__(self) -> str:
        return (
            f"<{type(self).__name__}(id={self.id}, owner_id={self.owner_id}, "
            f"display_order={self.display_order}, is_primary={self.is_primary})>"
        )


class PropertyPhoto(PhotoAssetMixin, Base):
    __tablename__ = "property_photos"
    OWNER_COLUMN = "property_id"

    property_id = Column(Uuid, ForeignKey("properties.id", ondelete="CASCADE"), nullable=False)
    owner_id = synonym("property_id")


class WorkOrderPhoto(PhotoAssetMixin, Base):
    __tablename__ = "work_order_photos"
    OWNER_COLUMN = "work_order_id"

    work_order_id = Column(Uuid, ForeignKey("work_orders.id", ondelete="CASCADE"), nullable=False)
    owner_id = synonym("work_order_id")
