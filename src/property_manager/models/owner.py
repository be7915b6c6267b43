import uuid

from sqlalchemy import Column, DateTime, ForeignKey, String, Uuid

from property_manager.db.database import Base
from property_manager.models.utils import utcnow


class Property(Base):
    __tablename__ = "properties"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    account_id = Column(Uuid, nullable=False, index=True)
    name = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)
    deleted_at = Column(DateTime(timezone=True), nullable=True)

    def __repr__(self) -> str:
        return f"<Property(id={self.id}, name={self.name})>"


class WorkOrder(Base):
    __tablename__ = "work_orders"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    account_id = Column(Uuid, nullable=False, index=True)
    property_id = Column(Uuid, ForeignKey("properties.id", ondelete="CASCADE"), nullable=False)
    description = Column(String(5000), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)
    deleted_at = Column(DateTime(timezone=True), nullable=True)

    def __repr__(self) -> str:
        return f"<WorkOrder(id={self.id}, property_id={self.property_id})>"
