"""Physical tables of a restaurant. Edited by restaurant configuration; read-only to the assigner."""
from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, ForeignKey, Integer
from sqlalchemy.sql import func

from booking_engine.db.base import Base


class DiningTable(Base):
    __tablename__ = "tables"

    id = Column(Integer, primary_key=True, index=True)
    restaurant_id = Column(Integer, ForeignKey("restaurants.id"), nullable=False, index=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=True)
    table_number = Column(Integer, nullable=False)
    capacity = Column(Integer, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (CheckConstraint("capacity > 0", name="ck_tables_capacity_positive"),)
