"""Audit trail: one row per automatic assignment or relocation decision."""
from sqlalchemy import Column, DateTime, Integer, String
from sqlalchemy.sql import func

from booking_engine.db.base import Base


class AssignmentLog(Base):
    __tablename__ = "assignment_logs"

    id = Column(Integer, primary_key=True, index=True)
    booking_id = Column(Integer, nullable=False, index=True)
    table_id = Column(Integer, nullable=False)
    assignment_type = Column(String(32), nullable=False)
    assigned_at = Column(DateTime, nullable=False)  # naive restaurant-local wall clock
    created_at = Column(DateTime(timezone=True), server_default=func.now())
