"""Reservations. Created by the booking path; the assigner only sets table_id and assignment metadata."""
from sqlalchemy import CheckConstraint, Column, Date, DateTime, ForeignKey, Index, Integer, String, Time
from sqlalchemy.sql import func

from booking_engine.db.base import Base


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    restaurant_id = Column(Integer, ForeignKey("restaurants.id"), nullable=False)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=False)
    table_id = Column(Integer, ForeignKey("tables.id"), nullable=True)
    customer_name = Column(String(255), nullable=True)
    guest_count = Column(Integer, nullable=False)
    booking_date = Column(Date, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=True)  # null = start + default duration
    status = Column(String(20), nullable=False, default="confirmed")  # pending | confirmed | cancelled
    assigned_at = Column(DateTime, nullable=True)  # naive restaurant-local wall clock
    assignment_type = Column(String(32), nullable=True)  # manual | auto | auto_reassign | auto_conflict_resolved
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        CheckConstraint("guest_count > 0", name="ck_bookings_guest_count_positive"),
        Index("ix_bookings_restaurant_date", "restaurant_id", "booking_date"),
        Index("ix_bookings_status_table", "status", "table_id"),
    )
