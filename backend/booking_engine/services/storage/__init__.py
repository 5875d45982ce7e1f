"""Storage collaborator: protocol plus in-memory and SQLAlchemy implementations."""
from booking_engine.services.storage.base import BookingStore
from booking_engine.services.storage.memory import InMemoryBookingStore
from booking_engine.services.storage.sqlalchemy_store import SqlAlchemyBookingStore

__all__ = ["BookingStore", "InMemoryBookingStore", "SqlAlchemyBookingStore"]
