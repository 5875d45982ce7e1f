from booking_engine.db.base import Base
from booking_engine.db.session import engine, SessionLocal
from booking_engine.db.tables import ALL_TABLE_NAMES

__all__ = ["engine", "SessionLocal", "Base", "ALL_TABLE_NAMES"]
