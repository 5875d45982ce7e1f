"""
Pytest fixtures for the booking engine.

The database fixtures use a throwaway SQLite file per test; engine tests mostly use the
in-memory store and a fixed clock so every scenario is deterministic.
"""
import os
import tempfile

# Must be set before booking_engine.config is imported anywhere
_DB_DIR = tempfile.mkdtemp(prefix="booking_engine_tests_")
os.environ["DATABASE_URL"] = f"sqlite:///{_DB_DIR}/app.db"
os.environ["ASSIGNMENT_ENABLED"] = "0"

from datetime import date, datetime, time

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from booking_engine.db.base import Base
from booking_engine import models
from booking_engine.services.availability.types import Booking, BookingStatus, Table
from booking_engine.services.storage.memory import InMemoryBookingStore

RESTAURANT_ID = 1
TENANT_ID = 1

# Friday 2025-06-13, a fixed "today" for scheduler scenarios
DAY = date(2025, 6, 13)


def at(hh_mm: str, day: date = DAY) -> datetime:
    hours, minutes = hh_mm.split(":")
    return datetime.combine(day, time(int(hours), int(minutes)))


# ============ DATABASE ============


@pytest.fixture(scope="function")
def session_factory():
    tmp = tempfile.NamedTemporaryFile(suffix=".db", delete=False)
    tmp.close()
    engine = create_engine(f"sqlite:///{tmp.name}", connect_args={"check_same_thread": False})
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    try:
        yield factory
    finally:
        engine.dispose()
        os.unlink(tmp.name)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def restaurant(db):
    tenant = models.Tenant(id=TENANT_ID, name="Test Tenant")
    db.add(tenant)
    db.flush()
    r = models.Restaurant(id=RESTAURANT_ID, tenant_id=TENANT_ID, name="Trattoria Test")
    db.add(r)
    db.commit()
    return r


@pytest.fixture
def make_table_row(db, restaurant):
    def _make(table_id, number, capacity, is_active=True):
        row = models.DiningTable(
            id=table_id,
            restaurant_id=restaurant.id,
            tenant_id=TENANT_ID,
            table_number=number,
            capacity=capacity,
            is_active=is_active,
        )
        db.add(row)
        db.commit()
        return row

    return _make


@pytest.fixture
def make_booking_row(db, restaurant):
    def _make(booking_id, guests, start, day=DAY, end=None, status="confirmed", table_id=None):
        row = models.Booking(
            id=booking_id,
            restaurant_id=restaurant.id,
            tenant_id=TENANT_ID,
            customer_name=f"Guest {booking_id}",
            guest_count=guests,
            booking_date=day,
            start_time=start,
            end_time=end,
            status=status,
            table_id=table_id,
        )
        db.add(row)
        db.commit()
        return row

    return _make


# ============ IN-MEMORY STORE ============


@pytest.fixture
def store():
    return InMemoryBookingStore()


@pytest.fixture
def add_table(store):
    def _add(table_id, capacity, number=None, is_active=True, restaurant_id=RESTAURANT_ID):
        return store.add_table(
            Table(
                id=table_id,
                restaurant_id=restaurant_id,
                number=number if number is not None else table_id,
                capacity=capacity,
                is_active=is_active,
            )
        )

    return _add


@pytest.fixture
def add_booking(store):
    def _add(
        booking_id,
        party_size,
        start,
        day=DAY,
        end=None,
        table_id=None,
        status=BookingStatus.CONFIRMED,
        restaurant_id=RESTAURANT_ID,
    ):
        return store.add_booking(
            Booking(
                id=booking_id,
                restaurant_id=restaurant_id,
                tenant_id=TENANT_ID,
                party_size=party_size,
                booking_date=day,
                start_time=at(start, day).time(),
                end_time=at(end, day).time() if end else None,
                status=status,
                table_id=table_id,
            )
        )

    return _add
