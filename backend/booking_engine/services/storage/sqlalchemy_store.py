"""
BookingStore over the SQLAlchemy models.

Each call opens its own short-lived session and runs in a worker thread (asyncio.to_thread),
so the scheduler's event loop never blocks on the database. Rows are turned into typed
records here, once; rows that fail validation are logged and skipped instead of poisoning
a whole scan.
"""
import asyncio
import logging
from datetime import date, datetime
from typing import Any, Callable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from booking_engine.core.errors import BookingNotFound, StorageUnavailable
from booking_engine.models.availability_rules import CutOffTime as CutOffTimeRow
from booking_engine.models.availability_rules import OpeningHours as OpeningHoursRow
from booking_engine.models.availability_rules import SpecialPeriod as SpecialPeriodRow
from booking_engine.models.booking import Booking as BookingRow
from booking_engine.models.dining_table import DiningTable
from booking_engine.services.availability.types import (
    AssignmentType,
    Booking,
    BookingStatus,
    CutOffTime,
    OpeningHours,
    SpecialPeriod,
    Table,
)

logger = logging.getLogger(__name__)


def booking_from_row(row: BookingRow) -> Booking:
    return Booking(
        id=row.id,
        restaurant_id=row.restaurant_id,
        tenant_id=row.tenant_id,
        party_size=row.guest_count,
        booking_date=row.booking_date,
        start_time=row.start_time,
        end_time=row.end_time,
        status=row.status,
        table_id=row.table_id,
        assigned_at=row.assigned_at,
        assignment_type=row.assignment_type,
        customer_name=row.customer_name,
    )


def table_from_row(row: DiningTable) -> Table:
    return Table(
        id=row.id,
        restaurant_id=row.restaurant_id,
        number=row.table_number,
        capacity=row.capacity,
        is_active=bool(row.is_active),
    )


def _convert(rows, fn: Callable[[Any], Any], kind: str) -> list:
    out = []
    for row in rows:
        try:
            out.append(fn(row))
        except ValueError as e:
            logger.warning("Skipping invalid %s row id=%s: %s", kind, getattr(row, "id", None), e)
    return out


class SqlAlchemyBookingStore:
    def __init__(self, session_factory: sessionmaker | None = None):
        if session_factory is None:
            from booking_engine.db.session import SessionLocal

            session_factory = SessionLocal
        self._session_factory = session_factory

    async def _run(self, fn: Callable[..., Any], *args: Any) -> Any:
        try:
            return await asyncio.to_thread(self._in_session, fn, *args)
        except SQLAlchemyError as e:
            raise StorageUnavailable(f"{fn.__name__} failed: {e}") from e

    def _in_session(self, fn: Callable[..., Any], *args: Any) -> Any:
        db = self._session_factory()
        try:
            return fn(db, *args)
        except SQLAlchemyError:
            db.rollback()
            raise
        finally:
            db.close()

    # --- Bookings ---

    @staticmethod
    def _unassigned(db: Session, restaurant_id: int | None) -> list[Booking]:
        q = db.query(BookingRow).filter(
            BookingRow.status == BookingStatus.CONFIRMED.value,
            BookingRow.table_id.is_(None),
        )
        if restaurant_id is not None:
            q = q.filter(BookingRow.restaurant_id == restaurant_id)
        rows = q.order_by(BookingRow.booking_date, BookingRow.start_time, BookingRow.id).all()
        return _convert(rows, booking_from_row, "booking")

    async def get_unassigned_confirmed_bookings(self, restaurant_id: int | None = None) -> list[Booking]:
        return await self._run(self._unassigned, restaurant_id)

    @staticmethod
    def _booking(db: Session, booking_id: int) -> Booking | None:
        row = db.query(BookingRow).filter(BookingRow.id == booking_id).first()
        if row is None:
            return None
        converted = _convert([row], booking_from_row, "booking")
        return converted[0] if converted else None

    async def get_booking(self, booking_id: int) -> Booking | None:
        return await self._run(self._booking, booking_id)

    @staticmethod
    def _for_date(db: Session, restaurant_id: int, day: date) -> list[Booking]:
        rows = (
            db.query(BookingRow)
            .filter(BookingRow.restaurant_id == restaurant_id, BookingRow.booking_date == day)
            .order_by(BookingRow.start_time, BookingRow.id)
            .all()
        )
        return _convert(rows, booking_from_row, "booking")

    async def get_bookings_for_date(self, restaurant_id: int, day: date) -> list[Booking]:
        return await self._run(self._for_date, restaurant_id, day)

    @staticmethod
    def _update_assignment(
        db: Session,
        booking_id: int,
        table_id: int | None,
        assignment_type: AssignmentType | None,
        assigned_at: datetime | None,
    ) -> Booking:
        row = db.query(BookingRow).filter(BookingRow.id == booking_id).first()
        if row is None:
            raise BookingNotFound(booking_id)
        row.table_id = table_id
        row.assignment_type = assignment_type.value if assignment_type else None
        row.assigned_at = assigned_at
        db.commit()
        db.refresh(row)
        return booking_from_row(row)

    async def update_booking_assignment(
        self,
        booking_id: int,
        table_id: int | None,
        assignment_type: AssignmentType | None,
        assigned_at: datetime | None,
    ) -> Booking:
        return await self._run(self._update_assignment, booking_id, table_id, assignment_type, assigned_at)

    # --- Tables and rules ---

    @staticmethod
    def _tables(db: Session, restaurant_id: int) -> list[Table]:
        rows = (
            db.query(DiningTable)
            .filter(DiningTable.restaurant_id == restaurant_id)
            .order_by(DiningTable.table_number)
            .all()
        )
        return _convert(rows, table_from_row, "table")

    async def get_tables(self, restaurant_id: int) -> list[Table]:
        return await self._run(self._tables, restaurant_id)

    @staticmethod
    def _opening_hours(db: Session, restaurant_id: int) -> list[OpeningHours]:
        rows = db.query(OpeningHoursRow).filter(OpeningHoursRow.restaurant_id == restaurant_id).all()
        return _convert(
            rows,
            lambda r: OpeningHours(
                day_of_week=r.day_of_week,
                is_open=bool(r.is_open),
                open_time=r.open_time,
                close_time=r.close_time,
            ),
            "opening_hours",
        )

    async def get_opening_hours(self, restaurant_id: int) -> list[OpeningHours]:
        return await self._run(self._opening_hours, restaurant_id)

    @staticmethod
    def _special_periods(db: Session, restaurant_id: int) -> list[SpecialPeriod]:
        rows = db.query(SpecialPeriodRow).filter(SpecialPeriodRow.restaurant_id == restaurant_id).all()
        return _convert(
            rows,
            lambda r: SpecialPeriod(
                start_date=r.start_date,
                end_date=r.end_date,
                is_open=bool(r.is_open),
                open_time=r.open_time,
                close_time=r.close_time,
                name=r.name or "",
            ),
            "special_period",
        )

    async def get_special_periods(self, restaurant_id: int) -> list[SpecialPeriod]:
        return await self._run(self._special_periods, restaurant_id)

    @staticmethod
    def _cut_off_times(db: Session, restaurant_id: int) -> list[CutOffTime]:
        rows = db.query(CutOffTimeRow).filter(CutOffTimeRow.restaurant_id == restaurant_id).all()
        return _convert(
            rows,
            lambda r: CutOffTime(
                hours=r.cut_off_hours,
                minutes=r.cut_off_minutes or 0,
                day_of_week=r.day_of_week,
                is_enabled=bool(r.is_enabled),
            ),
            "cut_off_time",
        )

    async def get_cut_off_times(self, restaurant_id: int) -> list[CutOffTime]:
        return await self._run(self._cut_off_times, restaurant_id)
