"""
In-process BookingStore: dict-backed, for tests and running the engine without a database.

Records are immutable, so callers can never change stored state behind the store's back;
update_booking_assignment swaps in a new record.
"""
from dataclasses import replace
from datetime import date, datetime

from booking_engine.core.errors import BookingNotFound
from booking_engine.services.availability.types import (
    AssignmentType,
    Booking,
    BookingStatus,
    CutOffTime,
    OpeningHours,
    SpecialPeriod,
    Table,
)


class InMemoryBookingStore:
    def __init__(self):
        self.tables: dict[int, Table] = {}
        self.bookings: dict[int, Booking] = {}
        self.opening_hours: dict[int, list[OpeningHours]] = {}
        self.special_periods: dict[int, list[SpecialPeriod]] = {}
        self.cut_off_times: dict[int, list[CutOffTime]] = {}

    # --- Seeding (restaurant configuration / booking path stand-ins) ---

    def add_table(self, table: Table) -> Table:
        self.tables[table.id] = table
        return table

    def add_booking(self, booking: Booking) -> Booking:
        self.bookings[booking.id] = booking
        return booking

    def set_opening_hours(self, restaurant_id: int, hours: list[OpeningHours]) -> None:
        self.opening_hours[restaurant_id] = list(hours)

    def add_special_period(self, restaurant_id: int, period: SpecialPeriod) -> None:
        self.special_periods.setdefault(restaurant_id, []).append(period)

    def set_cut_off_times(self, restaurant_id: int, cut_offs: list[CutOffTime]) -> None:
        self.cut_off_times[restaurant_id] = list(cut_offs)

    # --- BookingStore ---

    async def get_unassigned_confirmed_bookings(self, restaurant_id: int | None = None) -> list[Booking]:
        return sorted(
            (
                b
                for b in self.bookings.values()
                if b.status is BookingStatus.CONFIRMED
                and b.table_id is None
                and (restaurant_id is None or b.restaurant_id == restaurant_id)
            ),
            key=lambda b: (b.booking_date, b.start_time, b.id),
        )

    async def get_booking(self, booking_id: int) -> Booking | None:
        return self.bookings.get(booking_id)

    async def get_tables(self, restaurant_id: int) -> list[Table]:
        return [t for t in self.tables.values() if t.restaurant_id == restaurant_id]

    async def get_bookings_for_date(self, restaurant_id: int, day: date) -> list[Booking]:
        return [b for b in self.bookings.values() if b.restaurant_id == restaurant_id and b.booking_date == day]

    async def update_booking_assignment(
        self,
        booking_id: int,
        table_id: int | None,
        assignment_type: AssignmentType | None,
        assigned_at: datetime | None,
    ) -> Booking:
        current = self.bookings.get(booking_id)
        if current is None:
            raise BookingNotFound(booking_id)
        updated = replace(current, table_id=table_id, assignment_type=assignment_type, assigned_at=assigned_at)
        self.bookings[booking_id] = updated
        return updated

    async def get_opening_hours(self, restaurant_id: int) -> list[OpeningHours]:
        return list(self.opening_hours.get(restaurant_id, []))

    async def get_special_periods(self, restaurant_id: int) -> list[SpecialPeriod]:
        return list(self.special_periods.get(restaurant_id, []))

    async def get_cut_off_times(self, restaurant_id: int) -> list[CutOffTime]:
        return list(self.cut_off_times.get(restaurant_id, []))
