"""Protocol for the storage collaborator. The engine only ever talks to storage through this."""
from datetime import date, datetime
from typing import Protocol

from booking_engine.services.availability.types import (
    AssignmentType,
    Booking,
    CutOffTime,
    OpeningHours,
    SpecialPeriod,
    Table,
)


class BookingStore(Protocol):
    """Async so a slow database never blocks the event loop; calls are awaited one at a time.

    Implementations raise StorageUnavailable for any backend failure and BookingNotFound
    when an update targets a missing booking.
    """

    async def get_unassigned_confirmed_bookings(self, restaurant_id: int | None = None) -> list[Booking]:
        """Confirmed bookings without a table, optionally for one restaurant."""
        ...

    async def get_booking(self, booking_id: int) -> Booking | None:
        ...

    async def get_tables(self, restaurant_id: int) -> list[Table]:
        ...

    async def get_bookings_for_date(self, restaurant_id: int, day: date) -> list[Booking]:
        """Every booking of the restaurant on that date, any status."""
        ...

    async def update_booking_assignment(
        self,
        booking_id: int,
        table_id: int | None,
        assignment_type: AssignmentType | None,
        assigned_at: datetime | None,
    ) -> Booking:
        ...

    async def get_opening_hours(self, restaurant_id: int) -> list[OpeningHours]:
        ...

    async def get_special_periods(self, restaurant_id: int) -> list[SpecialPeriod]:
        ...

    async def get_cut_off_times(self, restaurant_id: int) -> list[CutOffTime]:
        ...
