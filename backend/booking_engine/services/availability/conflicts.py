"""
Table conflict detection and best-fit selection.

A candidate window conflicts with an existing booking on the same table when it overlaps
that booking's window widened by the turnover buffer on both sides. Best fit = smallest
table that seats the party (ties: lowest table number), leaving big tables for big parties.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from itertools import combinations

from booking_engine.core.errors import AllCandidatesConflicted, NoCapacityAvailable
from booking_engine.services.availability.types import Booking, BookingStatus, Table
from booking_engine.services.availability.windows import TimeWindow, booking_window

logger = logging.getLogger(__name__)

DEFAULT_BUFFER_MINUTES = 30
DEFAULT_DURATION_MINUTES = 120


def _table_sort_key(table: Table) -> tuple[int, int]:
    return (table.capacity, table.number)


class ConflictDetector:
    def __init__(
        self,
        buffer_minutes: int = DEFAULT_BUFFER_MINUTES,
        default_duration_minutes: int = DEFAULT_DURATION_MINUTES,
    ):
        self.buffer_minutes = buffer_minutes
        self.default_duration_minutes = default_duration_minutes

    def window(self, booking: Booking) -> TimeWindow:
        return booking_window(booking, self.default_duration_minutes)

    def blocking_bookings(
        self,
        table: Table,
        candidate_window: TimeWindow,
        existing: list[Booking],
        exclude_booking_id: int | None = None,
    ) -> list[Booking]:
        """Existing bookings on this table whose buffered window overlaps the candidate.

        Cancelled bookings never block. Only confirmed and pending bookings seated at
        this table are considered; the booking being evaluated is skipped.
        """
        out = []
        for other in existing:
            if other.table_id != table.id or other.status is BookingStatus.CANCELLED:
                continue
            if exclude_booking_id is not None and other.id == exclude_booking_id:
                continue
            if self.window(other).expand(self.buffer_minutes).overlaps(candidate_window):
                out.append(other)
        return out

    def has_conflict(
        self,
        table: Table,
        candidate_window: TimeWindow,
        existing: list[Booking],
        exclude_booking_id: int | None = None,
    ) -> bool:
        return bool(self.blocking_bookings(table, candidate_window, existing, exclude_booking_id))

    def select_table(self, booking: Booking, tables: list[Table], existing: list[Booking]) -> Table:
        """Best-fit free table for booking, or raise why there is none."""
        fitting = [t for t in tables if t.is_active and t.capacity >= booking.party_size]
        if not fitting:
            raise NoCapacityAvailable(booking.id, booking.party_size)
        candidate = self.window(booking)
        free = [t for t in fitting if not self.has_conflict(t, candidate, existing, booking.id)]
        if not free:
            raise AllCandidatesConflicted(booking.id, [t.id for t in fitting])
        return min(free, key=_table_sort_key)

    def find_best_available_table(
        self, booking: Booking, tables: list[Table], existing: list[Booking]
    ) -> Table | None:
        try:
            return self.select_table(booking, tables, existing)
        except (NoCapacityAvailable, AllCandidatesConflicted) as e:
            logger.debug("No free table: %s", e)
            return None

    def conflicted_tables(self, booking: Booking, tables: list[Table], existing: list[Booking]) -> list[Table]:
        """Active tables big enough for the party that are blocked at its time, best fit first."""
        candidate = self.window(booking)
        out = [
            t
            for t in tables
            if t.is_active
            and t.capacity >= booking.party_size
            and self.has_conflict(t, candidate, existing, booking.id)
        ]
        return sorted(out, key=_table_sort_key)


@dataclass(frozen=True)
class DoubleBooking:
    table_id: int
    first_booking_id: int
    second_booking_id: int
    overlap: TimeWindow

    def to_dict(self) -> dict:
        return {
            "table_id": self.table_id,
            "first_booking_id": self.first_booking_id,
            "second_booking_id": self.second_booking_id,
            "overlap": str(self.overlap),
        }


def detect_double_bookings(
    bookings: list[Booking],
    buffer_minutes: int = 0,
    default_duration_minutes: int = DEFAULT_DURATION_MINUTES,
) -> list[DoubleBooking]:
    """Pairs of confirmed bookings seated at the same table on the same date whose windows overlap.

    With buffer_minutes > 0 the turnover buffer is applied to the first booking of each pair,
    which is the invariant the assigner maintains.
    """
    by_table: dict[tuple[int, object], list[Booking]] = {}
    for b in bookings:
        if b.table_id is None or b.status is not BookingStatus.CONFIRMED:
            continue
        by_table.setdefault((b.table_id, b.booking_date), []).append(b)

    out: list[DoubleBooking] = []
    for (table_id, _day), rows in by_table.items():
        rows.sort(key=lambda b: (b.start_time, b.id))
        for first, second in combinations(rows, 2):
            w1 = booking_window(first, default_duration_minutes)
            w2 = booking_window(second, default_duration_minutes)
            if w1.expand(buffer_minutes).overlaps(w2):
                overlap = w1.expand(buffer_minutes).intersection(w2)
                out.append(DoubleBooking(table_id, first.id, second.id, overlap))
    return out


class CapacityIssueKind(str, Enum):
    ASSIGNED_TABLE_TOO_SMALL = "assigned_table_too_small"
    NO_SUITABLE_TABLE = "no_suitable_table"


@dataclass(frozen=True)
class CapacityIssue:
    kind: CapacityIssueKind
    booking_id: int
    party_size: int
    table_id: int | None
    capacity: int

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "booking_id": self.booking_id,
            "party_size": self.party_size,
            "table_id": self.table_id,
            "capacity": self.capacity,
        }


def detect_capacity_exceeded(bookings: list[Booking], tables: list[Table]) -> list[CapacityIssue]:
    """Bookings seated at a table too small for the party, and unassigned parties no active table can seat.

    capacity is the assigned table's capacity, or the largest active capacity for unassigned bookings.
    Cancelled bookings are ignored.
    """
    capacity_by_table = {t.id: t.capacity for t in tables}
    max_capacity = max((t.capacity for t in tables if t.is_active), default=0)

    out: list[CapacityIssue] = []
    for b in bookings:
        if b.status is BookingStatus.CANCELLED:
            continue
        if b.table_id is not None:
            capacity = capacity_by_table.get(b.table_id)
            if capacity is not None and b.party_size > capacity:
                out.append(
                    CapacityIssue(CapacityIssueKind.ASSIGNED_TABLE_TOO_SMALL, b.id, b.party_size, b.table_id, capacity)
                )
        elif b.party_size > max_capacity:
            out.append(CapacityIssue(CapacityIssueKind.NO_SUITABLE_TABLE, b.id, b.party_size, None, max_capacity))
    return out
