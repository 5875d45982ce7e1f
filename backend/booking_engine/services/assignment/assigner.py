"""
Assign one unassigned booking to a table, relocating existing bookings when every fitting
table is taken.

Conflict resolution walks the blocked tables best fit first. For a table it plans a new
home for every booking blocking it (never the table being freed, never a party that is
already seated); only a complete plan is written, relocations first, then the booking
under evaluation takes the freed table.
"""
import logging
from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum

from booking_engine.core.errors import AllCandidatesConflicted, NoCapacityAvailable
from booking_engine.services.assignment.audit import AssignmentAuditSink, LoggingAuditSink
from booking_engine.services.availability.conflicts import ConflictDetector
from booking_engine.services.availability.types import AssignmentLogEntry, AssignmentType, Booking, Table
from booking_engine.services.availability.windows import minutes_until
from booking_engine.services.storage.base import BookingStore

logger = logging.getLogger(__name__)


class AssignmentOutcome(str, Enum):
    ASSIGNED = "assigned"
    CONFLICT_RESOLVED = "conflict_resolved"
    UNRESOLVED = "unresolved"
    NO_CAPACITY = "no_capacity"


@dataclass(frozen=True)
class ProcessResult:
    outcome: AssignmentOutcome
    table_id: int | None = None
    relocated: tuple[int, ...] = ()


class TableAssigner:
    def __init__(
        self,
        store: BookingStore,
        detector: ConflictDetector,
        audit_sink: AssignmentAuditSink | None = None,
    ):
        self.store = store
        self.detector = detector
        self.audit_sink = audit_sink or LoggingAuditSink()

    async def process(self, booking: Booking, now: datetime) -> ProcessResult:
        tables = await self.store.get_tables(booking.restaurant_id)
        existing = await self.store.get_bookings_for_date(booking.restaurant_id, booking.booking_date)
        try:
            table = self.detector.select_table(booking, tables, existing)
        except NoCapacityAvailable as e:
            logger.info("%s; retrying next cycle", e)
            return ProcessResult(AssignmentOutcome.NO_CAPACITY)
        except AllCandidatesConflicted as e:
            logger.info("%s; attempting conflict resolution", e)
            return await self._resolve(booking, tables, existing, now)

        await self._write(booking.id, table.id, AssignmentType.AUTO, now)
        logger.info(
            "Auto-assigned table %s (capacity %s) to booking %s (%s guests)",
            table.number,
            table.capacity,
            booking.id,
            booking.party_size,
        )
        return ProcessResult(AssignmentOutcome.ASSIGNED, table.id)

    def plan_relocations(
        self,
        booking: Booking,
        table: Table,
        tables: list[Table],
        existing: list[Booking],
        now: datetime,
    ) -> list[tuple[Booking, Table]] | None:
        """New tables for every booking blocking `table` at `booking`'s time, or None if any cannot move."""
        blockers = self.detector.blocking_bookings(table, self.detector.window(booking), existing, booking.id)
        others = [t for t in tables if t.id != table.id]
        working = list(existing)
        plan: list[tuple[Booking, Table]] = []
        for blocker in blockers:
            if not blocker.is_confirmed:
                return None
            if minutes_until(blocker.booking_date, blocker.start_time, now) <= 0:
                # Party already seated
                return None
            alternative = self.detector.find_best_available_table(blocker, others, working)
            if alternative is None:
                return None
            working = [replace(b, table_id=alternative.id) if b.id == blocker.id else b for b in working]
            plan.append((blocker, alternative))
        return plan

    async def _resolve(
        self,
        booking: Booking,
        tables: list[Table],
        existing: list[Booking],
        now: datetime,
    ) -> ProcessResult:
        for table in self.detector.conflicted_tables(booking, tables, existing):
            plan = self.plan_relocations(booking, table, tables, existing, now)
            if not plan:
                continue
            for moved, alternative in plan:
                await self._write(moved.id, alternative.id, AssignmentType.AUTO_REASSIGN, now)
            await self._write(booking.id, table.id, AssignmentType.AUTO_CONFLICT_RESOLVED, now)
            logger.info(
                "Conflict resolved: moved bookings %s off table %s, assigned it to booking %s",
                [m.id for m, _ in plan],
                table.number,
                booking.id,
            )
            return ProcessResult(
                AssignmentOutcome.CONFLICT_RESOLVED,
                table.id,
                tuple(m.id for m, _ in plan),
            )

        logger.info("Unable to resolve conflicts for booking %s; retrying next cycle", booking.id)
        return ProcessResult(AssignmentOutcome.UNRESOLVED)

    async def _write(self, booking_id: int, table_id: int, assignment_type: AssignmentType, now: datetime) -> None:
        await self.store.update_booking_assignment(booking_id, table_id, assignment_type, now)
        await self.audit_sink.record(
            AssignmentLogEntry(
                booking_id=booking_id,
                table_id=table_id,
                assignment_type=assignment_type,
                assigned_at=now,
            )
        )
