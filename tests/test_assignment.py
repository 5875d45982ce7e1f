"""
Auto-assignment cycles against the in-memory store: best fit, conflict resolution,
threshold filtering, idempotence, failure isolation.
"""
import asyncio
from dataclasses import replace

import pytest

from booking_engine.core.assignment_config import AssignmentConfig
from booking_engine.core.errors import StorageUnavailable
from booking_engine.scheduler.assignment_scheduler import AssignmentScheduler
from booking_engine.services.assignment.assigner import AssignmentOutcome, TableAssigner
from booking_engine.services.assignment.audit import MemoryAuditSink
from booking_engine.services.availability.conflicts import ConflictDetector, detect_double_bookings
from booking_engine.services.availability.types import AssignmentType, Booking, BookingStatus, Table
from booking_engine.services.storage.memory import InMemoryBookingStore
from tests.conftest import DAY, RESTAURANT_ID, TENANT_ID, at


@pytest.fixture
def audit():
    return MemoryAuditSink()


@pytest.fixture
def scheduler(store, audit):
    return AssignmentScheduler(store, AssignmentConfig(), audit_sink=audit, clock=lambda: at("17:00"))


def _run(scheduler, now="17:00"):
    return asyncio.run(scheduler.run_check_now(now=at(now)))


# ============ BEST FIT ============


def test_smallest_fitting_table_is_chosen(store, add_table, add_booking, scheduler, audit):
    add_table(1, 6)
    add_table(2, 4)
    add_booking(100, 4, "18:30")

    report = _run(scheduler)

    assert report.assigned == [100]
    booking = store.bookings[100]
    assert booking.table_id == 2
    assert booking.assignment_type is AssignmentType.AUTO
    assert booking.assigned_at == at("17:00")
    assert [(e.booking_id, e.table_id, e.assignment_type) for e in audit.entries] == [
        (100, 2, AssignmentType.AUTO)
    ]


def test_party_too_large_is_no_capacity(store, add_table, add_booking, scheduler, audit):
    add_table(1, 4)
    add_table(2, 12, is_active=False)
    add_booking(100, 10, "18:00")

    report = _run(scheduler)

    assert report.no_capacity == [100]
    assert store.bookings[100].table_id is None
    assert audit.entries == []


# ============ CONFLICT RESOLUTION ============


def test_blocking_booking_is_relocated(store, add_table, add_booking, scheduler, audit):
    add_table(1, 4)  # A
    add_table(2, 6)  # B
    add_table(3, 2)  # C
    add_booking(1, 2, "18:00", end="20:00", table_id=1)
    add_booking(2, 6, "18:00", end="20:00", table_id=2)
    add_booking(100, 4, "18:30", end="20:30")

    report = _run(scheduler)

    assert report.conflict_resolved == [100]
    assert report.relocated == [1]
    assert store.bookings[1].table_id == 3
    assert store.bookings[1].assignment_type is AssignmentType.AUTO_REASSIGN
    assert store.bookings[100].table_id == 1
    assert store.bookings[100].assignment_type is AssignmentType.AUTO_CONFLICT_RESOLVED
    assert [(e.booking_id, e.table_id, e.assignment_type) for e in audit.entries] == [
        (1, 3, AssignmentType.AUTO_REASSIGN),
        (100, 1, AssignmentType.AUTO_CONFLICT_RESOLVED),
    ]


def test_every_blocker_on_the_table_is_moved(store, add_table, add_booking, scheduler):
    add_table(1, 4)
    add_table(3, 2)
    add_booking(1, 2, "17:15", end="18:15", table_id=1)
    add_booking(2, 2, "19:45", end="21:45", table_id=1)
    add_booking(100, 4, "18:30", end="20:30")

    report = _run(scheduler)

    assert report.conflict_resolved == [100]
    assert sorted(report.relocated) == [1, 2]
    assert store.bookings[1].table_id == 3
    assert store.bookings[2].table_id == 3
    assert store.bookings[100].table_id == 1


def test_unresolved_booking_is_retried_next_cycle(store, add_table, add_booking, scheduler, audit):
    add_table(1, 4)
    add_booking(1, 2, "18:00", end="20:00", table_id=1)
    add_booking(100, 4, "18:30", end="20:30")

    first = _run(scheduler)
    assert first.unresolved == [100]
    assert store.bookings[100].table_id is None
    assert store.bookings[1].table_id == 1
    assert audit.entries == []

    # The blocking guest cancels before the next tick
    store.add_booking(replace(store.bookings[1], status=BookingStatus.CANCELLED))
    second = _run(scheduler, now="17:05")
    assert second.assigned == [100]
    assert store.bookings[100].table_id == 1


def test_never_relocates_onto_the_freed_table(store, add_table, add_booking, scheduler):
    add_table(1, 4)
    add_table(2, 4)
    add_booking(1, 2, "18:00", table_id=1)
    add_booking(2, 4, "18:00", table_id=2)
    add_booking(100, 4, "18:30")

    report = _run(scheduler)

    assert report.unresolved == [100]
    assert store.bookings[1].table_id == 1
    assert store.bookings[2].table_id == 2


def test_seated_party_is_never_relocated(store, add_table, add_booking, scheduler):
    add_table(1, 4)
    add_table(3, 2)
    add_booking(1, 2, "16:50", end="18:50", table_id=1)
    add_booking(100, 4, "18:00")

    report = _run(scheduler)

    assert report.unresolved == [100]
    assert store.bookings[1].table_id == 1


def test_pending_blocker_is_not_relocated(store, add_table, add_booking, scheduler):
    add_table(1, 4)
    add_table(3, 2)
    add_booking(1, 2, "18:00", table_id=1, status=BookingStatus.PENDING)
    add_booking(100, 4, "18:30")

    report = _run(scheduler)

    assert report.unresolved == [100]
    assert store.bookings[1].table_id == 1


def test_plan_relocations_leaves_store_untouched(store, add_table, add_booking):
    add_table(1, 4)
    add_table(3, 2)
    blocker = add_booking(1, 2, "18:00", table_id=1)
    booking = add_booking(100, 4, "18:30")
    assigner = TableAssigner(store, ConflictDetector(), MemoryAuditSink())

    plan = assigner.plan_relocations(
        booking, store.tables[1], list(store.tables.values()), list(store.bookings.values()), at("17:00")
    )

    assert [(b.id, t.id) for b, t in plan] == [(blocker.id, 3)]
    assert store.bookings[1].table_id == 1


# ============ THRESHOLD ============


def test_only_bookings_inside_threshold_are_processed(store, add_table, add_booking, scheduler):
    add_table(1, 4)
    add_table(2, 4)
    add_table(3, 4)
    add_booking(100, 2, "19:00")  # 120 min out, inclusive
    add_booking(101, 2, "19:30")  # too far out
    add_booking(102, 2, "17:00")  # starts now
    add_booking(103, 2, "12:00")  # already started
    add_booking(104, 2, "18:00", day=DAY.replace(day=14))

    report = _run(scheduler)

    assert report.scanned == 5
    assert report.eligible == 1
    assert report.assigned == [100]
    for booking_id in (101, 102, 103, 104):
        assert store.bookings[booking_id].table_id is None


def test_restaurant_filter(store, add_table, add_booking, scheduler):
    add_table(1, 4)
    add_table(2, 4, restaurant_id=2)
    add_booking(100, 2, "18:00")
    add_booking(200, 2, "18:00", restaurant_id=2)

    report = asyncio.run(scheduler.run_check_now(now=at("17:00"), restaurant_id=2))

    assert report.assigned == [200]
    assert store.bookings[200].table_id == 2
    assert store.bookings[100].table_id is None


# ============ PROPERTIES ============


def test_running_twice_assigns_nothing_twice(store, add_table, add_booking, scheduler, audit):
    add_table(1, 2)
    add_table(2, 4)
    add_booking(1, 2, "18:00", table_id=1)
    add_booking(100, 2, "18:00")
    add_booking(101, 4, "18:15")

    first = _run(scheduler)
    entries_after_first = list(audit.entries)
    second = _run(scheduler)

    assert len(first.assigned) + len(first.conflict_resolved) + len(first.unresolved) == 2
    assert second.assigned == [] and second.conflict_resolved == [] and second.relocated == []
    assert audit.entries == entries_after_first
    logged = [e.booking_id for e in audit.entries]
    assert len(logged) == len(set(logged))


def test_assignments_respect_capacity_and_buffer(store, add_table, add_booking, scheduler):
    for table_id, capacity in [(1, 2), (2, 2), (3, 4), (4, 4), (5, 6)]:
        add_table(table_id, capacity)
    starts = ["17:15", "17:30", "17:45", "18:00", "18:15", "18:30", "18:45", "19:00"]
    for i, start in enumerate(starts):
        add_booking(100 + i, 1 + (i * 3) % 6, start)

    _run(scheduler)
    _run(scheduler, now="17:05")

    bookings = list(store.bookings.values())
    assigned = [b for b in bookings if b.table_id is not None]
    assert assigned
    for b in assigned:
        assert store.tables[b.table_id].capacity >= b.party_size
    assert detect_double_bookings(bookings, buffer_minutes=30) == []


# ============ FAILURE ISOLATION ============


class FlakyStore(InMemoryBookingStore):
    def __init__(self, failing_booking_id):
        super().__init__()
        self.failing_booking_id = failing_booking_id

    async def update_booking_assignment(self, booking_id, table_id, assignment_type, assigned_at):
        if booking_id == self.failing_booking_id:
            raise StorageUnavailable("connection reset")
        return await super().update_booking_assignment(booking_id, table_id, assignment_type, assigned_at)


def test_one_failing_booking_does_not_abort_the_cycle(audit):
    store = FlakyStore(failing_booking_id=101)
    for table_id in (1, 2, 3):
        store.add_table(Table(id=table_id, restaurant_id=RESTAURANT_ID, number=table_id, capacity=4))
    for booking_id, start in [(100, "18:00"), (101, "18:10"), (102, "18:20")]:
        store.add_booking(
            Booking(
                id=booking_id,
                restaurant_id=RESTAURANT_ID,
                tenant_id=TENANT_ID,
                party_size=2,
                booking_date=DAY,
                start_time=at(start).time(),
            )
        )
    scheduler = AssignmentScheduler(store, AssignmentConfig(), audit_sink=audit)

    report = asyncio.run(scheduler.run_check_now(now=at("17:00")))

    assert report.failed == [101]
    assert sorted(report.assigned) == [100, 102]
    assert store.bookings[101].table_id is None


def test_process_result_for_direct_assignment(store, add_table, add_booking):
    add_table(1, 4)
    booking = add_booking(100, 3, "18:00")
    assigner = TableAssigner(store, ConflictDetector(), MemoryAuditSink())

    result = asyncio.run(assigner.process(booking, at("17:00")))

    assert result.outcome is AssignmentOutcome.ASSIGNED
    assert result.table_id == 1
    assert result.relocated == ()
