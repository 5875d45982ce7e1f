"""
Every ASSIGNMENT_CHECK_INTERVAL_MINUTES: find confirmed bookings without a table that start
within the next ASSIGNMENT_THRESHOLD_MINUTES and give each one a table (best fit, or by
relocating existing bookings). One run at start-up, then on the interval.

Bookings further out are left for a later cycle, when table state is more certain; bookings
that already started are never touched. A failure on one booking is logged and the scan
moves on. Only one cycle runs at a time: a tick (or manual run) arriving while a cycle is in
progress is skipped, not queued.
"""
import logging
from datetime import datetime
from typing import Callable
from zoneinfo import ZoneInfo

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from booking_engine.core.assignment_config import AssignmentConfig
from booking_engine.core.constants import ASSIGNMENT_JOB_ID
from booking_engine.services.assignment.assigner import AssignmentOutcome, TableAssigner
from booking_engine.services.assignment.audit import AssignmentAuditSink
from booking_engine.services.availability.conflicts import ConflictDetector
from booking_engine.services.availability.types import AssignmentRunReport
from booking_engine.services.availability.windows import local_now, minutes_until
from booking_engine.services.storage.base import BookingStore

logger = logging.getLogger(__name__)


class AssignmentScheduler:
    def __init__(
        self,
        store: BookingStore,
        config: AssignmentConfig | None = None,
        audit_sink: AssignmentAuditSink | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self.store = store
        self.config = config or AssignmentConfig()
        self.detector = ConflictDetector(
            buffer_minutes=self.config.buffer_minutes,
            default_duration_minutes=self.config.default_duration_minutes,
        )
        self.assigner = TableAssigner(store, self.detector, audit_sink)
        self._clock = clock or self._local_now
        self._scheduler: AsyncIOScheduler | None = None
        self._running = False
        self.last_report: AssignmentRunReport | None = None

    def _local_now(self) -> datetime:
        return local_now(self.config.timezone)

    @property
    def is_started(self) -> bool:
        return self._scheduler is not None

    @property
    def is_running(self) -> bool:
        return self._running

    def start(self) -> None:
        """Register the interval job and run once immediately. Must be called with a running event loop."""
        if self._scheduler is not None:
            logger.info("Auto-assignment scheduler is already running")
            return
        tz = ZoneInfo(self.config.timezone)
        scheduler = AsyncIOScheduler(timezone=tz)
        scheduler.add_job(
            self._run_job,
            "interval",
            minutes=self.config.check_interval_minutes,
            id=ASSIGNMENT_JOB_ID,
            next_run_time=datetime.now(tz),
            coalesce=True,
            max_instances=1,
        )
        scheduler.start()
        self._scheduler = scheduler
        logger.info(
            "Auto-assignment scheduler started: every %s min, threshold %s min, buffer %s min",
            self.config.check_interval_minutes,
            self.config.threshold_minutes,
            self.config.buffer_minutes,
        )

    def stop(self) -> None:
        """Remove the timer. A cycle already in progress runs to completion."""
        if self._scheduler is None:
            return
        self._scheduler.shutdown(wait=False)
        self._scheduler = None
        logger.info("Auto-assignment scheduler stopped")

    async def _run_job(self) -> None:
        try:
            await self.run_check_now()
        except Exception as e:
            logger.exception("Auto-assignment tick failed: %s", e)

    async def run_check_now(
        self,
        now: datetime | None = None,
        restaurant_id: int | None = None,
    ) -> AssignmentRunReport:
        """Run one cycle outside the timer cadence (manual trigger, tests).

        now: naive restaurant-local time; defaults to the scheduler clock.
        """
        now = now or self._clock()
        if self._running:
            logger.warning("Auto-assignment cycle still in progress; skipping run requested at %s", now.isoformat())
            return AssignmentRunReport(started_at=now, finished_at=now, skipped=True)
        self._running = True
        try:
            report = await self._run_cycle(now, restaurant_id)
        finally:
            self._running = False
        self.last_report = report
        return report

    async def _run_cycle(self, now: datetime, restaurant_id: int | None) -> AssignmentRunReport:
        report = AssignmentRunReport(started_at=now)
        logger.debug("Checking for unassigned bookings...")
        try:
            bookings = await self.store.get_unassigned_confirmed_bookings(restaurant_id)
        except Exception as e:
            logger.exception("Could not load unassigned bookings: %s", e)
            report.error = str(e)
            report.finished_at = self._clock()
            return report

        report.scanned = len(bookings)
        if not bookings:
            logger.debug("No unassigned bookings found")

        for booking in bookings:
            until = minutes_until(booking.booking_date, booking.start_time, now)
            if not 0 < until <= self.config.threshold_minutes:
                continue
            report.eligible += 1
            logger.info("Auto-assigning table for booking %s - %d minutes until start", booking.id, until)
            try:
                result = await self.assigner.process(booking, now)
            except Exception as e:
                logger.exception("Error processing booking %s: %s", booking.id, e)
                report.failed.append(booking.id)
                continue

            if result.outcome is AssignmentOutcome.ASSIGNED:
                report.assigned.append(booking.id)
            elif result.outcome is AssignmentOutcome.CONFLICT_RESOLVED:
                report.conflict_resolved.append(booking.id)
                report.relocated.extend(result.relocated)
            elif result.outcome is AssignmentOutcome.NO_CAPACITY:
                report.no_capacity.append(booking.id)
            else:
                report.unresolved.append(booking.id)

        report.finished_at = self._clock()
        logger.info(
            "Auto-assignment cycle: scanned=%s eligible=%s assigned=%s resolved=%s unresolved=%s no_capacity=%s failed=%s",
            report.scanned,
            report.eligible,
            len(report.assigned),
            len(report.conflict_resolved),
            len(report.unresolved),
            len(report.no_capacity),
            len(report.failed),
        )
        return report
