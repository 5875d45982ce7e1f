"""
Assignment audit sinks: one record per assignment or relocation decision.

The record fields (booking id, table id, assignment type, timestamp) are the contract with
monitoring; how they travel (log line, table row, list in a test) is up to the sink.
"""
import asyncio
import logging
from typing import Protocol

from sqlalchemy.orm import sessionmaker

from booking_engine.services.availability.types import AssignmentLogEntry

audit_logger = logging.getLogger("booking_engine.audit")
logger = logging.getLogger(__name__)


class AssignmentAuditSink(Protocol):
    async def record(self, entry: AssignmentLogEntry) -> None:
        ...


class LoggingAuditSink:
    """Default sink: one INFO line per decision on the booking_engine.audit logger."""

    async def record(self, entry: AssignmentLogEntry) -> None:
        audit_logger.info(
            "ASSIGNMENT booking_id=%s table_id=%s assignment_type=%s assigned_at=%s",
            entry.booking_id,
            entry.table_id,
            entry.assignment_type.value,
            entry.assigned_at.isoformat(),
        )


class MemoryAuditSink:
    def __init__(self):
        self.entries: list[AssignmentLogEntry] = []

    async def record(self, entry: AssignmentLogEntry) -> None:
        self.entries.append(entry)


class SqlAlchemyAuditSink:
    """Persists entries to assignment_logs and mirrors them to the log."""

    def __init__(self, session_factory: sessionmaker | None = None):
        if session_factory is None:
            from booking_engine.db.session import SessionLocal

            session_factory = SessionLocal
        self._session_factory = session_factory
        self._log_sink = LoggingAuditSink()

    def _insert(self, entry: AssignmentLogEntry) -> None:
        from booking_engine.models.assignment_log import AssignmentLog

        db = self._session_factory()
        try:
            db.add(
                AssignmentLog(
                    booking_id=entry.booking_id,
                    table_id=entry.table_id,
                    assignment_type=entry.assignment_type.value,
                    assigned_at=entry.assigned_at,
                )
            )
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    async def record(self, entry: AssignmentLogEntry) -> None:
        await self._log_sink.record(entry)
        try:
            await asyncio.to_thread(self._insert, entry)
        except Exception:
            # Assignment is already committed; audit failures are logged only
            logger.exception("Failed to persist assignment log for booking %s", entry.booking_id)
