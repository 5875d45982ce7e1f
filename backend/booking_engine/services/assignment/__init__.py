from booking_engine.services.assignment.assigner import AssignmentOutcome, ProcessResult, TableAssigner
from booking_engine.services.assignment.audit import (
    AssignmentAuditSink,
    LoggingAuditSink,
    MemoryAuditSink,
    SqlAlchemyAuditSink,
)

__all__ = [
    "AssignmentAuditSink",
    "AssignmentOutcome",
    "LoggingAuditSink",
    "MemoryAuditSink",
    "ProcessResult",
    "SqlAlchemyAuditSink",
    "TableAssigner",
]
