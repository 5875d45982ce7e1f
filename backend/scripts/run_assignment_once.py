#!/usr/bin/env python3
"""
Run one table auto-assignment cycle against the configured database and print the report.
Same code path as the scheduler tick; safe to run while the backend is stopped.
Run: cd backend && poetry run python scripts/run_assignment_once.py [--restaurant-id N]
"""
import argparse
import asyncio
import json
import sys
from pathlib import Path

# backend/scripts/ -> backend/
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from booking_engine.core.assignment_config import get_assignment_config
from booking_engine.core.logging_config import setup_logging
from booking_engine.scheduler.assignment_scheduler import AssignmentScheduler
from booking_engine.services.assignment.audit import SqlAlchemyAuditSink
from booking_engine.services.storage.sqlalchemy_store import SqlAlchemyBookingStore


def main():
    parser = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    parser.add_argument("--restaurant-id", type=int, default=None, help="Only this restaurant (default: all)")
    args = parser.parse_args()

    setup_logging()
    scheduler = AssignmentScheduler(
        SqlAlchemyBookingStore(),
        get_assignment_config(),
        audit_sink=SqlAlchemyAuditSink(),
    )
    report = asyncio.run(scheduler.run_check_now(restaurant_id=args.restaurant_id))
    print(json.dumps(report.to_dict(), indent=2))


if __name__ == "__main__":
    main()
