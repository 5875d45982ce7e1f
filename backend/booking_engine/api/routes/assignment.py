"""
Auto-assignment: manual trigger and status, plus the double-booking audit per date.
"""
from datetime import date
from typing import Any

from fastapi import APIRouter, Depends, Query

from booking_engine.api.deps import get_scheduler, get_store
from booking_engine.core.constants import CONFLICTS_RESPONSE_LIMIT
from booking_engine.core.errors import BookingEngineError, engine_error_to_http
from booking_engine.scheduler.assignment_scheduler import AssignmentScheduler
from booking_engine.services.availability.conflicts import detect_capacity_exceeded, detect_double_bookings
from booking_engine.services.storage.base import BookingStore

router = APIRouter()


@router.post("/assignment/run")
async def run_assignment(
    restaurant_id: int | None = Query(None),
    scheduler: AssignmentScheduler = Depends(get_scheduler),
) -> dict[str, Any]:
    """Run one assignment cycle now (skipped if a cycle is already in progress)."""
    report = await scheduler.run_check_now(restaurant_id=restaurant_id)
    return report.to_dict()


@router.get("/assignment/status")
def assignment_status(scheduler: AssignmentScheduler = Depends(get_scheduler)) -> dict[str, Any]:
    config = scheduler.config
    return {
        "started": scheduler.is_started,
        "running": scheduler.is_running,
        "check_interval_minutes": config.check_interval_minutes,
        "threshold_minutes": config.threshold_minutes,
        "buffer_minutes": config.buffer_minutes,
        "default_duration_minutes": config.default_duration_minutes,
        "timezone": config.timezone,
        "last_report": scheduler.last_report.to_dict() if scheduler.last_report else None,
    }


@router.get("/restaurants/{restaurant_id}/conflicts")
async def list_double_bookings(
    restaurant_id: int,
    day: date = Query(..., alias="date"),
    with_buffer: bool = Query(False, description="Apply the turnover buffer (assignment invariant) instead of plain overlap"),
    store: BookingStore = Depends(get_store),
    scheduler: AssignmentScheduler = Depends(get_scheduler),
) -> dict[str, Any]:
    """Confirmed bookings sharing a table at overlapping times on one date, plus party-size vs capacity issues."""
    try:
        bookings = await store.get_bookings_for_date(restaurant_id, day)
        tables = await store.get_tables(restaurant_id)
    except BookingEngineError as e:
        raise engine_error_to_http(e) from e
    config = scheduler.config
    found = detect_double_bookings(
        bookings,
        buffer_minutes=config.buffer_minutes if with_buffer else 0,
        default_duration_minutes=config.default_duration_minutes,
    )
    capacity_issues = detect_capacity_exceeded(bookings, tables)
    return {
        "restaurant_id": restaurant_id,
        "date": day.isoformat(),
        "count": len(found),
        "conflicts": [c.to_dict() for c in found[:CONFLICTS_RESPONSE_LIMIT]],
        "capacity_issues": [c.to_dict() for c in capacity_issues[:CONFLICTS_RESPONSE_LIMIT]],
    }
