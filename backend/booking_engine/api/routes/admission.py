"""
Admission checks for the booking path: may this slot be booked, may this booking still change.

Rejections are normal answers (200 with admissible=false and a reason), not errors.
"""
import logging
from datetime import date, datetime, time
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from booking_engine.api.deps import get_config, get_store
from booking_engine.core.assignment_config import AssignmentConfig
from booking_engine.core.errors import BookingEngineError, engine_error_to_http
from booking_engine.services.availability.admission import AdmissionValidator, load_rules, modification_window
from booking_engine.services.availability.windows import local_now, to_local_naive
from booking_engine.services.storage.base import BookingStore

router = APIRouter()
logger = logging.getLogger(__name__)

_validator = AdmissionValidator()


class AdmissionRequest(BaseModel):
    booking_date: date
    start_time: time = Field(..., description="Requested slot, HH:MM restaurant-local")
    now: datetime | None = Field(None, description="Override evaluation time; naive = restaurant-local, aware is converted. Default: current time")


@router.post("/restaurants/{restaurant_id}/admission")
async def check_admission(
    restaurant_id: int,
    body: AdmissionRequest,
    store: BookingStore = Depends(get_store),
    config: AssignmentConfig = Depends(get_config),
) -> dict[str, Any]:
    """Evaluate special periods, opening hours and cut-off for one requested slot."""
    try:
        rules = await load_rules(store, restaurant_id)
    except BookingEngineError as e:
        raise engine_error_to_http(e) from e
    now = to_local_naive(body.now, config.timezone) if body.now else local_now(config.timezone)
    result = _validator.is_admissible(rules, body.booking_date, body.start_time, now)
    if not result.admissible:
        logger.debug(
            "Admission rejected for restaurant %s at %s %s: %s",
            restaurant_id,
            body.booking_date,
            body.start_time,
            result.reason.value,
        )
    return {
        "restaurant_id": restaurant_id,
        "booking_date": body.booking_date.isoformat(),
        "start_time": body.start_time.strftime("%H:%M"),
        **result.to_dict(),
    }


@router.get("/restaurants/{restaurant_id}/bookings/{booking_id}/modification-window")
async def get_modification_window(
    restaurant_id: int,
    booking_id: int,
    now: datetime | None = Query(None),
    store: BookingStore = Depends(get_store),
    config: AssignmentConfig = Depends(get_config),
) -> dict[str, Any]:
    """Whether the guest may still modify or cancel, per the restaurant's cut-off (default 2h)."""
    try:
        booking = await store.get_booking(booking_id)
        if booking is None or booking.restaurant_id != restaurant_id:
            raise HTTPException(status_code=404, detail="Booking not found")
        cut_offs = await store.get_cut_off_times(restaurant_id)
    except BookingEngineError as e:
        raise engine_error_to_http(e) from e
    now = to_local_naive(now, config.timezone) if now else local_now(config.timezone)
    window = modification_window(
        booking.booking_date,
        booking.start_time,
        cut_offs,
        now,
        end_time=booking.end_time,
        default_duration_minutes=config.default_duration_minutes,
    )
    return {"booking_id": booking_id, **window.to_dict()}
