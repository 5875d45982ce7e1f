"""Request-scoped access to the objects the app lifespan builds (store, scheduler, config)."""
from fastapi import Request

from booking_engine.core.assignment_config import AssignmentConfig
from booking_engine.scheduler.assignment_scheduler import AssignmentScheduler
from booking_engine.services.storage.base import BookingStore


def get_store(request: Request) -> BookingStore:
    return request.app.state.store


def get_scheduler(request: Request) -> AssignmentScheduler:
    return request.app.state.scheduler


def get_config(request: Request) -> AssignmentConfig:
    return request.app.state.scheduler.config
