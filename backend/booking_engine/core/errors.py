"""
Centralized error types for the assignment engine and their HTTP mapping.
Constants and a reusable helper so routes stay thin and new error types are easy to add.

Admission rejections are not errors: AdmissionValidator returns them as results.
"""
from __future__ import annotations

from typing import Callable

from fastapi import HTTPException


class BookingEngineError(Exception):
    """Base class for failures raised by the assignment engine and its storage."""


class NoCapacityAvailable(BookingEngineError):
    """No active table seats the party at all. Retried next cycle (tables/cancellations change)."""

    def __init__(self, booking_id: int, party_size: int):
        super().__init__(f"No table seats {party_size} guests for booking {booking_id}")
        self.booking_id = booking_id
        self.party_size = party_size


class AllCandidatesConflicted(BookingEngineError):
    """Tables with enough seats exist but every one overlaps an existing booking."""

    def __init__(self, booking_id: int, table_ids: list[int]):
        super().__init__(f"All {len(table_ids)} candidate tables conflict for booking {booking_id}")
        self.booking_id = booking_id
        self.table_ids = table_ids


class StorageUnavailable(BookingEngineError):
    """Any failure from the storage collaborator."""


class BookingNotFound(BookingEngineError):
    def __init__(self, booking_id: int):
        super().__init__(f"Booking {booking_id} not found")
        self.booking_id = booking_id


# ---------------------------------------------------------------------------
# Constants: status codes and user-facing messages
# ---------------------------------------------------------------------------

STATUS_NOT_FOUND = 404
STATUS_SERVICE_UNAVAILABLE = 503  # database down, pool exhausted
STATUS_INTERNAL_ERROR = 500

MSG_STORAGE_UNAVAILABLE = "Booking storage is temporarily unavailable. Try again shortly."


# ---------------------------------------------------------------------------
# Error rules: (predicate, status_code, detail_message or None to use str(exc))
# Add new rules here instead of scattering checks in routes.
# ---------------------------------------------------------------------------

ENGINE_ERROR_RULES: list[tuple[Callable[[Exception], bool], int, str | None]] = [
    (lambda e: isinstance(e, StorageUnavailable), STATUS_SERVICE_UNAVAILABLE, MSG_STORAGE_UNAVAILABLE),
    (lambda e: isinstance(e, BookingNotFound), STATUS_NOT_FOUND, None),
]


def engine_error_to_http(exc: Exception) -> HTTPException:
    """
    Map an exception from the engine or store into an HTTPException.
    Uses ENGINE_ERROR_RULES for known error types; otherwise returns 500 with the exception message.
    """
    for predicate, status_code, detail in ENGINE_ERROR_RULES:
        if predicate(exc):
            return HTTPException(status_code=status_code, detail=detail or str(exc))
    return HTTPException(status_code=STATUS_INTERNAL_ERROR, detail=str(exc))
