"""
Availability: admission rules and table conflict math.

- types: typed records (Table, Booking, rules, results).
- windows: minute-of-day windows and clock helpers.
- admission: AdmissionValidator (may this slot be booked at all).
- conflicts: ConflictDetector (is a table free; best-fit table) and double-booking audit.
"""
from booking_engine.services.availability.admission import AdmissionValidator, modification_window
from booking_engine.services.availability.conflicts import ConflictDetector, detect_double_bookings

__all__ = ["AdmissionValidator", "ConflictDetector", "detect_double_bookings", "modification_window"]
