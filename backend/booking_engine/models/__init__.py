from booking_engine.models.assignment_log import AssignmentLog
from booking_engine.models.availability_rules import CutOffTime, OpeningHours, SpecialPeriod
from booking_engine.models.booking import Booking
from booking_engine.models.dining_table import DiningTable
from booking_engine.models.tenant import Restaurant, Tenant

__all__ = [
    "AssignmentLog",
    "Booking",
    "CutOffTime",
    "DiningTable",
    "OpeningHours",
    "Restaurant",
    "SpecialPeriod",
    "Tenant",
]
