"""
Single source of truth for database tables created by migration 001.

Use these names when writing raw SQL (e.g. TRUNCATE in scripts). Keep in sync with models.
"""
ALL_TABLE_NAMES = (
    "tenants",
    "restaurants",
    "tables",
    "bookings",
    "opening_hours",
    "special_periods",
    "cut_off_times",
    "assignment_logs",
)
