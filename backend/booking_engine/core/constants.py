"""
Centralized constants for the assignment scheduler and HTTP layer.

Change job IDs or limits here instead of scattering literals across main and routes.
Timing knobs (interval, threshold, buffer, duration) come from assignment_config (env-driven).
"""

# Scheduler job ID (must match the id used by AssignmentScheduler.start)
ASSIGNMENT_JOB_ID = "table_auto_assignment"

# Booking-management fallback when a restaurant has no enabled cut-off row
DEFAULT_MODIFICATION_CUTOFF_HOURS = 2

# Cap on double-booking pairs returned by GET /restaurants/{id}/conflicts
CONFLICTS_RESPONSE_LIMIT = 500
