"""
Table auto-assignment config. .env is the source of truth; these defaults apply only when
the env var is unset. All values read at import time.

Env vars: ASSIGNMENT_CHECK_INTERVAL_MINUTES, ASSIGNMENT_THRESHOLD_MINUTES,
CONFLICT_BUFFER_MINUTES, DEFAULT_BOOKING_DURATION_MINUTES, ASSIGNMENT_TIMEZONE,
ASSIGNMENT_ENABLED.

The scheduler never reads these module globals itself: main.py builds an AssignmentConfig
snapshot and passes it to the constructor, so tests can hand in their own values.
"""
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

# Load backend/.env so scripts/tests that import this module see the same values as the app
_backend_dir = Path(__file__).resolve().parent.parent.parent
_env_path = _backend_dir / ".env"
_env_paths = [_env_path]
if Path.cwd() != _backend_dir:
    _env_paths.extend([Path.cwd() / ".env", Path.cwd() / "backend" / ".env"])
for _p in _env_paths:
    if _p.exists():
        load_dotenv(_p, override=False)
        break

_log = logging.getLogger(__name__)

DEFAULT_TIMEZONE = "Europe/Berlin"


def _int(key: str, default: int, min_val: int | None = None, max_val: int | None = None) -> int:
    raw = os.environ.get(key)
    if raw is None:
        v = default
    else:
        try:
            v = int(raw.strip())
        except ValueError:
            v = default
    if min_val is not None and v < min_val:
        v = min_val
    if max_val is not None and v > max_val:
        v = max_val
    return v


def _bool(key: str, default: bool) -> bool:
    raw = os.environ.get(key)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() not in ("0", "false", "no", "off")


def _timezone(key: str, default: str) -> str:
    name = (os.environ.get(key) or "").strip() or default
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        _log.warning("Unknown %s=%r; falling back to %s", key, name, default)
        return default
    return name


# -----------------------------------------------------------------------------
# Scheduler cadence and lookahead (.env is source of truth)
# -----------------------------------------------------------------------------
ASSIGNMENT_CHECK_INTERVAL_MINUTES = _int("ASSIGNMENT_CHECK_INTERVAL_MINUTES", 5, min_val=1, max_val=60)
ASSIGNMENT_THRESHOLD_MINUTES = _int("ASSIGNMENT_THRESHOLD_MINUTES", 120, min_val=1, max_val=24 * 60)
ASSIGNMENT_ENABLED = _bool("ASSIGNMENT_ENABLED", True)

# -----------------------------------------------------------------------------
# Overlap math: turnover buffer and default seating length
# -----------------------------------------------------------------------------
CONFLICT_BUFFER_MINUTES = _int("CONFLICT_BUFFER_MINUTES", 30, min_val=0, max_val=240)
DEFAULT_BOOKING_DURATION_MINUTES = _int("DEFAULT_BOOKING_DURATION_MINUTES", 120, min_val=15, max_val=12 * 60)

# Booking dates/times are restaurant-local wall clock; "now" is taken in this zone
ASSIGNMENT_TIMEZONE = _timezone("ASSIGNMENT_TIMEZONE", DEFAULT_TIMEZONE)

_log.info(
    "Assignment config (from env): interval_min=%s threshold_min=%s buffer_min=%s "
    "duration_min=%s timezone=%s enabled=%s",
    ASSIGNMENT_CHECK_INTERVAL_MINUTES,
    ASSIGNMENT_THRESHOLD_MINUTES,
    CONFLICT_BUFFER_MINUTES,
    DEFAULT_BOOKING_DURATION_MINUTES,
    ASSIGNMENT_TIMEZONE,
    ASSIGNMENT_ENABLED,
)


@dataclass(frozen=True)
class AssignmentConfig:
    """Snapshot of assignment config for passing around (e.g. tests)."""
    check_interval_minutes: int = 5
    threshold_minutes: int = 120
    buffer_minutes: int = 30
    default_duration_minutes: int = 120
    timezone: str = DEFAULT_TIMEZONE
    enabled: bool = True


def get_assignment_config() -> AssignmentConfig:
    return AssignmentConfig(
        check_interval_minutes=ASSIGNMENT_CHECK_INTERVAL_MINUTES,
        threshold_minutes=ASSIGNMENT_THRESHOLD_MINUTES,
        buffer_minutes=CONFLICT_BUFFER_MINUTES,
        default_duration_minutes=DEFAULT_BOOKING_DURATION_MINUTES,
        timezone=ASSIGNMENT_TIMEZONE,
        enabled=ASSIGNMENT_ENABLED,
    )
