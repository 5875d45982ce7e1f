"""
Minute-of-day arithmetic shared by admission and conflict detection.

Windows are half-open [start, end) in minutes since midnight of the booking date. A window
may extend past 1440 when a booking runs over midnight; comparisons stay on one axis
because every booking checked against another belongs to the same date.
"""
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo

MINUTES_PER_DAY = 24 * 60


def time_to_minutes(t: time) -> int:
    return t.hour * 60 + t.minute


def minutes_to_time(minutes: int) -> time:
    """Inverse of time_to_minutes; wraps values past midnight onto the clock face."""
    minutes %= MINUTES_PER_DAY
    return time(minutes // 60, minutes % 60)


def parse_time(value: str | time) -> time:
    """'HH:MM' or 'HH:MM:SS' (as stored by the booking widget) -> time."""
    if isinstance(value, time):
        return value
    raw = (value or "").strip()
    parts = raw.split(":")
    if len(parts) not in (2, 3):
        raise ValueError(f"Invalid time {value!r}. Use HH:MM.")
    try:
        hours, minutes = int(parts[0]), int(parts[1])
        seconds = int(parts[2]) if len(parts) == 3 else 0
        return time(hours, minutes, seconds)
    except ValueError as e:
        raise ValueError(f"Invalid time {value!r}. Use HH:MM.") from e


def format_time(t: time) -> str:
    return t.strftime("%H:%M")


@dataclass(frozen=True)
class TimeWindow:
    start: int
    end: int

    def __post_init__(self):
        if self.end <= self.start:
            raise ValueError(f"Window end {self.end} must be after start {self.start}")

    def overlaps(self, other: "TimeWindow") -> bool:
        return self.start < other.end and other.start < self.end

    def expand(self, buffer_minutes: int) -> "TimeWindow":
        return TimeWindow(self.start - buffer_minutes, self.end + buffer_minutes)

    def intersection(self, other: "TimeWindow") -> "TimeWindow | None":
        start, end = max(self.start, other.start), min(self.end, other.end)
        return TimeWindow(start, end) if start < end else None

    def __str__(self) -> str:
        return f"{format_time(minutes_to_time(self.start))}-{format_time(minutes_to_time(self.end))}"


def window_for(start_time: time, end_time: time | None, default_duration: int) -> TimeWindow:
    start = time_to_minutes(start_time)
    if end_time is None:
        return TimeWindow(start, start + default_duration)
    end = time_to_minutes(end_time)
    if end <= start:
        # Runs past midnight
        end += MINUTES_PER_DAY
    return TimeWindow(start, end)


def booking_window(booking, default_duration: int) -> TimeWindow:
    return window_for(booking.start_time, booking.end_time, default_duration)


def slot_datetime(day: date, t: time) -> datetime:
    return datetime.combine(day, t)


def minutes_until(day: date, t: time, now: datetime) -> float:
    """Minutes from now until the slot starts, fractional, negative once it has started.

    now must be naive restaurant-local time, the same clock the slot is written in.
    """
    delta: timedelta = slot_datetime(day, t) - now
    return delta.total_seconds() / 60


def local_now(timezone_name: str) -> datetime:
    """Current wall-clock time in the restaurant zone, naive (same clock as booking dates/times)."""
    return datetime.now(ZoneInfo(timezone_name)).replace(tzinfo=None)


def to_local_naive(value: datetime, timezone_name: str) -> datetime:
    """Aware datetimes are converted to restaurant-local wall clock; naive ones are taken as already local."""
    if value.tzinfo is None:
        return value
    return value.astimezone(ZoneInfo(timezone_name)).replace(tzinfo=None)


def weekday_index(day: date) -> int:
    """0 = Sunday .. 6 = Saturday, the numbering used by opening_hours and cut_off_times."""
    return day.isoweekday() % 7


def time_in_range(t: time, open_time: time, close_time: time) -> bool:
    """Inclusive bounds. close < open is an overnight window (e.g. 18:00-02:00)."""
    if open_time <= close_time:
        return open_time <= t <= close_time
    return t >= open_time or t <= close_time
